"""Configuration for sysml-bridge."""

from .settings import get_all_flags, get_setting, is_enabled, set_flag, set_setting

__all__ = [
    'get_all_flags',
    'get_setting',
    'is_enabled',
    'set_flag',
    'set_setting',
]
