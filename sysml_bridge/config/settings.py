"""
Configuration and Feature Flags for the Mapping Engine

Flags and settings are controlled via environment variables so behavior can
be toggled without code changes.

Usage:
    from sysml_bridge.config.settings import is_enabled, get_setting

    if is_enabled('lenient_value_parsing'):
        # Skip the malformed parameter value, keep the pass going
        ...

    tool_name = get_setting('tool_name')

Environment Variables:
    SYSML_BRIDGE_LENIENT_VALUES=true/false - Skip malformed parameter values
                                             instead of aborting the pass
    SYSML_BRIDGE_TOOL_NAME=<name>          - Tool name written into
                                             external identifier maps
    SYSML_BRIDGE_MAP_DIR=<path>            - Directory holding persisted
                                             external identifier maps
"""

import os
from typing import Dict


# Feature flags with environment variable overrides
FEATURE_FLAGS: Dict[str, bool] = {
    # Malformed numeric/boolean values abort the whole pass unless enabled
    'lenient_value_parsing': os.getenv('SYSML_BRIDGE_LENIENT_VALUES', 'false').lower() == 'true',
}

SETTINGS: Dict[str, str] = {
    'tool_name': os.getenv('SYSML_BRIDGE_TOOL_NAME', 'sysml-bridge'),
    'map_directory': os.getenv('SYSML_BRIDGE_MAP_DIR', '.sysml_bridge/maps'),
}


def is_enabled(flag: str) -> bool:
    """
    Check if a feature flag is enabled.

    Args:
        flag: Feature flag name (e.g., 'lenient_value_parsing')

    Returns:
        True if flag is enabled, False otherwise

    Raises:
        KeyError: If flag name is not recognized

    Example:
        >>> is_enabled('lenient_value_parsing')
        False  # Default
    """
    if flag not in FEATURE_FLAGS:
        available = ', '.join(FEATURE_FLAGS.keys())
        raise KeyError(
            f"Unknown feature flag: '{flag}'. "
            f"Available flags: {available}"
        )

    return FEATURE_FLAGS[flag]


def get_all_flags() -> Dict[str, bool]:
    """
    Get all feature flags and their current state.

    Returns:
        Dictionary of flag names to boolean values
    """
    return FEATURE_FLAGS.copy()


def set_flag(flag: str, enabled: bool) -> None:
    """
    Programmatically set a feature flag (for testing only).

    Args:
        flag: Feature flag name
        enabled: True to enable, False to disable

    Warning:
        This is for testing only. In production, use environment variables.
    """
    if flag not in FEATURE_FLAGS:
        available = ', '.join(FEATURE_FLAGS.keys())
        raise KeyError(
            f"Unknown feature flag: '{flag}'. "
            f"Available flags: {available}"
        )

    FEATURE_FLAGS[flag] = enabled


def get_setting(name: str) -> str:
    """
    Get a setting value.

    Args:
        name: Setting name (e.g., 'tool_name', 'map_directory')

    Returns:
        The configured value

    Raises:
        KeyError: If setting name is not recognized
    """
    if name not in SETTINGS:
        available = ', '.join(SETTINGS.keys())
        raise KeyError(
            f"Unknown setting: '{name}'. "
            f"Available settings: {available}"
        )

    return SETTINGS[name]


def set_setting(name: str, value: str) -> None:
    """Programmatically override a setting (for testing only)."""
    if name not in SETTINGS:
        available = ', '.join(SETTINGS.keys())
        raise KeyError(
            f"Unknown setting: '{name}'. "
            f"Available settings: {available}"
        )

    SETTINGS[name] = value
