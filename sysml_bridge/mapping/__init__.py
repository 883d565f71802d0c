"""
Mapping rules between the engineering model and the design model.
"""

from .configuration import MappingConfigurationService
from .context import MappingContext
from .element_resolver import ElementResolver
from .state_mapping import StateMappingRule
from .structural_mapper import StructuralMapper

__all__ = [
    'StructuralMapper',
    'MappingConfigurationService',
    'MappingContext',
    'ElementResolver',
    'StateMappingRule',
]
