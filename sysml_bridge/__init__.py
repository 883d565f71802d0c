"""
sysml-bridge - maps engineering models onto SysML design models.

Element definitions and requirements of an engineering model are mapped onto
blocks, value properties, ports and interfaces of a design model, and the
correspondences between the two are kept in external identifier maps.
"""

__version__ = "0.1.0"
