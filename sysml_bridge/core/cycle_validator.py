"""
Cycle validation for the design model.

Builds a directed dependency graph from the design model and reports the
elements that sit on a containment or dependency cycle. Mapping load
excludes these elements.

Edges:
    block -> type of each part/value property that is a class
    block -> nested class in owned elements
    block -> type of each owned port
    usage client -> usage supplier
    realizing classifier -> realized interface
"""

import logging
from typing import Dict, List, Set

import networkx as nx

from ..models.design import Class, InterfaceRealization, Property, Usage

logger = logging.getLogger(__name__)


class CycleValidator:
    """Reports design elements on containment/dependency cycles."""

    def __init__(self, design_model):
        self.design_model = design_model

    def build_graph(self) -> nx.DiGraph:
        graph = nx.DiGraph()

        for element in self.design_model.all_elements():
            if isinstance(element, Class):
                graph.add_node(element.id, name=element.name)

                for attribute in element.owned_attributes:
                    if isinstance(attribute.type, Class):
                        graph.add_edge(element.id, attribute.type.id, kind="type")

                for owned in element.owned_elements:
                    if isinstance(owned, Class):
                        graph.add_edge(element.id, owned.id, kind="containment")
                    elif isinstance(owned, Property) and isinstance(owned.type, Class):
                        graph.add_edge(element.id, owned.type.id, kind="port")

            elif isinstance(element, Usage):
                for client in element.clients:
                    for supplier in element.suppliers:
                        graph.add_edge(client.id, supplier.id, kind="usage")

            elif isinstance(element, InterfaceRealization):
                if element.implementing_classifier is not None and element.contract is not None:
                    graph.add_edge(element.implementing_classifier.id, element.contract.id,
                                   kind="realization")

        return graph

    def get_invalid_paths(self) -> Set[str]:
        """Ids of every element that participates in a cycle."""
        graph = self.build_graph()
        invalid: Set[str] = set()

        for component in nx.strongly_connected_components(graph):
            if len(component) > 1:
                invalid.update(component)
            else:
                node = next(iter(component))
                if graph.has_edge(node, node):
                    invalid.add(node)

        if invalid:
            logger.info(f"Cycle validation found {len(invalid)} element(s) on cyclic paths")

        return invalid

    def get_cycles(self) -> Dict[str, List[List[str]]]:
        """Cycles (as id paths) keyed by each participating element id."""
        graph = self.build_graph()
        cycles: Dict[str, List[List[str]]] = {}

        for cycle in nx.simple_cycles(graph):
            for node in cycle:
                cycles.setdefault(node, []).append(cycle)

        return cycles
