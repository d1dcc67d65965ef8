"""Invariant Analyzer - topological health metrics for a symbol graph.

Computes, as a pure function of (graph, layer config):
- betti_0: weakly connected components
- betti_1: independent cycles, E - V + betti_0
- cycles_detected: strongly connected components that form cycles
- triangle_count: 3-cliques, direction ignored
- coupling_score: E / (V * (V - 1))
- layer_violations: edges crossing layers in a disallowed direction
- solid_score: composite 0-100 health score
"""

import networkx as nx
import structlog

from archguard.config import TopologySettings, get_settings
from archguard.graph.base import GraphView
from archguard.models import (
    Edge,
    InvariantReport,
    Layer,
    LayerConfig,
    LayerViolation,
    ViolationKind,
)

from .algorithms import (
    connected_components,
    count_triangles,
    enumerate_elementary_cycles,
    find_cycles,
    to_digraph,
    undirected_edge_count,
)

logger = structlog.get_logger()


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


class InvariantAnalyzer:
    """Computes ``InvariantReport``s. Holds only settings, so it is safe to share."""

    def __init__(self, settings: TopologySettings | None = None):
        self.settings = settings or get_settings()
        self._logger = logger.bind(component="InvariantAnalyzer")

    def analyze(
        self,
        graph: GraphView,
        layer_config: LayerConfig | None = None,
    ) -> InvariantReport:
        """Analyze a graph, projection or overlay.

        Args:
            graph: The graph to analyze (never modified)
            layer_config: Optional layering rules; without it no layer
                violations are reported

        Returns:
            InvariantReport for the graph
        """
        digraph = to_digraph(graph)
        node_count = digraph.number_of_nodes()
        edge_count = undirected_edge_count(digraph)
        betti_0 = connected_components(digraph)
        betti_1 = max(edge_count - node_count + betti_0, 0)

        cycles = find_cycles(digraph)
        triangle_count = self._count_triangles(digraph, node_count)
        coupling_score = self.coupling_score(edge_count, node_count)

        layer_violations: list[LayerViolation] = []
        if layer_config is not None:
            layer_violations = self.layer_violations(graph, layer_config, cycles)

        solid_score = self.solid_score(betti_1, coupling_score, len(layer_violations))

        self._logger.debug(
            "Graph analyzed",
            nodes=node_count,
            edges=edge_count,
            betti_0=betti_0,
            betti_1=betti_1,
            cycles=len(cycles),
            violations=len(layer_violations),
            solid_score=solid_score,
        )

        return InvariantReport(
            betti_0=betti_0,
            betti_1=betti_1,
            triangle_count=triangle_count,
            coupling_score=coupling_score,
            solid_score=solid_score,
            cycles_detected=cycles,
            layer_violations=layer_violations,
            node_count=node_count,
            edge_count=edge_count,
        )

    def _count_triangles(self, digraph: nx.DiGraph, node_count: int) -> int:
        if node_count > self.settings.triangle_node_cap:
            self._logger.warning(
                "Skipping triangle count",
                nodes=node_count,
                cap=self.settings.triangle_node_cap,
            )
            return 0
        return count_triangles(digraph)

    @staticmethod
    def coupling_score(edge_count: int, node_count: int) -> float:
        if node_count <= 1:
            return 0.0
        return edge_count / (node_count * (node_count - 1))

    def solid_score(self, betti_1: int, coupling_score: float, violation_count: int) -> float:
        """Composite health score in [0, 100]; 100 means no cycles, coupling or violations."""
        s = self.settings
        score = (
            100.0
            - _clamp(betti_1 * s.cycle_penalty, 0.0, s.cycle_penalty_cap)
            - _clamp(coupling_score * 100.0 * s.coupling_penalty, 0.0, s.coupling_penalty_cap)
            - _clamp(violation_count * s.violation_penalty, 0.0, s.violation_penalty_cap)
        )
        return round(max(score, 0.0), 4)

    def layer_violations(
        self,
        graph: GraphView,
        layer_config: LayerConfig,
        cycles: list[list[str]] | None = None,
    ) -> list[LayerViolation]:
        """Upstream dependencies, plus one ``cycle`` violation per cross-layer cycle."""
        layers: dict[str, Layer | None] = {
            symbol.id: layer_config.layer_for(symbol) for symbol in graph.symbols()
        }
        ordered_edges = sorted(graph.edges(), key=lambda e: (e.source_id, e.target_id, e.kind.value))

        violations: dict[LayerViolation, None] = {}
        for edge in ordered_edges:
            from_layer, to_layer = layers.get(edge.source_id), layers.get(edge.target_id)
            if from_layer is None or to_layer is None:
                continue
            if not from_layer.may_depend_on(to_layer):
                violations[self._violation(edge, from_layer, to_layer, ViolationKind.UPSTREAM_DEPENDENCY)] = None

        if cycles is None:
            cycles = find_cycles(graph)
        cycle_of = {
            symbol_id: index for index, cycle in enumerate(cycles) for symbol_id in cycle
        }
        crossing: dict[int, LayerViolation] = {}
        for edge in ordered_edges:
            index = cycle_of.get(edge.source_id)
            if index is None or index in crossing or cycle_of.get(edge.target_id) != index:
                continue
            from_layer, to_layer = layers.get(edge.source_id), layers.get(edge.target_id)
            if from_layer is None or to_layer is None or from_layer.name == to_layer.name:
                continue
            crossing[index] = self._violation(edge, from_layer, to_layer, ViolationKind.CYCLE)

        for index in sorted(crossing):
            violations[crossing[index]] = None

        return list(violations)

    @staticmethod
    def _violation(edge: Edge, from_layer: Layer, to_layer: Layer, kind: ViolationKind) -> LayerViolation:
        return LayerViolation(
            from_id=edge.source_id,
            from_layer=from_layer.name,
            to_id=edge.target_id,
            to_layer=to_layer.name,
            violation_kind=kind,
        )

    def enumerate_cycles(self, graph: GraphView) -> list[list[str]]:
        """Elementary cycles per SCC, capped by the configured length and count.

        Finer grained than ``cycles_detected``, which reports each SCC once.
        """
        digraph = to_digraph(graph)
        cycles: list[list[str]] = []
        for component in find_cycles(digraph):
            if len(component) == 1:
                cycles.append(component)
                continue
            cycles.extend(
                enumerate_elementary_cycles(
                    digraph,
                    component,
                    max_length=self.settings.max_cycle_length,
                    max_cycles=self.settings.max_cycles_per_component,
                )
            )
        return cycles


def analyze(
    graph: GraphView,
    layer_config: LayerConfig | None = None,
    settings: TopologySettings | None = None,
) -> InvariantReport:
    """Analyze a graph with a default ``InvariantAnalyzer``."""
    return InvariantAnalyzer(settings).analyze(graph, layer_config)
