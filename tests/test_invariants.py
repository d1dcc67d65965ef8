"""Tests for the Invariant Analyzer and the graph algorithms behind it."""

import pytest

from archguard.analysis import (
    InvariantAnalyzer,
    analyze,
    connected_components,
    count_triangles,
    enumerate_elementary_cycles,
    find_cycles,
    strongly_connected_components,
    to_digraph,
)
from archguard.config import TopologySettings
from archguard.graph import GraphBuilder, OverlayGraph
from archguard.models import Edge, EdgeKind, LayerConfig, ViolationKind


class TestAlgorithms:
    """Tests for the standalone graph algorithms."""

    def test_digraph_merges_parallel_kinds(self, symbol_factory):
        graph = GraphBuilder().build(
            [symbol_factory("A"), symbol_factory("B")],
            [
                Edge(source_id="A", target_id="B", kind=EdgeKind.CALLS, strength=0.4),
                Edge(source_id="A", target_id="B", kind=EdgeKind.IMPORTS, strength=0.8),
            ],
        )

        digraph = to_digraph(graph)

        assert list(digraph.nodes) == ["A", "B"]
        assert digraph.number_of_edges() == 1
        assert digraph["A"]["B"]["strength"] == 0.8
        assert digraph["A"]["B"]["kinds"] == {"calls", "imports"}

    def test_digraph_from_overlay(self, chain_graph, symbol_factory):
        overlay = OverlayGraph(chain_graph)
        overlay.remove_symbol("B")
        overlay.add_symbol(symbol_factory("D"))
        overlay.add_edge(Edge(source_id="C", target_id="D"))

        digraph = to_digraph(overlay)

        assert sorted(digraph.nodes) == ["A", "C", "D"]
        assert list(digraph.edges) == [("C", "D")]

    def test_connected_components(self, graph_factory):
        graph = graph_factory(["A", "B", "C", "D"], [("A", "B"), ("C", "D")])

        assert connected_components(graph) == 2

    def test_scc_on_cycle(self, cycle_graph):
        components = strongly_connected_components(cycle_graph)

        assert len(components) == 1
        assert sorted(components[0]) == ["A", "B", "C"]

    def test_find_cycles_ignores_dags(self, chain_graph):
        assert find_cycles(chain_graph) == []

    def test_find_cycles_self_loop(self, graph_factory):
        graph = graph_factory(["A", "B"], [("A", "A"), ("A", "B")])

        assert find_cycles(graph) == [["A"]]

    def test_find_cycles_sorted(self, graph_factory):
        graph = graph_factory(
            ["A", "B", "C", "D", "E"],
            [("D", "E"), ("E", "D"), ("C", "A"), ("A", "B"), ("B", "C")],
        )

        assert find_cycles(graph) == [["A", "B", "C"], ["D", "E"]]

    def test_deep_chain_does_not_recurse(self, graph_factory):
        """SCC detection on a long chain stays iterative."""
        ids = [f"n{i:05d}" for i in range(5000)]
        edges = list(zip(ids, ids[1:])) + [(ids[-1], ids[0])]
        graph = graph_factory(ids, edges)

        assert find_cycles(graph) == [sorted(ids)]

    def test_count_triangles(self, graph_factory):
        graph = graph_factory(
            ["A", "B", "C", "D"],
            [("A", "B"), ("B", "C"), ("C", "A"), ("C", "D")],
        )

        assert count_triangles(graph) == 1

    def test_triangle_ignores_direction_and_duplicates(self, graph_factory):
        graph = graph_factory(
            ["A", "B", "C"],
            [("A", "B"), ("B", "A"), ("A", "C"), ("B", "C")],
        )

        assert count_triangles(graph) == 1

    def test_elementary_cycles(self, graph_factory):
        graph = graph_factory(
            ["A", "B", "C"],
            [("A", "B"), ("B", "A"), ("B", "C"), ("C", "A")],
        )

        cycles = enumerate_elementary_cycles(graph, ["A", "B", "C"], max_length=8, max_cycles=10)

        assert sorted(cycles) == [["A", "B"], ["A", "B", "C"]]

    def test_elementary_cycles_capped(self, graph_factory):
        graph = graph_factory(
            ["A", "B", "C"],
            [("A", "B"), ("B", "A"), ("B", "C"), ("C", "A")],
        )

        assert len(enumerate_elementary_cycles(graph, ["A", "B", "C"], 8, 1)) == 1
        assert enumerate_elementary_cycles(graph, ["A", "B", "C"], 2, 10) == [["A", "B"]]


class TestBettiNumbers:
    """Tests for Betti_0 / Betti_1."""

    def test_tree_has_no_cycles(self, chain_graph):
        """Scenario: A -> B -> C."""
        report = analyze(chain_graph)

        assert report.betti_0 == 1
        assert report.betti_1 == 0
        assert report.cycles_detected == []

    @pytest.mark.parametrize("n", [3, 4, 7])
    def test_n_cycle(self, graph_factory, n):
        ids = [f"S{i}" for i in range(n)]
        edges = [(ids[i], ids[(i + 1) % n]) for i in range(n)]

        report = analyze(graph_factory(ids, edges))

        assert report.betti_0 == 1
        assert report.betti_1 == 1
        assert report.cycles_detected == [sorted(ids)]

    def test_forest(self, graph_factory):
        report = analyze(graph_factory(["A", "B", "C", "D", "E"], [("A", "B"), ("C", "D")]))

        assert report.betti_0 == 3
        assert report.betti_1 == 0

    def test_mutual_edges_are_a_cycle_but_not_a_betti_1_loop(self, graph_factory):
        """A -> B and B -> A share one undirected pair."""
        report = analyze(graph_factory(["A", "B"], [("A", "B"), ("B", "A")]))

        assert report.edge_count == 1
        assert report.betti_1 == 0
        assert report.cycles_detected == [["A", "B"]]

    def test_self_loop_counts_once(self, graph_factory):
        report = analyze(graph_factory(["A"], [("A", "A")]))

        assert report.betti_1 == 1
        assert report.cycles_detected == [["A"]]

    def test_empty_graph(self, graph_factory):
        report = analyze(graph_factory([], []))

        assert report.betti_0 == 0
        assert report.betti_1 == 0
        assert report.coupling_score == 0.0
        assert report.solid_score == 100.0

    def test_analysis_is_pure(self, cycle_graph):
        """Same input, same report, graph unchanged."""
        before = (cycle_graph.symbol_count, cycle_graph.edge_count)

        first = analyze(cycle_graph)
        second = analyze(cycle_graph)

        assert first == second
        assert (cycle_graph.symbol_count, cycle_graph.edge_count) == before


class TestScores:
    """Tests for coupling and solid score, pinned to the default weights."""

    def test_coupling_score(self):
        assert InvariantAnalyzer.coupling_score(2, 3) == pytest.approx(2 / 6)
        assert InvariantAnalyzer.coupling_score(0, 1) == 0.0

    def test_solid_score_chain(self, chain_graph, settings):
        # coupling = 2 / 6, penalty = 33.33 * 0.5
        report = InvariantAnalyzer(settings).analyze(chain_graph)

        assert report.solid_score == pytest.approx(83.3333)

    def test_solid_score_cycle(self, cycle_graph, settings):
        # 100 - 5 (one cycle) - 25 (coupling 3 / 6 * 100 * 0.5)
        report = InvariantAnalyzer(settings).analyze(cycle_graph)

        assert report.solid_score == pytest.approx(70.0)

    def test_solid_score_caps(self, settings):
        analyzer = InvariantAnalyzer(settings)

        assert analyzer.solid_score(betti_1=100, coupling_score=1.0, violation_count=100) == 0.0
        assert analyzer.solid_score(betti_1=0, coupling_score=0.0, violation_count=0) == 100.0
        assert analyzer.solid_score(betti_1=2, coupling_score=0.0, violation_count=1) == 80.0

    def test_custom_weights(self, cycle_graph):
        settings = TopologySettings(cycle_penalty=10.0, coupling_penalty=0.0)

        report = InvariantAnalyzer(settings).analyze(cycle_graph)

        assert report.solid_score == 90.0

    def test_triangle_cap(self, cycle_graph):
        settings = TopologySettings(triangle_node_cap=2)

        report = InvariantAnalyzer(settings).analyze(cycle_graph)

        assert report.triangle_count == 0
        assert analyze(cycle_graph).triangle_count == 1


class TestLayerViolations:
    """Tests for layer rule checking."""

    def test_clean_layering(self, layered_graph, layered_config):
        report = analyze(layered_graph, layered_config)

        assert report.layer_violations == []

    def test_upstream_dependency(self, layered_graph, layered_config, symbol_factory):
        """Scenario: a Data symbol depending on a UI symbol."""
        graph = GraphBuilder().build(
            list(layered_graph.symbols()),
            list(layered_graph.edges())
            + [Edge(source_id="src/data/repo.py::Repo", target_id="src/ui/button.py::Button")],
        )

        report = analyze(graph, layered_config)

        assert len(report.layer_violations) == 1
        violation = report.layer_violations[0]
        assert violation.from_layer == "Data"
        assert violation.to_layer == "UI"
        assert violation.violation_kind == ViolationKind.UPSTREAM_DEPENDENCY
        assert report.solid_score < analyze(layered_graph, layered_config).solid_score

    def test_no_config_no_violations(self, layered_graph):
        assert analyze(layered_graph).layer_violations == []

    def test_unlayered_symbols_ignored(self, layered_config, graph_factory):
        graph = graph_factory(["A", "B"], [("A", "B")])

        assert analyze(graph, layered_config).layer_violations == []

    def test_same_layer_always_allowed(self, layered_config, symbol_factory):
        graph = GraphBuilder().build(
            [symbol_factory("src/ui/a.py::A"), symbol_factory("src/ui/b.py::B")],
            [Edge(source_id="src/ui/a.py::A", target_id="src/ui/b.py::B")],
        )

        assert analyze(graph, layered_config).layer_violations == []

    def test_cross_layer_cycle(self, layered_config, symbol_factory):
        graph = GraphBuilder().build(
            [symbol_factory("src/ui/a.py::A"), symbol_factory("src/logic/b.py::B")],
            [
                Edge(source_id="src/logic/b.py::B", target_id="src/ui/a.py::A"),
                Edge(source_id="src/ui/a.py::A", target_id="src/logic/b.py::B"),
            ],
        )

        report = analyze(graph, layered_config)
        kinds = [v.violation_kind for v in report.layer_violations]

        assert kinds == [ViolationKind.UPSTREAM_DEPENDENCY, ViolationKind.CYCLE]
        assert report.layer_violations[1].from_id == "src/logic/b.py::B"

    def test_one_cycle_violation_per_cycle(self, layered_config, symbol_factory):
        ids = ["src/ui/a.py::A", "src/logic/b.py::B", "src/logic/c.py::C", "src/data/d.py::D"]
        pairs = [(ids[0], ids[1]), (ids[1], ids[0]), (ids[2], ids[3]), (ids[3], ids[2])]
        graph = GraphBuilder().build(
            [symbol_factory(symbol_id) for symbol_id in ids],
            [Edge(source_id=source, target_id=target) for source, target in pairs],
        )

        violations = analyze(graph, layered_config).layer_violations
        cycle_violations = [v for v in violations if v.violation_kind == ViolationKind.CYCLE]

        assert len(violations) == 4
        assert [v.from_id for v in cycle_violations] == ["src/data/d.py::D", "src/logic/b.py::B"]

    def test_explicit_members(self, symbol_factory):
        config = LayerConfig(
            layers=(
                {"name": "core", "level": 0, "members": ["A"]},
                {"name": "app", "level": 1, "allowed_deps": ["core"], "members": ["B"]},
            )
        )
        graph = GraphBuilder().build(
            [symbol_factory("A"), symbol_factory("B")],
            [Edge(source_id="A", target_id="B")],
        )

        violations = analyze(graph, config).layer_violations

        assert [(v.from_layer, v.to_layer) for v in violations] == [("core", "app")]


class TestEnumerateCycles:
    """Tests for capped elementary cycle reporting."""

    def test_enumerate_cycles(self, graph_factory, settings):
        graph = graph_factory(
            ["A", "B", "C", "D"],
            [("A", "B"), ("B", "A"), ("B", "C"), ("C", "A"), ("D", "D")],
        )

        cycles = InvariantAnalyzer(settings).enumerate_cycles(graph)

        assert sorted(cycles) == [["A", "B"], ["A", "B", "C"], ["D"]]
