"""Tests for the generation-swapping graph workspace."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from archguard.exceptions import GraphBuildError
from archguard.graph import SymbolGraph
from archguard.models import Edge, Edit
from archguard.workspace import GraphWorkspace


class TestGenerations:
    """Tests for atomic graph replacement."""

    def test_starts_at_generation_zero(self, workspace, chain_graph):
        generation = workspace.current()

        assert generation.number == 0
        assert generation.graph is chain_graph

    def test_empty_workspace(self, settings):
        workspace = GraphWorkspace(settings=settings)

        assert workspace.analyze().node_count == 0

    def test_swap_increments_generation(self, workspace, cycle_graph):
        generation = workspace.swap(cycle_graph)

        assert generation.number == 1
        assert workspace.current() is generation
        assert workspace.analyze().betti_1 == 1

    def test_swap_freezes_graph(self, workspace, symbol_factory):
        graph = SymbolGraph()
        graph.insert_symbol(symbol_factory("A"))

        workspace.swap(graph)

        assert graph.frozen

    def test_captured_generation_survives_swap(self, workspace, cycle_graph):
        captured = workspace.current()

        workspace.swap(cycle_graph)

        assert captured.number == 0
        assert captured.base_report(workspace.analyzer).betti_1 == 0

    def test_swap_keeps_layer_config(self, chain_graph, layered_config, settings, cycle_graph):
        workspace = GraphWorkspace(chain_graph, layered_config, settings=settings)

        workspace.swap(cycle_graph)

        assert workspace.current().layer_config is layered_config

    def test_rebuild(self, workspace, symbol_factory):
        generation = workspace.rebuild(
            [symbol_factory("X"), symbol_factory("Y")],
            [Edge(source_id="X", target_id="Y")],
        )

        assert generation.number == 1
        assert sorted(generation.graph.symbol_ids()) == ["X", "Y"]

    def test_failed_rebuild_keeps_generation(self, workspace, symbol_factory):
        with pytest.raises(GraphBuildError):
            workspace.rebuild([symbol_factory("X")], [Edge(source_id="X", target_id="Y")])

        assert workspace.current().number == 0

    def test_report_cached_per_generation(self, workspace):
        assert workspace.analyze() is workspace.analyze()

    def test_concurrent_swaps(self, workspace, chain_graph):
        with ThreadPoolExecutor(max_workers=4) as pool:
            list(pool.map(lambda _: workspace.swap(chain_graph), range(20)))

        assert workspace.current().number == 20


class TestFacade:
    """Tests for the workspace-level operations."""

    def test_assemble(self, workspace):
        mini = workspace.assemble(["A"], depth=1, issue_id="ISSUE-3")

        assert mini.symbol_ids == {"A", "B"}
        assert mini.seed_issue == "ISSUE-3"

    def test_validate(self, workspace):
        result = workspace.validate(
            [Edit(file_path="src/c.py", new_edges=[Edge(source_id="C", target_id="A")])]
        )

        assert result.introduces_cycles
        assert not result.is_safe

    def test_validate_many(self, workspace):
        results = workspace.validate_many(
            [
                [Edit(file_path="src/c.py", new_edges=[Edge(source_id="C", target_id="A")])],
                [Edit(file_path="src/c.py", removed_symbol_ids=["C"])],
            ]
        )

        assert [r.is_safe for r in results] == [False, True]
