"""Pytest configuration and shared fixtures."""

from collections.abc import Callable

import pytest

from archguard.config import TopologySettings
from archguard.graph import GraphBuilder, SymbolGraph
from archguard.models import Edge, EdgeKind, Layer, LayerConfig, Symbol, SymbolKind
from archguard.workspace import GraphWorkspace


def make_symbol(
    symbol_id: str,
    file_path: str | None = None,
    kind: SymbolKind = SymbolKind.FUNCTION,
    byte_range: tuple[int, int] | None = None,
) -> Symbol:
    """Build a symbol; the file defaults to the part of the id before ``::``."""
    if file_path is None:
        file_path = symbol_id.split("::")[0] if "::" in symbol_id else f"src/{symbol_id.lower()}.py"
    return Symbol(
        id=symbol_id,
        name=symbol_id.rsplit("::", 1)[-1],
        kind=kind,
        file_path=file_path,
        byte_range=byte_range,
    )


def make_graph(ids: list[str], edges: list[tuple]) -> SymbolGraph:
    """Build a frozen graph from ids and ``(source, target[, strength])`` tuples."""
    return GraphBuilder().build(
        [make_symbol(symbol_id) for symbol_id in ids],
        [
            Edge(source_id=e[0], target_id=e[1], strength=e[2] if len(e) > 2 else 1.0)
            for e in edges
        ],
    )


@pytest.fixture
def symbol_factory() -> Callable[..., Symbol]:
    return make_symbol


@pytest.fixture
def graph_factory() -> Callable[..., SymbolGraph]:
    return make_graph


@pytest.fixture
def settings() -> TopologySettings:
    """Settings with the documented defaults, independent of the environment."""
    return TopologySettings(_env_file=None)


@pytest.fixture
def chain_graph() -> SymbolGraph:
    """A -> B -> C, all at full strength."""
    return make_graph(["A", "B", "C"], [("A", "B"), ("B", "C")])


@pytest.fixture
def cycle_graph() -> SymbolGraph:
    """A -> B -> C -> A."""
    return make_graph(["A", "B", "C"], [("A", "B"), ("B", "C"), ("C", "A")])


@pytest.fixture
def weighted_graph() -> SymbolGraph:
    """X -> Y (0.9) -> Z (0.3) -> W (0.9)."""
    return make_graph(
        ["X", "Y", "Z", "W"],
        [("X", "Y", 0.9), ("Y", "Z", 0.3), ("Z", "W", 0.9)],
    )


@pytest.fixture
def layered_config() -> LayerConfig:
    """UI (0) <- Logic (1) <- Data (2), each layer may only use the one below it."""
    return LayerConfig(
        layers=(
            Layer(name="UI", level=0, patterns=("src/ui/*",)),
            Layer(name="Logic", level=1, allowed_deps=frozenset({0}), patterns=("src/logic/*",)),
            Layer(name="Data", level=2, allowed_deps=frozenset({1}), patterns=("src/data/*",)),
        )
    )


@pytest.fixture
def layered_graph() -> SymbolGraph:
    """One symbol per layer with only allowed dependencies."""
    symbols = [
        make_symbol("src/ui/button.py::Button", kind=SymbolKind.CLASS),
        make_symbol("src/logic/service.py::Service", kind=SymbolKind.CLASS),
        make_symbol("src/data/repo.py::Repo", kind=SymbolKind.CLASS),
    ]
    edges = [
        Edge(
            source_id="src/logic/service.py::Service",
            target_id="src/ui/button.py::Button",
            kind=EdgeKind.REFERENCES,
        ),
        Edge(
            source_id="src/data/repo.py::Repo",
            target_id="src/logic/service.py::Service",
            kind=EdgeKind.CALLS,
        ),
    ]
    return GraphBuilder().build(symbols, edges)


@pytest.fixture
def workspace(chain_graph: SymbolGraph, settings: TopologySettings) -> GraphWorkspace:
    return GraphWorkspace(chain_graph, settings=settings)
