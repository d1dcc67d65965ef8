"""Canonical in-memory symbol graph.

The graph is built once per workspace (usually through ``GraphBuilder``),
frozen, and then shared by any number of concurrent readers. Rebuilds
produce a new graph instead of editing this one.
"""

from collections.abc import Iterable, Iterator

import structlog

from archguard.exceptions import (
    DanglingReferenceError,
    DuplicateSymbolError,
    FrozenGraphError,
    GraphBuildError,
    TopologyError,
)
from archguard.models import Direction, Edge, EdgeKey, Symbol

from .base import GraphView

logger = structlog.get_logger()


class SymbolGraph(GraphView):
    """Symbols plus directed, weighted dependency edges.

    Invariant: every edge's endpoints are symbols of this graph.
    """

    def __init__(self) -> None:
        self._symbols: dict[str, Symbol] = {}
        self._edges: dict[EdgeKey, Edge] = {}
        # Ordered sets of edge keys per symbol
        self._outgoing: dict[str, dict[EdgeKey, None]] = {}
        self._incoming: dict[str, dict[EdgeKey, None]] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "SymbolGraph":
        """Make the graph immutable and return it."""
        self._frozen = True
        return self

    def _check_mutable(self) -> None:
        if self._frozen:
            raise FrozenGraphError("Graph is frozen; rebuild to change it")

    # ==================== Mutation ====================

    def insert_symbol(self, symbol: Symbol) -> None:
        """Add a symbol. Raises ``DuplicateSymbolError`` on id collision."""
        self._check_mutable()
        if symbol.id in self._symbols:
            raise DuplicateSymbolError(symbol.id)
        self._symbols[symbol.id] = symbol
        self._outgoing[symbol.id] = {}
        self._incoming[symbol.id] = {}

    def insert_edge(self, edge: Edge) -> Edge:
        """Add an edge, merging duplicates by max strength.

        Raises ``DanglingReferenceError`` if either endpoint is absent.
        Returns the stored edge.
        """
        self._check_mutable()
        missing = [
            symbol_id
            for symbol_id in dict.fromkeys((edge.source_id, edge.target_id))
            if symbol_id not in self._symbols
        ]
        if missing:
            raise DanglingReferenceError(edge.source_id, edge.target_id, missing)

        existing = self._edges.get(edge.key)
        stored = existing.merge(edge) if existing is not None else edge
        self._edges[edge.key] = stored
        self._outgoing[edge.source_id][edge.key] = None
        self._incoming[edge.target_id][edge.key] = None
        return stored

    # ==================== Queries ====================

    def get_symbol(self, symbol_id: str) -> Symbol | None:
        return self._symbols.get(symbol_id)

    def has_symbol(self, symbol_id: str) -> bool:
        return symbol_id in self._symbols

    def symbol_ids(self) -> Iterator[str]:
        return iter(list(self._symbols))

    def edges(self) -> Iterator[Edge]:
        return iter(list(self._edges.values()))

    def get_edge(self, key: EdgeKey) -> Edge | None:
        return self._edges.get(key)

    def incident_edges(self, symbol_id: str, direction: Direction = Direction.BOTH) -> Iterator[Edge]:
        direction = Direction(direction)
        if direction in (Direction.OUT, Direction.BOTH):
            for key in list(self._outgoing.get(symbol_id, ())):
                yield self._edges[key]
        if direction in (Direction.IN, Direction.BOTH):
            for key in list(self._incoming.get(symbol_id, ())):
                # Self-loops were already yielded from the outgoing index
                if direction == Direction.BOTH and key[0] == symbol_id:
                    continue
                yield self._edges[key]

    @property
    def symbol_count(self) -> int:
        return len(self._symbols)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def __repr__(self) -> str:
        return (
            f"SymbolGraph(symbols={len(self._symbols)}, edges={len(self._edges)}, "
            f"frozen={self._frozen})"
        )


class GraphProjection(GraphView):
    """Read-only projection of a view onto a subset of symbol ids.

    Only edges whose endpoints are both included are visible. The
    projection holds a reference to its source and copies nothing.
    """

    def __init__(self, source: GraphView, ids: Iterable[str]):
        self._source = source
        self._ids = frozenset(symbol_id for symbol_id in ids if source.has_symbol(symbol_id))

    @property
    def included_ids(self) -> frozenset[str]:
        return self._ids

    def get_symbol(self, symbol_id: str) -> Symbol | None:
        if symbol_id not in self._ids:
            return None
        return self._source.get_symbol(symbol_id)

    def has_symbol(self, symbol_id: str) -> bool:
        return symbol_id in self._ids

    def symbol_ids(self) -> Iterator[str]:
        return (symbol_id for symbol_id in self._source.symbol_ids() if symbol_id in self._ids)

    def edges(self) -> Iterator[Edge]:
        for symbol_id in self.symbol_ids():
            for edge in self._source.incident_edges(symbol_id, Direction.OUT):
                if edge.target_id in self._ids:
                    yield edge

    def incident_edges(self, symbol_id: str, direction: Direction = Direction.BOTH) -> Iterator[Edge]:
        if symbol_id not in self._ids:
            return
        for edge in self._source.incident_edges(symbol_id, direction):
            if edge.source_id in self._ids and edge.target_id in self._ids:
                yield edge

    @property
    def symbol_count(self) -> int:
        return len(self._ids)

    def __repr__(self) -> str:
        return f"GraphProjection(symbols={len(self._ids)})"


class GraphBuilder:
    """Builds a frozen ``SymbolGraph`` from extractor output.

    Unlike single insertions, a batch build keeps going after a failure
    and reports every problem at once.
    """

    def __init__(self) -> None:
        self._logger = logger.bind(component="GraphBuilder")

    def build(self, symbols: Iterable[Symbol], edges: Iterable[Edge]) -> SymbolGraph:
        """Insert all symbols, then all edges.

        Raises:
            GraphBuildError: listing every failed insertion.
        """
        graph = SymbolGraph()
        failures: list[TopologyError] = []

        for symbol in symbols:
            try:
                graph.insert_symbol(symbol)
            except DuplicateSymbolError as e:
                failures.append(e)

        for edge in edges:
            try:
                graph.insert_edge(edge)
            except DanglingReferenceError as e:
                failures.append(e)

        if failures:
            self._logger.warning(
                "Graph build failed",
                failures=len(failures),
                symbols=graph.symbol_count,
                edges=graph.edge_count,
            )
            raise GraphBuildError(failures)

        self._logger.info(
            "Graph built",
            symbols=graph.symbol_count,
            edges=graph.edge_count,
        )
        return graph.freeze()
