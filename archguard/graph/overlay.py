"""Copy-on-write overlay over a base graph.

An overlay records a proposed edit as a private delta (added symbols,
added or strengthened edges, dropped symbols) and answers queries by
checking the delta first and the base second. The base is never touched,
so any number of overlays can share one base concurrently.
"""

from collections.abc import Iterator

from archguard.exceptions import DanglingReferenceError, SymbolCollisionError
from archguard.models import Direction, Edge, EdgeKey, Symbol

from .base import GraphView


class OverlayGraph(GraphView):
    """A base graph plus a private delta."""

    def __init__(self, base: GraphView):
        self._base = base
        self._added: dict[str, Symbol] = {}
        # Ids removed from the base. Base edges touching them stay hidden
        # even if a new symbol with the same id is added later.
        self._dropped: set[str] = set()
        self._edges: dict[EdgeKey, Edge] = {}
        self._outgoing: dict[str, dict[EdgeKey, None]] = {}
        self._incoming: dict[str, dict[EdgeKey, None]] = {}

    @property
    def base(self) -> GraphView:
        return self._base

    @property
    def added_symbols(self) -> list[Symbol]:
        return list(self._added.values())

    @property
    def dropped_ids(self) -> frozenset[str]:
        return frozenset(self._dropped)

    # ==================== Delta ====================

    def remove_symbol(self, symbol_id: str) -> bool:
        """Hide a symbol and its incident edges. Returns False if absent."""
        if not self.has_symbol(symbol_id):
            return False
        if symbol_id in self._added:
            del self._added[symbol_id]
        else:
            self._dropped.add(symbol_id)
        return True

    def add_symbol(self, symbol: Symbol, file_path: str | None = None) -> None:
        """Add a symbol. Raises ``SymbolCollisionError`` if the id is live."""
        if self.has_symbol(symbol.id):
            raise SymbolCollisionError(symbol.id, file_path or symbol.file_path)
        self._added[symbol.id] = symbol

    def add_edge(self, edge: Edge) -> Edge:
        """Add an edge to the delta, merging with any live duplicate."""
        missing = [
            symbol_id
            for symbol_id in dict.fromkeys((edge.source_id, edge.target_id))
            if not self.has_symbol(symbol_id)
        ]
        if missing:
            raise DanglingReferenceError(edge.source_id, edge.target_id, missing)

        existing = self.get_edge(edge.key)
        stored = existing.merge(edge) if existing is not None else edge
        self._edges[edge.key] = stored
        self._outgoing.setdefault(edge.source_id, {})[edge.key] = None
        self._incoming.setdefault(edge.target_id, {})[edge.key] = None
        return stored

    # ==================== Queries ====================

    def _base_alive(self, symbol_id: str) -> bool:
        return symbol_id not in self._dropped and self._base.has_symbol(symbol_id)

    def _base_edge_visible(self, edge: Edge) -> bool:
        return (
            edge.key not in self._edges
            and edge.source_id not in self._dropped
            and edge.target_id not in self._dropped
        )

    def _delta_edge_visible(self, edge: Edge) -> bool:
        return self.has_symbol(edge.source_id) and self.has_symbol(edge.target_id)

    def get_symbol(self, symbol_id: str) -> Symbol | None:
        added = self._added.get(symbol_id)
        if added is not None:
            return added
        if symbol_id in self._dropped:
            return None
        return self._base.get_symbol(symbol_id)

    def has_symbol(self, symbol_id: str) -> bool:
        return symbol_id in self._added or self._base_alive(symbol_id)

    def symbol_ids(self) -> Iterator[str]:
        for symbol_id in self._base.symbol_ids():
            if symbol_id not in self._dropped and symbol_id not in self._added:
                yield symbol_id
        yield from list(self._added)

    def get_edge(self, key: EdgeKey) -> Edge | None:
        edge = self._edges.get(key)
        if edge is not None:
            return edge if self._delta_edge_visible(edge) else None
        edge = self._base.get_edge(key)
        if edge is not None and self._base_edge_visible(edge):
            return edge
        return None

    def edges(self) -> Iterator[Edge]:
        for edge in self._base.edges():
            if self._base_edge_visible(edge):
                yield edge
        for edge in list(self._edges.values()):
            if self._delta_edge_visible(edge):
                yield edge

    def incident_edges(self, symbol_id: str, direction: Direction = Direction.BOTH) -> Iterator[Edge]:
        if not self.has_symbol(symbol_id):
            return
        direction = Direction(direction)

        if direction in (Direction.OUT, Direction.BOTH):
            for key in list(self._outgoing.get(symbol_id, ())):
                edge = self._edges[key]
                if self._delta_edge_visible(edge):
                    yield edge
        if direction in (Direction.IN, Direction.BOTH):
            for key in list(self._incoming.get(symbol_id, ())):
                if direction == Direction.BOTH and key[0] == symbol_id:
                    continue
                edge = self._edges[key]
                if self._delta_edge_visible(edge):
                    yield edge

        if symbol_id in self._dropped:
            return
        for edge in self._base.incident_edges(symbol_id, direction):
            if self._base_edge_visible(edge):
                yield edge

    def __repr__(self) -> str:
        return (
            f"OverlayGraph(added={len(self._added)}, dropped={len(self._dropped)}, "
            f"delta_edges={len(self._edges)})"
        )
