"""Read-only graph interface shared by graphs, projections and overlays.

The analyzer and the assembler only ever talk to a ``GraphView``, so the
same algorithms run on the canonical graph, on a bounded subgraph, or on
a copy-on-write overlay describing a proposed edit.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from archguard.models import Direction, Edge, EdgeKey, Symbol

if TYPE_CHECKING:
    from .symbol_graph import GraphProjection


class NeighborSequence:
    """Finite, restartable, lazy sequence of neighbor ids.

    Every iteration walks the adjacency index afresh, so the sequence can
    be consumed any number of times.
    """

    def __init__(self, view: "GraphView", symbol_id: str, direction: Direction):
        self._view = view
        self._symbol_id = symbol_id
        self._direction = Direction(direction)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for edge in self._view.incident_edges(self._symbol_id, self._direction):
            if self._direction == Direction.IN:
                other = edge.source_id
            elif self._direction == Direction.OUT or edge.source_id == self._symbol_id:
                other = edge.target_id
            else:
                other = edge.source_id
            if other not in seen:
                seen.add(other)
                yield other

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __contains__(self, symbol_id: object) -> bool:
        return any(other == symbol_id for other in self)

    def __repr__(self) -> str:
        return f"NeighborSequence({self._symbol_id!r}, {self._direction.value})"


class GraphView(ABC):
    """Minimal read-only contract over a symbol graph."""

    @abstractmethod
    def get_symbol(self, symbol_id: str) -> Symbol | None:
        """Get a symbol by id, or ``None`` if absent."""

    @abstractmethod
    def symbol_ids(self) -> Iterator[str]:
        """Iterate symbol ids in a stable order."""

    @abstractmethod
    def edges(self) -> Iterator[Edge]:
        """Iterate every directed edge once."""

    @abstractmethod
    def incident_edges(self, symbol_id: str, direction: Direction = Direction.BOTH) -> Iterator[Edge]:
        """Iterate edges touching ``symbol_id`` (each edge once)."""

    def get_edge(self, key: EdgeKey) -> Edge | None:
        source_id, target_id, _ = key
        for edge in self.incident_edges(source_id, Direction.OUT):
            if edge.key == key:
                return edge
        return None

    def has_symbol(self, symbol_id: str) -> bool:
        return self.get_symbol(symbol_id) is not None

    def __contains__(self, symbol_id: object) -> bool:
        return isinstance(symbol_id, str) and self.has_symbol(symbol_id)

    def symbols(self) -> Iterator[Symbol]:
        for symbol_id in self.symbol_ids():
            symbol = self.get_symbol(symbol_id)
            if symbol is not None:
                yield symbol

    @property
    def symbol_count(self) -> int:
        return sum(1 for _ in self.symbol_ids())

    @property
    def edge_count(self) -> int:
        return sum(1 for _ in self.edges())

    def __len__(self) -> int:
        return self.symbol_count

    def neighbors(self, symbol_id: str, direction: Direction = Direction.BOTH) -> NeighborSequence:
        """Lazy neighbor ids of ``symbol_id`` in the given direction."""
        return NeighborSequence(self, symbol_id, direction)

    def subgraph(self, ids: Iterable[str]) -> "GraphProjection":
        """Read-only projection onto ``ids`` (edges need both endpoints)."""
        from .symbol_graph import GraphProjection

        return GraphProjection(self, ids)
