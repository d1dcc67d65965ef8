"""Symbol graph storage and views.

- SymbolGraph: frozen-after-build graph with directional indices
- GraphProjection: read-only induced subgraph
- OverlayGraph: copy-on-write delta over a base view
"""

from .base import GraphView, NeighborSequence
from .overlay import OverlayGraph
from .symbol_graph import GraphBuilder, GraphProjection, SymbolGraph

__all__ = [
    "GraphBuilder",
    "GraphProjection",
    "GraphView",
    "NeighborSequence",
    "OverlayGraph",
    "SymbolGraph",
]
