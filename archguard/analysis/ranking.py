"""Ranking, refactoring hints and lookups over a symbol graph.

- weighted_pagerank: importance from edge strengths
- compute_edge_persistence / suggest_refactor: weakest links in cycles
- shortest_path: directed dependency path between two symbols
- find_symbol: fuzzy id lookup for agent-supplied names
"""

import math

import networkx as nx
import structlog
from networkx.utils import UnionFind

from archguard.config import get_settings
from archguard.graph.base import GraphView
from archguard.models import EdgePersistence

from .algorithms import as_digraph

logger = structlog.get_logger()


def weighted_pagerank(
    graph: GraphView | nx.DiGraph,
    damping: float | None = None,
    max_iterations: int | None = None,
) -> dict[str, float]:
    """PageRank where stronger edges carry more rank.

    Returns:
        Map of symbol id -> rank, normalized so the top symbol has 1.0
    """
    settings = get_settings()
    damping = settings.pagerank_damping if damping is None else damping
    if max_iterations is None:
        max_iterations = settings.pagerank_max_iterations

    digraph = as_digraph(graph)
    if digraph.number_of_nodes() == 0:
        return {}

    ranks = nx.pagerank(
        digraph,
        alpha=damping,
        max_iter=max_iterations,
        tol=settings.pagerank_tolerance,
        weight="strength",
    )

    max_rank = max(ranks.values())
    if max_rank > 0.0:
        ranks = {node: rank / max_rank for node, rank in ranks.items()}
    return ranks


def compute_edge_persistence(graph: GraphView) -> list[EdgePersistence]:
    """Lifetimes of edges in a filtration ordered by endpoint PageRank.

    Edges between important symbols enter first. An edge that joins two
    already-connected symbols closes a cycle: it is born and dies at once
    (lifetime 0) and gets its own cycle id. Results are sorted weakest first.
    """
    ranks = weighted_pagerank(graph)
    filtered = sorted(
        (
            (max(ranks.get(edge.source_id, 0.0), ranks.get(edge.target_id, 0.0)), edge)
            for edge in graph.edges()
        ),
        key=lambda item: (-item[0], item[1].source_id, item[1].target_id, item[1].kind.value),
    )

    forest = UnionFind(graph.symbol_ids())
    persistence = []
    cycle_id = 0
    for filtration, edge in filtered:
        if forest[edge.source_id] != forest[edge.target_id]:
            forest.union(edge.source_id, edge.target_id)
            persistence.append(
                EdgePersistence(
                    source=edge.source_id,
                    target=edge.target_id,
                    kind=edge.kind,
                    birth=filtration,
                    death=math.inf,
                    lifetime=math.inf,
                )
            )
        else:
            persistence.append(
                EdgePersistence(
                    source=edge.source_id,
                    target=edge.target_id,
                    kind=edge.kind,
                    birth=filtration,
                    death=filtration,
                    lifetime=0.0,
                    cycle_id=cycle_id,
                )
            )
            cycle_id += 1

    persistence.sort(key=lambda p: p.lifetime)
    return persistence


def suggest_refactor(graph: GraphView, cycle_id: int) -> EdgePersistence | None:
    """The edge to cut to break the given cycle, if it exists."""
    candidates = [p for p in compute_edge_persistence(graph) if p.cycle_id == cycle_id]
    if not candidates:
        return None
    return min(candidates, key=lambda p: p.lifetime)


def shortest_path(graph: GraphView, start: str, end: str) -> list[str] | None:
    """Shortest directed path from ``start`` to ``end`` (unweighted)."""
    if not graph.has_symbol(start) or not graph.has_symbol(end):
        return None
    try:
        return nx.shortest_path(as_digraph(graph), start, end)
    except nx.NetworkXNoPath:
        return None


def _final_component(symbol_id: str) -> str:
    for separator in ("::", "/", "."):
        if separator in symbol_id:
            return symbol_id.rsplit(separator, 1)[-1]
    return symbol_id


def find_symbol(graph: GraphView, query: str) -> str | None:
    """Resolve a possibly partial symbol name to a full id.

    Tries, in order: exact id, suffix (``::q``, ``/q``, ``.q``), exact
    final component, case-insensitive final component. Ties go to the
    smallest id.
    """
    if graph.has_symbol(query):
        return query

    ids = sorted(graph.symbol_ids())
    suffixes = (f"::{query}", f"/{query}", f".{query}")

    for symbol_id in ids:
        if symbol_id.endswith(suffixes):
            return symbol_id

    for symbol_id in ids:
        if _final_component(symbol_id) == query:
            return symbol_id

    lowered = query.lower()
    for symbol_id in ids:
        if _final_component(symbol_id).lower() == lowered:
            return symbol_id

    logger.debug("Symbol not found", query=query)
    return None
