"""Graph algorithms used by the invariant analyzer.

Every ``GraphView`` (canonical graph, projection or overlay) is adapted
to a NetworkX ``DiGraph`` and the algorithms run there. Functions accept
either a view or an already adapted ``DiGraph`` so the analyzer can build
the adapter graph once per report. None of them modify the input.
"""

from itertools import islice

import networkx as nx

from archguard.graph.base import GraphView


def to_digraph(graph: GraphView) -> nx.DiGraph:
    """Build a NetworkX DiGraph from a graph view.

    Parallel edges of different kinds between the same pair collapse into
    one NetworkX edge carrying the strongest ``strength`` and every kind.
    """
    digraph = nx.DiGraph()
    digraph.add_nodes_from(graph.symbol_ids())

    for edge in graph.edges():
        if digraph.has_edge(edge.source_id, edge.target_id):
            data = digraph[edge.source_id][edge.target_id]
            data["strength"] = max(data["strength"], edge.strength)
            data["kinds"].add(edge.kind.value)
        else:
            digraph.add_edge(
                edge.source_id,
                edge.target_id,
                strength=edge.strength,
                kinds={edge.kind.value},
            )

    return digraph


def as_digraph(graph: GraphView | nx.DiGraph) -> nx.DiGraph:
    if isinstance(graph, nx.DiGraph):
        return graph
    return to_digraph(graph)


def to_undirected(graph: GraphView | nx.DiGraph) -> nx.Graph:
    """Direction ignored: one edge per unordered pair, self-loops kept."""
    return nx.Graph(as_digraph(graph))


def undirected_edge_count(graph: GraphView | nx.DiGraph) -> int:
    """Distinct undirected pairs; a self-loop counts once."""
    return to_undirected(graph).number_of_edges()


def connected_components(graph: GraphView | nx.DiGraph) -> int:
    """Number of weakly connected components."""
    return nx.number_weakly_connected_components(as_digraph(graph))


def strongly_connected_components(graph: GraphView | nx.DiGraph) -> list[list[str]]:
    return [list(component) for component in nx.strongly_connected_components(as_digraph(graph))]


def find_cycles(graph: GraphView | nx.DiGraph) -> list[list[str]]:
    """One cycle per SCC of size > 1 or self-looping node, ids sorted."""
    digraph = as_digraph(graph)
    self_looping = {source for source, _ in nx.selfloop_edges(digraph)}

    cycles = []
    for component in nx.strongly_connected_components(digraph):
        if len(component) > 1:
            cycles.append(sorted(component))
        elif component & self_looping:
            cycles.append(list(component))
    return sorted(cycles)


def count_triangles(graph: GraphView | nx.DiGraph) -> int:
    """Unordered triples with all three pairwise edges, direction ignored."""
    undirected = to_undirected(graph)
    undirected.remove_edges_from(list(nx.selfloop_edges(undirected)))
    return sum(nx.triangles(undirected).values()) // 3


def enumerate_elementary_cycles(
    graph: GraphView | nx.DiGraph,
    component: list[str],
    max_length: int,
    max_cycles: int,
) -> list[list[str]]:
    """Elementary directed cycles inside one SCC, bounded by length and count.

    Each cycle is reported once, rotated to start at its smallest id.
    """
    subgraph = as_digraph(graph).subgraph(component)
    cycles = []
    for cycle in islice(nx.simple_cycles(subgraph, length_bound=max_length), max_cycles):
        start = cycle.index(min(cycle))
        cycles.append(cycle[start:] + cycle[:start])
    return cycles
