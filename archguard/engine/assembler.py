"""Neighborhood Assembler for task context.

Turns a handful of seed symbols into a MiniCodebase: the smallest slice
of the graph an agent needs for one task, together with the invariants
it must not break. Traversal is a multi-source BFS over both edge
directions that only follows edges at or above a strength threshold.
"""

from collections.abc import Iterable

import structlog

from archguard.analysis.invariants import InvariantAnalyzer
from archguard.config import TopologySettings, get_settings
from archguard.exceptions import AnalysisInputError, EmptySeedError
from archguard.graph.base import GraphView
from archguard.models import (
    ContextInvariants,
    ContextMetadata,
    Direction,
    InvariantReport,
    LayerConfig,
    MiniCodebase,
    SymbolEntry,
)

logger = structlog.get_logger()


class NeighborhoodAssembler:
    """Assembles MiniCodebases. Stateless apart from settings; safe to share."""

    def __init__(
        self,
        analyzer: InvariantAnalyzer | None = None,
        settings: TopologySettings | None = None,
    ):
        self.settings = settings or get_settings()
        self.analyzer = analyzer or InvariantAnalyzer(self.settings)
        self._logger = logger.bind(component="NeighborhoodAssembler")

    def assemble(
        self,
        graph: GraphView,
        seed_ids: Iterable[str],
        depth: int | None = None,
        strength_threshold: float | None = None,
        issue_id: str | None = None,
        layer_config: LayerConfig | None = None,
    ) -> MiniCodebase:
        """Assemble the bounded neighborhood around ``seed_ids``.

        Args:
            graph: Graph to read (never modified)
            seed_ids: Symbols the task starts from; always included
            depth: Maximum BFS distance from any seed
            strength_threshold: Minimum edge strength to follow, in [0, 1]
            issue_id: Task or issue the context is assembled for
            layer_config: Optional layering rules for the invariants section

        Returns:
            MiniCodebase without source code (see ``hydrate``)

        Raises:
            EmptySeedError: if no seeds were given
            AnalysisInputError: for negative depth, a threshold outside
                [0, 1], or a seed that is not in the graph
        """
        seeds = list(dict.fromkeys(seed_ids))
        depth = self.settings.default_depth if depth is None else depth
        if strength_threshold is None:
            strength_threshold = self.settings.default_strength_threshold
        self._check_inputs(graph, seeds, depth, strength_threshold)

        distances = self.neighborhood(graph, seeds, depth, strength_threshold)
        projection = graph.subgraph(distances)
        report = self.analyzer.analyze(projection, layer_config)
        in_cycle = report.cycle_members()
        importance = self._importance(graph, distances)

        entries = []
        for symbol_id in distances:
            symbol = graph.get_symbol(symbol_id)
            entries.append(
                SymbolEntry(
                    id=symbol.id,
                    name=symbol.name,
                    file_path=symbol.file_path,
                    kind=symbol.kind,
                    byte_range=symbol.byte_range,
                    importance=importance[symbol_id],
                    in_cycle=symbol_id in in_cycle,
                )
            )
        entries.sort(key=lambda entry: (-entry.importance, entry.id))

        mini = MiniCodebase(
            seed_issue=issue_id,
            seed_symbols=seeds,
            symbols=entries,
            files=sorted({entry.file_path for entry in entries}),
            invariants=self._invariants(report, layer_config),
            metadata=ContextMetadata(
                depth=depth,
                strength_threshold=strength_threshold,
                total_symbols_in_graph=graph.symbol_count,
                solid_score=report.solid_score,
            ),
        )

        self._logger.info(
            "Context assembled",
            issue_id=issue_id,
            seeds=len(seeds),
            symbols=len(entries),
            files=len(mini.files),
            depth=depth,
            threshold=strength_threshold,
            betti_1=report.betti_1,
        )
        return mini

    @staticmethod
    def _check_inputs(graph: GraphView, seeds: list[str], depth: int, threshold: float) -> None:
        if not seeds:
            raise EmptySeedError()
        if isinstance(depth, bool) or not isinstance(depth, int) or depth < 0:
            raise AnalysisInputError(f"depth must be a non-negative integer, got {depth!r}")
        if not 0.0 <= threshold <= 1.0:
            raise AnalysisInputError(f"strength_threshold must be within [0, 1], got {threshold!r}")
        missing = [seed for seed in seeds if not graph.has_symbol(seed)]
        if missing:
            raise AnalysisInputError(f"Unknown seed symbol(s): {', '.join(missing)}")

    @staticmethod
    def neighborhood(
        graph: GraphView,
        seeds: list[str],
        depth: int,
        strength_threshold: float,
    ) -> dict[str, int]:
        """Multi-source BFS; returns symbol id -> distance from the nearest seed."""
        distances = {seed: 0 for seed in seeds}
        frontier = list(distances)
        distance = 0

        while frontier and distance < depth:
            next_frontier = []
            for node in frontier:
                for edge in graph.incident_edges(node, Direction.BOTH):
                    if edge.strength < strength_threshold:
                        continue
                    other = edge.target_id if edge.source_id == node else edge.source_id
                    if other not in distances:
                        distances[other] = distance + 1
                        next_frontier.append(other)
            frontier = next_frontier
            distance += 1

        return distances

    @staticmethod
    def _importance(graph: GraphView, ids: Iterable[str]) -> dict[str, float]:
        """Sum of incident edge strengths, normalized by the largest sum."""
        totals = {
            symbol_id: sum(edge.strength for edge in graph.incident_edges(symbol_id, Direction.BOTH))
            for symbol_id in ids
        }
        top = max(totals.values(), default=0.0)
        if top <= 0.0:
            return {symbol_id: 0.0 for symbol_id in totals}
        return {symbol_id: total / top for symbol_id, total in totals.items()}

    @staticmethod
    def _invariants(report: InvariantReport, layer_config: LayerConfig | None) -> ContextInvariants:
        notes = []
        if report.betti_1 > 0:
            notes.append(
                f"{report.betti_1} cycle(s) detected. Avoid adding dependencies that create new cycles."
            )
        else:
            notes.append("No cycles. Keep dependencies unidirectional.")

        forbidden = [violation.describe() for violation in report.layer_violations]
        if forbidden:
            notes.append(
                f"{len(forbidden)} layer violation(s) detected. Review forbidden_dependencies."
            )

        return ContextInvariants(
            betti_1=report.betti_1,
            forbidden_dependencies=forbidden,
            layer_constraints=layer_config.describe_rules() if layer_config else [],
            notes=notes,
        )


def assemble(
    graph: GraphView,
    seed_ids: Iterable[str],
    depth: int | None = None,
    strength_threshold: float | None = None,
    issue_id: str | None = None,
    layer_config: LayerConfig | None = None,
) -> MiniCodebase:
    """Assemble a MiniCodebase with a default ``NeighborhoodAssembler``."""
    return NeighborhoodAssembler().assemble(
        graph,
        seed_ids,
        depth=depth,
        strength_threshold=strength_threshold,
        issue_id=issue_id,
        layer_config=layer_config,
    )
