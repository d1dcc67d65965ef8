"""Virtual Apply - pre-commit validation of proposed edits.

Tests a proposed multi-file edit against the symbol graph without
applying it:
1. Overlay the edit on the base graph (copy-on-write, base untouched)
2. Reject symbol id collisions before any analysis
3. Analyze base and overlay
4. Red-flag the edit if Betti_1 grows or new layer violations appear

Validation never raises for a bad edit. Every failure ends up in
``ValidationResult.errors`` so competing candidates stay comparable.
"""

from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor

import structlog

from archguard.analysis.invariants import InvariantAnalyzer
from archguard.config import TopologySettings, get_settings
from archguard.exceptions import DanglingReferenceError, SymbolCollisionError, TopologyError
from archguard.graph.base import GraphView
from archguard.graph.overlay import OverlayGraph
from archguard.models import (
    CrossFileIssue,
    Edge,
    EdgeKey,
    Edit,
    EditOperation,
    InvariantReport,
    LayerConfig,
    ValidationResult,
    ValidationState,
)

logger = structlog.get_logger()


class VirtualApplyValidator:
    """Validates edits against a shared base graph.

    Each call builds its own overlay, so concurrent calls on the same base
    are independent of each other and of their interleaving.
    """

    def __init__(
        self,
        analyzer: InvariantAnalyzer | None = None,
        settings: TopologySettings | None = None,
    ):
        self.settings = settings or get_settings()
        self.analyzer = analyzer or InvariantAnalyzer(self.settings)
        self._logger = logger.bind(component="VirtualApplyValidator")

    def validate(
        self,
        base_graph: GraphView,
        layer_config: LayerConfig | None,
        edits: Iterable[Edit],
        previous_betti_1: int | None = None,
        base_report: InvariantReport | None = None,
    ) -> ValidationResult:
        """Virtually apply ``edits`` and judge the result.

        Args:
            base_graph: The committed graph (never modified)
            layer_config: Optional layering rules
            edits: Proposed per-file edits, applied together
            previous_betti_1: Baseline cycle count; defaults to the base's
            base_report: Cached analysis of ``base_graph`` to reuse

        Returns:
            ValidationResult in state ``safe``, ``red_flagged`` or
            ``collision_rejected``
        """
        edits = list(edits)
        result = ValidationResult()
        try:
            self._run(result, base_graph, layer_config, edits, previous_betti_1, base_report)
        except TopologyError as e:
            result.errors.append(str(e))
            result.is_safe = False
            if result.state not in (ValidationState.COLLISION_REJECTED, ValidationState.RED_FLAGGED):
                result.state = ValidationState.RED_FLAGGED

        self._logger.info(
            "Edit validated",
            files=[edit.file_path for edit in edits],
            state=result.state.value,
            is_safe=result.is_safe,
            original_betti_1=result.original_betti_1,
            new_betti_1=result.new_betti_1,
            new_violations=len(result.layer_violations),
            errors=len(result.errors),
        )
        return result

    def _run(
        self,
        result: ValidationResult,
        base_graph: GraphView,
        layer_config: LayerConfig | None,
        edits: Sequence[Edit],
        previous_betti_1: int | None,
        base_report: InvariantReport | None,
    ) -> None:
        overlay = OverlayGraph(base_graph)

        # Step 1: Removals first, so an edit can replace a symbol in place
        for edit in edits:
            self._apply_removals(overlay, base_graph, edit, result)

        # Step 2: New symbols; any collision rejects the whole candidate
        collisions = self._apply_symbols(overlay, edits, result)
        if collisions:
            result.errors.extend(str(collision) for collision in collisions)
            result.state = ValidationState.COLLISION_REJECTED
            result.is_safe = False
            if base_report is not None:
                result.original_betti_1 = result.new_betti_1 = base_report.betti_1
            return

        # Step 3: New edges
        self._apply_edges(overlay, base_graph, edits, result)

        # Step 4: Analyze before and after
        if base_report is None:
            base_report = self.analyzer.analyze(base_graph, layer_config)
        overlay_report = self.analyzer.analyze(overlay, layer_config)
        result.state = ValidationState.ANALYZED

        result.original_betti_1 = base_report.betti_1
        result.new_betti_1 = overlay_report.betti_1
        baseline = base_report.betti_1 if previous_betti_1 is None else previous_betti_1
        result.introduces_cycles = overlay_report.betti_1 > baseline

        # Pre-existing violations are tolerated, new ones are not
        existing = set(base_report.layer_violations)
        result.layer_violations = [
            violation for violation in overlay_report.layer_violations if violation not in existing
        ]

        result.is_safe = (
            not result.introduces_cycles
            and not result.layer_violations
            and not result.errors
        )

        if result.introduces_cycles:
            result.errors.append(
                f"Would introduce {overlay_report.betti_1 - baseline} new cycle(s) "
                f"(Betti_1: {baseline} -> {overlay_report.betti_1})"
            )
        for violation in result.layer_violations:
            result.errors.append(violation.message)

        # Mutual edges form a new SCC without raising Betti_1
        existing_cycles = {tuple(cycle) for cycle in base_report.cycles_detected}
        for cycle in overlay_report.cycles_detected:
            if tuple(cycle) not in existing_cycles:
                result.warnings.append(f"New dependency cycle: {', '.join(cycle)}")

        result.state = ValidationState.SAFE if result.is_safe else ValidationState.RED_FLAGGED

    @staticmethod
    def _apply_removals(
        overlay: OverlayGraph,
        base_graph: GraphView,
        edit: Edit,
        result: ValidationResult,
    ) -> None:
        removed = list(edit.removed_symbol_ids)
        if edit.operation == EditOperation.DELETE:
            removed.extend(
                symbol.id for symbol in base_graph.symbols() if symbol.file_path == edit.file_path
            )

        for symbol_id in dict.fromkeys(removed):
            if not overlay.remove_symbol(symbol_id) and symbol_id not in overlay.dropped_ids:
                result.warnings.append(f"Removed symbol not found: {symbol_id}")

    @staticmethod
    def _apply_symbols(
        overlay: OverlayGraph,
        edits: Sequence[Edit],
        result: ValidationResult,
    ) -> list[SymbolCollisionError]:
        collisions = []
        for edit in edits:
            if edit.operation == EditOperation.DELETE and edit.new_symbols:
                result.warnings.append(
                    f"Delete edit for {edit.file_path} also adds {len(edit.new_symbols)} symbol(s)"
                )
            for symbol in edit.new_symbols:
                try:
                    overlay.add_symbol(symbol, edit.file_path)
                except SymbolCollisionError as e:
                    collisions.append(e)
                    continue
                result.new_symbols.append(symbol.id)
                if symbol.file_path != edit.file_path:
                    result.warnings.append(
                        f"Symbol {symbol.id} declares file {symbol.file_path} "
                        f"but was added by an edit to {edit.file_path}"
                    )
        return collisions

    @staticmethod
    def _apply_edges(
        overlay: OverlayGraph,
        base_graph: GraphView,
        edits: Sequence[Edit],
        result: ValidationResult,
    ) -> None:
        introduced: dict[EdgeKey, Edge] = {}
        for edit in edits:
            for edge in edit.new_edges:
                try:
                    stored = overlay.add_edge(edge)
                except DanglingReferenceError as e:
                    result.errors.append(str(e))
                    continue

                dropped = overlay.dropped_ids
                in_base = (
                    base_graph.get_edge(edge.key) is not None
                    and edge.source_id not in dropped
                    and edge.target_id not in dropped
                )
                if not in_base:
                    introduced[edge.key] = stored

        result.new_dependencies = list(introduced.values())

        for edge in result.new_dependencies:
            source = overlay.get_symbol(edge.source_id)
            target = overlay.get_symbol(edge.target_id)
            if source is None or target is None or source.file_path == target.file_path:
                continue
            issue = CrossFileIssue(
                source_id=source.id,
                source_file=source.file_path,
                target_id=target.id,
                target_file=target.file_path,
                kind=edge.kind,
            )
            result.cross_file_issues.append(issue)
            result.warnings.append(issue.message)

    def validate_many(
        self,
        base_graph: GraphView,
        layer_config: LayerConfig | None,
        candidates: Iterable[Iterable[Edit]],
        previous_betti_1: int | None = None,
        max_workers: int | None = None,
        base_report: InvariantReport | None = None,
    ) -> list[ValidationResult]:
        """Validate competing candidates against the same base, in input order.

        The base is analyzed once and shared; each candidate gets its own
        overlay, so results do not depend on scheduling.
        """
        candidates = [list(edits) for edits in candidates]
        if not candidates:
            return []

        if base_report is None:
            base_report = self.analyzer.analyze(base_graph, layer_config)
        workers = max_workers or self.settings.validation_workers

        def run(edits: Sequence[Edit]) -> ValidationResult:
            return self.validate(base_graph, layer_config, edits, previous_betti_1, base_report)

        if workers <= 1 or len(candidates) == 1:
            results = [run(edits) for edits in candidates]
        else:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                results = list(pool.map(run, candidates))

        self._logger.info(
            "Candidates validated",
            candidates=len(candidates),
            safe=sum(1 for r in results if r.is_safe),
        )
        return results


def validate(
    base_graph: GraphView,
    layer_config: LayerConfig | None,
    edits: Iterable[Edit],
    previous_betti_1: int | None = None,
    base_report: InvariantReport | None = None,
) -> ValidationResult:
    """Validate edits with a default ``VirtualApplyValidator``."""
    return VirtualApplyValidator().validate(
        base_graph, layer_config, edits, previous_betti_1, base_report
    )
