"""Graph workspace: generation-swapped access to the current symbol graph.

The extractor rebuilds the graph on file changes; each rebuild becomes a
new immutable ``GraphGeneration``. Calls capture the generation current at
their start, so a concurrent swap never changes a graph mid-analysis.
"""

import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import structlog

from archguard.analysis.invariants import InvariantAnalyzer
from archguard.config import TopologySettings, get_settings
from archguard.engine.assembler import NeighborhoodAssembler
from archguard.graph.base import GraphView
from archguard.graph.symbol_graph import GraphBuilder, SymbolGraph
from archguard.models import (
    Edge,
    Edit,
    InvariantReport,
    LayerConfig,
    MiniCodebase,
    Symbol,
    ValidationResult,
)
from archguard.validation.virtual_apply import VirtualApplyValidator

logger = structlog.get_logger()


@dataclass(frozen=True)
class GraphGeneration:
    """One built graph with its layer rules and a lazily cached report."""

    number: int
    graph: GraphView
    layer_config: LayerConfig | None = None
    _report: list[InvariantReport] = field(default_factory=list, repr=False, compare=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def base_report(self, analyzer: InvariantAnalyzer) -> InvariantReport:
        """Analyze the generation once; later calls reuse the report."""
        with self._lock:
            if not self._report:
                self._report.append(analyzer.analyze(self.graph, self.layer_config))
            return self._report[0]


class GraphWorkspace:
    """Facade over the current generation for agents and orchestrators."""

    def __init__(
        self,
        graph: GraphView | None = None,
        layer_config: LayerConfig | None = None,
        settings: TopologySettings | None = None,
    ):
        self.settings = settings or get_settings()
        self.analyzer = InvariantAnalyzer(self.settings)
        self.assembler = NeighborhoodAssembler(self.analyzer, self.settings)
        self.validator = VirtualApplyValidator(self.analyzer, self.settings)

        self._lock = threading.Lock()
        self._generation = GraphGeneration(
            number=0,
            graph=graph if graph is not None else SymbolGraph().freeze(),
            layer_config=layer_config,
        )
        self._logger = logger.bind(component="GraphWorkspace")

    # ==================== Generations ====================

    def current(self) -> GraphGeneration:
        with self._lock:
            return self._generation

    def swap(self, graph: GraphView, layer_config: LayerConfig | None = None) -> GraphGeneration:
        """Atomically replace the current graph.

        ``layer_config`` defaults to the previous generation's rules.
        """
        if isinstance(graph, SymbolGraph) and not graph.frozen:
            graph.freeze()

        with self._lock:
            previous = self._generation
            self._generation = GraphGeneration(
                number=previous.number + 1,
                graph=graph,
                layer_config=layer_config if layer_config is not None else previous.layer_config,
            )
            generation = self._generation

        self._logger.info(
            "Graph swapped",
            generation=generation.number,
            symbols=graph.symbol_count,
            edges=graph.edge_count,
        )
        return generation

    def rebuild(
        self,
        symbols: Iterable[Symbol],
        edges: Iterable[Edge],
        layer_config: LayerConfig | None = None,
    ) -> GraphGeneration:
        """Build a new graph from extractor output and swap it in.

        Raises:
            GraphBuildError: the current generation is kept
        """
        graph = GraphBuilder().build(symbols, edges)
        return self.swap(graph, layer_config)

    # ==================== Operations ====================

    def assemble(
        self,
        seed_ids: Iterable[str],
        depth: int | None = None,
        strength_threshold: float | None = None,
        issue_id: str | None = None,
    ) -> MiniCodebase:
        generation = self.current()
        return self.assembler.assemble(
            generation.graph,
            seed_ids,
            depth=depth,
            strength_threshold=strength_threshold,
            issue_id=issue_id,
            layer_config=generation.layer_config,
        )

    def analyze(self) -> InvariantReport:
        return self.current().base_report(self.analyzer)

    def validate(
        self,
        edits: Sequence[Edit],
        previous_betti_1: int | None = None,
    ) -> ValidationResult:
        generation = self.current()
        return self.validator.validate(
            generation.graph,
            generation.layer_config,
            edits,
            previous_betti_1=previous_betti_1,
            base_report=generation.base_report(self.analyzer),
        )

    def validate_many(
        self,
        candidates: Sequence[Sequence[Edit]],
        previous_betti_1: int | None = None,
    ) -> list[ValidationResult]:
        """Validate competing candidates against one captured generation."""
        generation = self.current()
        return self.validator.validate_many(
            generation.graph,
            generation.layer_config,
            candidates,
            previous_betti_1=previous_betti_1,
            base_report=generation.base_report(self.analyzer),
        )
