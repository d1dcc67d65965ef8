"""Result models produced by the engine.

- InvariantReport: topological metrics for one graph
- MiniCodebase: minimal task context around seed symbols
- Edit / ValidationResult: a proposed change and its virtual-apply verdict
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .layers import LayerViolation
from .symbols import Edge, EdgeKind, Symbol, SymbolKind


class InvariantReport(BaseModel):
    """Topological health metrics. A pure function of (graph, layer config)."""

    model_config = ConfigDict(frozen=True)

    betti_0: int = 0
    betti_1: int = 0
    triangle_count: int = 0
    coupling_score: float = 0.0
    solid_score: float = 100.0
    cycles_detected: list[list[str]] = Field(default_factory=list)
    layer_violations: list[LayerViolation] = Field(default_factory=list)
    node_count: int = 0
    edge_count: int = 0

    def cycle_members(self) -> set[str]:
        return {symbol_id for cycle in self.cycles_detected for symbol_id in cycle}


class EdgePersistence(BaseModel):
    """Lifetime of an edge in a PageRank-ordered filtration.

    Edges that close a cycle die as soon as they are born (lifetime 0) and
    are the weakest links; tree edges never die.
    """

    source: str
    target: str
    kind: EdgeKind
    birth: float
    death: float
    lifetime: float
    cycle_id: int | None = None


class SymbolEntry(BaseModel):
    """A symbol included in a MiniCodebase."""

    id: str
    name: str
    file_path: str
    kind: SymbolKind
    code: str | None = None
    byte_range: tuple[int, int] | None = None
    importance: float = 0.0
    in_cycle: bool = False


class ContextInvariants(BaseModel):
    """Architectural invariants the agent must preserve."""

    betti_1: int = 0
    forbidden_dependencies: list[str] = Field(default_factory=list)
    layer_constraints: list[str] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)


class ContextMetadata(BaseModel):
    """How the context was extracted."""

    depth: int
    strength_threshold: float
    total_symbols_in_graph: int
    solid_score: float


class MiniCodebase(BaseModel):
    """Minimal, depth- and strength-bounded neighborhood for one task."""

    seed_issue: str | None = None
    seed_symbols: list[str]
    symbols: list[SymbolEntry] = Field(default_factory=list)
    files: list[str] = Field(default_factory=list)
    invariants: ContextInvariants = Field(default_factory=ContextInvariants)
    metadata: ContextMetadata

    @property
    def symbol_ids(self) -> set[str]:
        return {entry.id for entry in self.symbols}

    def to_markdown(self) -> str:
        """Render the context for agent consumption."""
        lines = ["# Mini Codebase", ""]

        if self.seed_issue:
            lines.append(f"> Assembled for issue: `{self.seed_issue}`")
            lines.append("")

        lines.append(
            f"**Symbols**: {len(self.symbols)} | **Files**: {len(self.files)} | "
            f"**Solid Score**: {self.metadata.solid_score:.0f}/100"
        )
        lines.append("")

        lines.append("## Architectural Invariants")
        lines.append("")
        for note in self.invariants.notes:
            lines.append(f"- {note}")
        if self.invariants.betti_1 > 0:
            lines.append(f"- Betti_1 = {self.invariants.betti_1} (do not increase)")
        for constraint in self.invariants.layer_constraints:
            lines.append(f"- {constraint}")
        for forbidden in self.invariants.forbidden_dependencies:
            lines.append(f"- Forbidden: `{forbidden}`")
        lines.append("")

        lines.append("## Files")
        lines.append("")
        for file_path in self.files:
            lines.append(f"- `{file_path}`")
        lines.append("")

        lines.append("## Symbols")
        lines.append("")
        for entry in self.symbols:
            marker = " (CYCLE)" if entry.in_cycle else ""
            lines.append(f"### `{entry.id}`{marker} (importance: {entry.importance:.2f})")
            lines.append("")
            lines.append(f"- **File**: `{entry.file_path}`")
            lines.append(f"- **Kind**: {entry.kind.value}")
            if entry.code is not None:
                lines.append("")
                lines.append("```")
                lines.append(entry.code)
                lines.append("```")
            lines.append("")

        return "\n".join(lines)


class EditOperation(str, Enum):
    """What an edit does to its file."""

    CREATE = "create"
    MODIFY = "modify"
    DELETE = "delete"


class Edit(BaseModel):
    """A proposed change to one file, expressed as graph deltas."""

    model_config = ConfigDict(frozen=True)

    file_path: str
    operation: EditOperation = EditOperation.MODIFY
    new_symbols: list[Symbol] = Field(default_factory=list)
    new_edges: list[Edge] = Field(default_factory=list)
    removed_symbol_ids: list[str] = Field(default_factory=list)


class ValidationState(str, Enum):
    """Lifecycle of a single validation call."""

    PENDING = "pending"
    COLLISION_REJECTED = "collision_rejected"
    ANALYZED = "analyzed"
    SAFE = "safe"
    RED_FLAGGED = "red_flagged"


class CrossFileIssue(BaseModel):
    """A newly introduced edge whose endpoints live in different files."""

    source_id: str
    source_file: str
    target_id: str
    target_file: str
    kind: EdgeKind

    @property
    def message(self) -> str:
        return (
            f"Cross-file dependency: {self.source_id} ({self.source_file}) "
            f"-{self.kind.value}-> {self.target_id} ({self.target_file})"
        )


class ValidationResult(BaseModel):
    """Verdict of a virtual apply. Comparable across competing candidates."""

    is_safe: bool = False
    state: ValidationState = ValidationState.PENDING
    original_betti_1: int = 0
    new_betti_1: int = 0
    introduces_cycles: bool = False
    layer_violations: list[LayerViolation] = Field(default_factory=list)
    new_symbols: list[str] = Field(default_factory=list)
    new_dependencies: list[Edge] = Field(default_factory=list)
    cross_file_issues: list[CrossFileIssue] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @property
    def red_flagged(self) -> bool:
        return not self.is_safe
