"""Symbol and edge models for the dependency graph.

Defines the two primitives the whole engine is built from:
- Symbol: a named code entity with a stable id (``file_path::qualified_name``)
- Edge: a directed, weighted dependency between two symbols
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SymbolKind(str, Enum):
    """Kinds of code entities tracked in the graph."""

    FUNCTION = "function"
    STRUCT = "struct"
    ENUM = "enum"
    TRAIT = "trait"
    INTERFACE = "interface"
    CLASS = "class"
    MODULE = "module"
    CONST = "const"
    TYPE = "type"


class EdgeKind(str, Enum):
    """Kinds of dependency relations."""

    CALLS = "calls"
    IMPORTS = "imports"
    IMPLEMENTS = "implements"
    REFERENCES = "references"
    EXTENDS = "extends"


class Direction(str, Enum):
    """Which adjacency index a neighbor query walks."""

    OUT = "out"
    IN = "in"
    BOTH = "both"


class Symbol(BaseModel):
    """An immutable code entity. Identity is ``id``."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Stable symbol id")
    name: str = Field(..., description="Human-readable name")
    kind: SymbolKind
    file_path: str = Field(..., description="File the symbol is defined in")
    byte_range: tuple[int, int] | None = Field(
        default=None, description="(start, end) byte offsets in the file"
    )
    line_start: int = Field(default=0, ge=0)
    line_end: int = Field(default=0, ge=0)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_ranges(self) -> "Symbol":
        if self.byte_range is not None:
            start, end = self.byte_range
            if start < 0 or start > end:
                raise ValueError(f"Invalid byte range {self.byte_range} for {self.id}")
        if self.line_end and self.line_start > self.line_end:
            raise ValueError(
                f"Invalid line range {self.line_start}-{self.line_end} for {self.id}"
            )
        return self

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Symbol):
            return NotImplemented
        return self.id == other.id


EdgeKey = tuple[str, str, EdgeKind]


class Edge(BaseModel):
    """A directed dependency ``source_id -> target_id``."""

    model_config = ConfigDict(frozen=True)

    source_id: str
    target_id: str
    kind: EdgeKind = EdgeKind.CALLS
    strength: float = Field(default=1.0, ge=0.0, le=1.0)

    @property
    def key(self) -> EdgeKey:
        """Identity used for de-duplication."""
        return (self.source_id, self.target_id, self.kind)

    @property
    def is_self_loop(self) -> bool:
        return self.source_id == self.target_id

    def merge(self, other: "Edge") -> "Edge":
        """Merge a duplicate edge, keeping the stronger of the two."""
        if other.key != self.key:
            raise ValueError(f"Cannot merge edges with different keys: {self.key} / {other.key}")
        return self if self.strength >= other.strength else other
