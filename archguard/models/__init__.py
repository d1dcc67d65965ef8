"""Data models for the topology engine."""

from .layers import Layer, LayerConfig, LayerViolation, ViolationKind
from .reports import (
    ContextInvariants,
    ContextMetadata,
    CrossFileIssue,
    Edit,
    EditOperation,
    EdgePersistence,
    InvariantReport,
    MiniCodebase,
    SymbolEntry,
    ValidationResult,
    ValidationState,
)
from .symbols import Direction, Edge, EdgeKey, EdgeKind, Symbol, SymbolKind

__all__ = [
    # Symbols
    "Direction",
    "Edge",
    "EdgeKey",
    "EdgeKind",
    "Symbol",
    "SymbolKind",
    # Layers
    "Layer",
    "LayerConfig",
    "LayerViolation",
    "ViolationKind",
    # Reports
    "ContextInvariants",
    "ContextMetadata",
    "CrossFileIssue",
    "Edit",
    "EditOperation",
    "EdgePersistence",
    "InvariantReport",
    "MiniCodebase",
    "SymbolEntry",
    "ValidationResult",
    "ValidationState",
]
