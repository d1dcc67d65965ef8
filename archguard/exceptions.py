"""Error types for the topology engine.

Every error is local, synchronous and recoverable. Callers can catch
``TopologyError`` to handle any of them.
"""


class TopologyError(Exception):
    """Base class for all topology engine errors."""


class DuplicateSymbolError(TopologyError):
    """Raised when a symbol id is inserted twice into the same graph."""

    def __init__(self, symbol_id: str):
        super().__init__(f"Symbol already exists: {symbol_id}")
        self.symbol_id = symbol_id


class DanglingReferenceError(TopologyError):
    """Raised when an edge references a symbol that is not in the graph."""

    def __init__(self, source_id: str, target_id: str, missing: list[str]):
        super().__init__(
            f"Edge {source_id} -> {target_id} references missing symbol(s): "
            f"{', '.join(missing)}"
        )
        self.source_id = source_id
        self.target_id = target_id
        self.missing = missing


class EmptySeedError(TopologyError):
    """Raised when neighborhood assembly is requested without seeds."""

    def __init__(self) -> None:
        super().__init__("At least one seed symbol is required")


class SymbolCollisionError(TopologyError):
    """Raised when an edit adds a symbol whose id is already taken."""

    def __init__(self, symbol_id: str, file_path: str):
        super().__init__(
            f"Symbol collision: {symbol_id} (from {file_path}) already exists"
        )
        self.symbol_id = symbol_id
        self.file_path = file_path


class AnalysisInputError(TopologyError):
    """Raised for malformed arguments (negative depth, bad threshold, ...)."""


class FrozenGraphError(TopologyError):
    """Raised when a frozen graph is modified."""


class LayerConfigError(TopologyError):
    """Raised when a layer configuration cannot be loaded or is invalid."""


class GraphBuildError(TopologyError):
    """Aggregates every insertion failure from a batch build."""

    def __init__(self, failures: list[TopologyError]):
        super().__init__(
            f"Graph build failed with {len(failures)} error(s): "
            + "; ".join(str(f) for f in failures)
        )
        self.failures = failures
