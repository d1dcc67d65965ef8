"""archguard - Topology engine for multi-agent code generation.

Builds a symbol/dependency graph, assembles minimal task context around
seed symbols, computes topological health invariants, and virtually
applies proposed edits so that changes which add cycles or layering
violations are rejected before they are committed.
"""

__version__ = "0.1.0"
