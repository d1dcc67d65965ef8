"""Context assembly for agent tasks.

- Neighborhood Assembler: seed-driven bounded traversal into a MiniCodebase
- Hydration: fills in source code through a caller-supplied reader
"""

from .assembler import NeighborhoodAssembler, assemble
from .hydration import ReadRange, hydrate

__all__ = [
    "NeighborhoodAssembler",
    "ReadRange",
    "assemble",
    "hydrate",
]
