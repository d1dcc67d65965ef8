"""Pre-commit validation of proposed edits.

- Virtual Apply: overlay an edit on the graph and red-flag regressions
- Report Generator: text, JSON and Markdown verdict reports
"""

from .reporter import (
    ReportFormat,
    ReportGenerator,
    ValidationReport,
    ValidationSummary,
)
from .virtual_apply import VirtualApplyValidator, validate

__all__ = [
    # Virtual apply
    "VirtualApplyValidator",
    "validate",
    # Reporter
    "ReportFormat",
    "ReportGenerator",
    "ValidationReport",
    "ValidationSummary",
]
