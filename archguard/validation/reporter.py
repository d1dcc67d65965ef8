"""Report Generator for validation results.

Renders the verdicts of one or more virtual applies in human-readable
and machine-readable form, so competing candidates can be compared side
by side.
"""

import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

import structlog

from archguard.models import ValidationResult, ValidationState

logger = structlog.get_logger()


class ReportFormat(str, Enum):
    """Output format for reports."""

    TEXT = "text"
    JSON = "json"
    MARKDOWN = "markdown"


@dataclass
class ValidationSummary:
    """Summary statistics over a batch of candidates."""

    total_candidates: int = 0
    safe: int = 0
    red_flagged: int = 0
    collision_rejected: int = 0
    introduces_cycles: int = 0
    total_violations: int = 0
    total_warnings: int = 0
    total_errors: int = 0
    by_violation_kind: dict[str, int] = field(default_factory=dict)


@dataclass
class ValidationReport:
    """Complete validation report."""

    timestamp: datetime
    summary: ValidationSummary
    results: list[tuple[str, ValidationResult]]
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        s = self.summary
        return {
            "timestamp": self.timestamp.isoformat(),
            "summary": {
                "total_candidates": s.total_candidates,
                "safe": s.safe,
                "red_flagged": s.red_flagged,
                "collision_rejected": s.collision_rejected,
                "introduces_cycles": s.introduces_cycles,
                "total_violations": s.total_violations,
                "total_warnings": s.total_warnings,
                "total_errors": s.total_errors,
                "by_violation_kind": s.by_violation_kind,
            },
            "results": [
                {"candidate": label, **result.model_dump(mode="json")}
                for label, result in self.results
            ],
            "metadata": self.metadata,
        }


class ReportGenerator:
    """Generates validation reports in various formats."""

    def __init__(self):
        self._logger = logger.bind(component="ReportGenerator")

    def generate(
        self,
        results: Sequence[ValidationResult],
        format: ReportFormat = ReportFormat.TEXT,
        labels: Sequence[str] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Generate a report from validation results.

        Args:
            results: Validation results, one per candidate
            format: Output format
            labels: Candidate names; defaults to ``candidate-1``, ``candidate-2``...
            metadata: Additional metadata to include

        Returns:
            Formatted report string
        """
        if labels is not None and len(labels) != len(results):
            raise ValueError(f"Expected {len(results)} labels, got {len(labels)}")
        names = list(labels) if labels is not None else [
            f"candidate-{index}" for index in range(1, len(results) + 1)
        ]

        report = ValidationReport(
            timestamp=datetime.now(timezone.utc),
            summary=self._build_summary(results),
            results=list(zip(names, results)),
            metadata=metadata or {},
        )

        match ReportFormat(format):
            case ReportFormat.JSON:
                return self._format_json(report)
            case ReportFormat.MARKDOWN:
                return self._format_markdown(report)
            case _:
                return self._format_text(report)

    def _build_summary(self, results: Sequence[ValidationResult]) -> ValidationSummary:
        """Build summary statistics from results."""
        summary = ValidationSummary()

        for result in results:
            summary.total_candidates += 1

            if result.state == ValidationState.COLLISION_REJECTED:
                summary.collision_rejected += 1
            elif result.is_safe:
                summary.safe += 1
            else:
                summary.red_flagged += 1

            if result.introduces_cycles:
                summary.introduces_cycles += 1

            summary.total_warnings += len(result.warnings)
            summary.total_errors += len(result.errors)

            for violation in result.layer_violations:
                summary.total_violations += 1
                kind = violation.violation_kind.value
                summary.by_violation_kind[kind] = summary.by_violation_kind.get(kind, 0) + 1

        return summary

    @staticmethod
    def _status(result: ValidationResult) -> str:
        if result.state == ValidationState.COLLISION_REJECTED:
            return "REJECTED"
        return "SAFE" if result.is_safe else "RED FLAG"

    def _format_text(self, report: ValidationReport) -> str:
        """Format as plain text."""
        lines = []
        s = report.summary

        # Header
        lines.append("=" * 60)
        lines.append("ARCHGUARD VALIDATION REPORT")
        lines.append("=" * 60)
        lines.append(f"Timestamp: {report.timestamp.isoformat()}")
        lines.append("")

        # Summary
        lines.append("SUMMARY")
        lines.append("-" * 40)
        lines.append(f"Candidates:          {s.total_candidates}")
        lines.append(f"Safe:                {s.safe}")
        lines.append(f"Red Flagged:         {s.red_flagged}")
        lines.append(f"Collision Rejected:  {s.collision_rejected}")
        lines.append(f"Introduce Cycles:    {s.introduces_cycles}")
        lines.append(f"Layer Violations:    {s.total_violations}")
        lines.append("")

        if s.by_violation_kind:
            lines.append("VIOLATIONS BY KIND")
            lines.append("-" * 40)
            for kind, count in sorted(s.by_violation_kind.items()):
                lines.append(f"  {kind}: {count}")
            lines.append("")

        # Details
        lines.append("DETAILED RESULTS")
        lines.append("-" * 40)

        for label, result in report.results:
            lines.append(f"\n[{self._status(result)}] {label}")
            lines.append(f"  Betti_1: {result.original_betti_1} -> {result.new_betti_1}")
            for violation in result.layer_violations:
                lines.append(f"  [VIOLATION] {violation.message}")
            for error in result.errors:
                lines.append(f"  [ERROR] {error}")
            for warning in result.warnings:
                lines.append(f"  [WARN] {warning}")

        lines.append("")
        lines.append("=" * 60)

        return "\n".join(lines)

    def _format_json(self, report: ValidationReport) -> str:
        """Format as JSON."""
        return json.dumps(report.to_dict(), indent=2)

    def _format_markdown(self, report: ValidationReport) -> str:
        """Format as Markdown."""
        lines = []
        s = report.summary

        lines.append("# ArchGuard Validation Report")
        lines.append("")
        lines.append(f"**Generated:** {report.timestamp.isoformat()}")
        lines.append("")

        lines.append("## Summary")
        lines.append("")
        lines.append("| Metric | Value |")
        lines.append("|--------|-------|")
        lines.append(f"| Candidates | {s.total_candidates} |")
        lines.append(f"| Safe | {s.safe} |")
        lines.append(f"| Red Flagged | {s.red_flagged} |")
        lines.append(f"| Collision Rejected | {s.collision_rejected} |")
        lines.append(f"| Introduce Cycles | {s.introduces_cycles} |")
        lines.append(f"| Layer Violations | {s.total_violations} |")
        lines.append("")

        lines.append("## Candidates")
        lines.append("")

        for label, result in report.results:
            lines.append(f"### {self._status(result)}: `{label}`")
            lines.append("")
            lines.append(
                f"- **Betti_1**: {result.original_betti_1} -> {result.new_betti_1}"
            )
            lines.append(f"- **State**: {result.state.value}")
            if result.new_symbols:
                lines.append(f"- **New symbols**: {', '.join(f'`{sid}`' for sid in result.new_symbols)}")
            lines.append("")

            if result.layer_violations:
                lines.append("| Kind | From | To |")
                lines.append("|------|------|----|")
                for v in result.layer_violations:
                    lines.append(
                        f"| {v.violation_kind.value} | `{v.from_id}` ({v.from_layer}) "
                        f"| `{v.to_id}` ({v.to_layer}) |"
                    )
                lines.append("")

            if result.errors:
                lines.append("**Errors:**")
                lines.append("")
                for error in result.errors:
                    lines.append(f"- {error}")
                lines.append("")

            if result.warnings:
                lines.append("**Warnings:**")
                lines.append("")
                for warning in result.warnings:
                    lines.append(f"- {warning}")
                lines.append("")

        return "\n".join(lines)

    def save_report(
        self,
        results: Sequence[ValidationResult],
        output_path: str | Path,
        format: ReportFormat | None = None,
        labels: Sequence[str] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Generate and save report to file.

        The format is inferred from the file extension when not given.
        """
        path = Path(output_path)

        if format is None:
            format = {
                ".txt": ReportFormat.TEXT,
                ".json": ReportFormat.JSON,
                ".md": ReportFormat.MARKDOWN,
            }.get(path.suffix.lower(), ReportFormat.TEXT)

        path.write_text(self.generate(results, format, labels, metadata))

        self._logger.info(
            "Report saved",
            path=str(path),
            format=format.value,
        )
