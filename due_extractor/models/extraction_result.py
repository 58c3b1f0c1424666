from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .due_record import DueRecord

"""Result models for the extraction pipeline.

ExtractionReport is what the pure extractor returns; ExtractionResult is the
success side of the processing service contract. Only status and due_records
are serialized for consumers, the remaining fields are diagnostics for logs
and the SUMMARY line.
"""

__all__ = [
    "SkipReason",
    "SkippedRow",
    "ExtractionReport",
    "ExtractionResult",
]


class SkipReason:
    """Row-level skip reasons (UPPER_SNAKE, also used as ErrorRecord.error_type)."""
    MISSING_IDENTIFIER = "MISSING_IDENTIFIER"
    UNPARSEABLE_DUE_DATE = "UNPARSEABLE_DUE_DATE"
    NO_DUE_INFORMATION = "NO_DUE_INFORMATION"


@dataclass(frozen=True)
class SkippedRow:
    """A row dropped for a data-quality reason (not for falling outside the window)."""
    row_number: int
    reason: str
    detail: str = ""


@dataclass(frozen=True)
class ExtractionReport:
    records: list[DueRecord]
    total_rows: int
    skipped_rows: list[SkippedRow] = field(default_factory=list)
    out_of_window: int = 0  # 窓外で除外した行数


@dataclass(frozen=True)
class ExtractionResult:
    """Successful processing of one upload."""
    due_records: list[DueRecord]
    total_rows: int = 0
    skipped_rows: list[SkippedRow] = field(default_factory=list)
    out_of_window: int = 0
    sheet_name: str = ""
    status: str = "success"

    @classmethod
    def from_report(cls, report: ExtractionReport, sheet_name: str = "") -> ExtractionResult:
        return cls(
            due_records=report.records,
            total_rows=report.total_rows,
            skipped_rows=report.skipped_rows,
            out_of_window=report.out_of_window,
            sheet_name=sheet_name,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "due_records": [r.to_dict() for r in self.due_records],
        }
