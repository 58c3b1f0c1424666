from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any

from ..columns.resolver import (
    DEFAULT_FIELD_CANDIDATES,
    FieldCandidates,
    resolve_column,
    resolve_column_key,
    resolve_fields,
)
from ..dates.due import resolve_due, today_for
from ..dates.normalizer import is_blank, normalize_date
from ..models.due_record import DueRecord
from ..models.extraction_result import ExtractionReport, SkippedRow, SkipReason
from ..models.row_data import RowData

"""Record extractor: rows -> DueRecords inside the due-date window.

Pure function over its input: no I/O, no shared state. Row-level problems
are reported as SkippedRow entries and never abort the batch.
"""

__all__ = [
    "DueWindow",
    "DEFAULT_WINDOW",
    "extract",
    "extract_due_records",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DueWindow:
    """Inclusive days_left range a record must fall in to be emitted."""
    min_days: int = -30
    max_days: int = 7

    def contains(self, days_left: int) -> bool:
        return self.min_days <= days_left <= self.max_days


DEFAULT_WINDOW = DueWindow()


def _text(value: Any) -> str:
    if is_blank(value):
        return ""
    return str(value).strip()


def _row_items(rows: Iterable[RowData | Mapping[str, Any]]) -> Iterable[tuple[int, Mapping[str, Any]]]:
    for index, row in enumerate(rows):
        if isinstance(row, RowData):
            yield row.row_number, row.values
        else:
            yield index + 2, row


def _extract_row(
    row: Mapping[str, Any],
    today: date,
    field_candidates: FieldCandidates,
    include_undated_rows: bool,
) -> DueRecord | SkippedRow:
    """Return a DueRecord (window not yet applied) or a SkippedRow whose row_number the caller fills."""
    fields = resolve_fields(row, field_candidates)
    party_name = _text(fields["party_name"])
    bill_no = _text(fields["bill_no"])
    if not party_name or not bill_no:
        missing = "party name" if not party_name else "bill number"
        return SkippedRow(row_number=0, reason=SkipReason.MISSING_IDENTIFIER, detail=f"missing {missing}")

    # "Due Days" は "due" も含むため、日数列として採用した列は期日列候補から除外
    due_days_key = resolve_column_key(row, field_candidates["due_days"])
    due_days_value = row[due_days_key] if due_days_key is not None else None
    exclude = (due_days_key,) if due_days_key is not None else ()
    due_value = resolve_column(row, field_candidates["due_date"], exclude=exclude)

    resolution = resolve_due(due_value, due_days_value, today)
    days_left = resolution.days_left
    if days_left is None:
        if resolution.has_due_info:
            return SkippedRow(
                row_number=0,
                reason=SkipReason.UNPARSEABLE_DUE_DATE,
                detail=f"unrecognized due date {resolution.due_date!r}",
            )
        if not include_undated_rows:
            return SkippedRow(row_number=0, reason=SkipReason.NO_DUE_INFORMATION, detail="no due date or due days")
        days_left = 0

    gstin = _text(fields["party_gstin"])
    return DueRecord(
        party_name=party_name,
        bill_no=bill_no,
        bill_date=normalize_date(fields["bill_date"]),
        due_date=resolution.due_date,
        bill_amount=_text(fields["bill_amount"]),
        days_left=days_left,
        party_gstin=gstin or None,
    )


def extract(
    rows: Iterable[RowData | Mapping[str, Any]],
    today: date | None = None,
    *,
    field_candidates: FieldCandidates = DEFAULT_FIELD_CANDIDATES,
    window: DueWindow = DEFAULT_WINDOW,
    include_undated_rows: bool = False,
) -> ExtractionReport:
    """Extract in-window DueRecords and collect diagnostics.

    Args:
        rows: Parsed rows in source order
        today: Reference day for days_left (read once per run; defaults to today in UTC)
        field_candidates: semantic field -> accepted header substrings
        window: Inclusive days_left range to keep
        include_undated_rows: Keep rows with no due information as days_left=0

    Returns:
        ExtractionReport whose records preserve input order
    """
    if today is None:
        today = today_for("UTC")

    records: list[DueRecord] = []
    skipped: list[SkippedRow] = []
    out_of_window = 0
    total = 0
    for row_number, values in _row_items(rows):
        total += 1
        outcome = _extract_row(values, today, field_candidates, include_undated_rows)
        if isinstance(outcome, SkippedRow):
            skipped.append(SkippedRow(row_number=row_number, reason=outcome.reason, detail=outcome.detail))
            logger.debug(f"row {row_number} skipped: {outcome.reason} ({outcome.detail})")
            continue
        if not window.contains(outcome.days_left):
            out_of_window += 1
            continue
        records.append(outcome)

    return ExtractionReport(records=records, total_rows=total, skipped_rows=skipped, out_of_window=out_of_window)


def extract_due_records(
    rows: Iterable[RowData | Mapping[str, Any]],
    today: date | None = None,
    **options: Any,
) -> list[DueRecord]:
    """Extract the DueRecords of rows whose due date falls inside the window."""
    return extract(rows, today, **options).records
