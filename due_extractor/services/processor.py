from __future__ import annotations

import logging
import re
from datetime import date

from ..config.loader import ExtractorSettings
from ..dates.due import today_for
from ..errors import EmptyInputError, UnsupportedFileTypeError
from ..models.extraction_result import ExtractionResult
from ..tabular.reader import read_table
from .extractor import extract

"""Upload processing service.

Coordinates one upload end to end:
1. Admission check on media type / filename
2. Tabular parsing of the first sheet
3. Empty-input check
4. Record extraction against a single "today"

Storage of the original file and upload bookkeeping belong to the caller.
"""

__all__ = [
    "SUPPORTED_MEDIA_TYPES",
    "is_supported_upload",
    "ensure_supported_upload",
    "process_file",
]

logger = logging.getLogger(__name__)

SUPPORTED_MEDIA_TYPES = frozenset({
    "text/csv",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
})
_SUPPORTED_SUFFIX = re.compile(r"\.(csv|xlsx|xls)$", re.IGNORECASE)


def is_supported_upload(filename: str | None, media_type: str | None) -> bool:
    """True when the media type or the filename extension is CSV / Excel."""
    if media_type and media_type.split(";")[0].strip().lower() in SUPPORTED_MEDIA_TYPES:
        return True
    return bool(filename and _SUPPORTED_SUFFIX.search(filename))


def ensure_supported_upload(filename: str | None, media_type: str | None) -> None:
    if not is_supported_upload(filename, media_type):
        raise UnsupportedFileTypeError()


def process_file(
    data: bytes,
    media_type: str | None,
    filename: str | None = None,
    *,
    today: date | None = None,
    settings: ExtractorSettings | None = None,
    check_type: bool = True,
) -> ExtractionResult:
    """Process one upload into an ExtractionResult.

    Args:
        data: Raw upload bytes
        media_type: Declared media type (admission check and diagnostics only)
        filename: Original filename (admission check and diagnostics only)
        today: Reference day; defaults to today in settings.timezone
        settings: Extraction settings (defaults when None)
        check_type: Run the upload admission check

    Raises:
        UnsupportedFileTypeError: upload is neither CSV nor Excel
        ParseError: content could not be parsed
        EmptyInputError: parsed sheet has no data rows
    """
    settings = settings or ExtractorSettings()
    if check_type:
        ensure_supported_upload(filename, media_type)

    sheet = read_table(data, media_type)
    if not sheet.rows:
        raise EmptyInputError()

    if today is None:
        today = today_for(settings.timezone)

    report = extract(
        sheet.rows,
        today,
        field_candidates=settings.field_candidates,
        window=settings.window,
        include_undated_rows=settings.include_undated_rows,
    )
    logger.info(
        f"{filename or '<upload>'}: rows={report.total_rows} records={len(report.records)} "
        f"skipped={len(report.skipped_rows)} out_of_window={report.out_of_window} today={today.isoformat()}"
    )
    return ExtractionResult.from_report(report, sheet_name=sheet.sheet_name)
