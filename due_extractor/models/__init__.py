"""Domain models for the due-date extraction pipeline."""

from .due_record import DueRecord
from .error_record import ErrorRecord
from .extraction_result import ExtractionReport, ExtractionResult, SkippedRow, SkipReason
from .row_data import RowData
from .run_result import FileStat, RunResult

__all__ = [
    # Input
    "RowData",
    # Output
    "DueRecord",
    "ExtractionReport",
    "ExtractionResult",
    "SkippedRow",
    "SkipReason",
    # CLI run
    "FileStat",
    "RunResult",
    # Logging
    "ErrorRecord",
]
