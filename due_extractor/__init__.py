"""Invoice due-date extraction from CSV / Excel uploads.

The pipeline reads the first sheet of an upload, resolves loosely named
columns, normalizes dates and keeps the invoices that are overdue by up to
30 days or due within the next 7 days.
"""

from .errors import EmptyInputError, ExtractionError, ParseError, UnsupportedFileTypeError
from .models.due_record import DueRecord
from .services.extractor import extract_due_records
from .services.processor import process_file

__all__ = [
    "DueRecord",
    "EmptyInputError",
    "ExtractionError",
    "ParseError",
    "UnsupportedFileTypeError",
    "extract_due_records",
    "process_file",
]

__version__ = "0.1.0"
