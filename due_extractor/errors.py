from __future__ import annotations

from typing import Any

"""Exception hierarchy for the extraction pipeline.

All request-fatal failures derive from ExtractionError and serialize to the
error envelope consumed by upload clients: {"status": "error", "message": ...}.
Row-level data problems are not exceptions; see models.extraction_result.SkippedRow.
"""

__all__ = [
    "ExtractionError",
    "ParseError",
    "EmptyInputError",
    "UnsupportedFileTypeError",
]


class ExtractionError(Exception):
    """Base exception for request-fatal extraction failures."""

    error_type = "EXTRACTION_ERROR"

    @property
    def message(self) -> str:
        return str(self)

    def to_dict(self) -> dict[str, Any]:
        return {"status": "error", "message": self.message}


class ParseError(ExtractionError):
    """Raised when the upload bytes cannot be read as CSV or Excel data."""

    error_type = "PARSE_ERROR"

    def __init__(self, cause: BaseException | str) -> None:
        self.cause = cause
        detail = str(cause) or type(cause).__name__
        super().__init__(f"Failed to parse file: {detail}")


class EmptyInputError(ExtractionError):
    """Raised when the upload parsed fine but contains no data rows."""

    error_type = "EMPTY_INPUT"

    def __init__(self, message: str = "File is empty or could not be parsed") -> None:
        super().__init__(message)


class UnsupportedFileTypeError(ExtractionError):
    """Raised when neither the media type nor the filename is CSV / Excel."""

    error_type = "UNSUPPORTED_FILE_TYPE"

    def __init__(self, message: str = "Invalid file type. Only CSV and Excel files are allowed") -> None:
        super().__init__(message)
