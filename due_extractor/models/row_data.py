from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""RowData model for the extraction pipeline.

RowData represents a single data line of the uploaded sheet after tabular
parsing. Keys are the original header texts in column order.
"""

__all__ = [
    "RowData",
]


@dataclass(frozen=True)
class RowData:
    """Logical representation of one parsed data line.

    The row_number refers to the source line (header line = 1, so the first
    data line is 2) and is only used for diagnostics.
    """
    row_number: int  # source line number (header = 1)
    values: dict[str, Any]  # original header -> display value
