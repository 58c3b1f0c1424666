from __future__ import annotations

import math
import numbers
import re
from datetime import UTC, date, datetime, timedelta
from typing import Any

import numpy as np
import pandas as pd

"""Date normalization to canonical YYYY-MM-DD text.

Accepted inputs:
- Excel 1900 date-system serial numbers (including the 1900-02-29 leap bug)
- native date / datetime / pandas Timestamp / numpy datetime64
- text in one of TEXT_PATTERNS

normalize_date() never raises: unrecognized text is returned trimmed.
"""

__all__ = [
    "TEXT_PATTERNS",
    "excel_serial_to_iso",
    "is_blank",
    "normalize_date",
    "parse_canonical_date",
]

# (pattern, order of captured groups)
# NOTE: slash / dash パターンは日/月/年 として解釈する (既存利用者が依存)
TEXT_PATTERNS: tuple[tuple[re.Pattern[str], tuple[str, str, str]], ...] = (
    (re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$"), ("year", "month", "day")),
    (re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"), ("day", "month", "year")),
    (re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$"), ("day", "month", "year")),
)

_SECONDS_PER_DAY = 86400
_EXCEL_LEAP_BUG_SERIAL = 60
_EXCEL_EPOCH_EARLY = date(1899, 12, 31)  # serial 1 = 1900-01-01
_EXCEL_EPOCH = date(1899, 12, 30)  # serials after the fictitious 1900-02-29


def excel_serial_to_iso(serial: float) -> str | None:
    """Convert an Excel serial day number to YYYY-MM-DD, or None when out of range."""
    if not math.isfinite(serial) or serial < 1:
        return None
    days = math.floor(serial)
    # 小数部 (時刻) が丸めて 24h に達した場合のみ翌日へ繰り上げ
    if round(_SECONDS_PER_DAY * (serial - days)) >= _SECONDS_PER_DAY:
        days += 1
    if days == _EXCEL_LEAP_BUG_SERIAL:
        return "1900-02-29"
    epoch = _EXCEL_EPOCH_EARLY if days < _EXCEL_LEAP_BUG_SERIAL else _EXCEL_EPOCH
    try:
        return (epoch + timedelta(days=days)).isoformat()
    except OverflowError:
        return None


def _native_to_iso(value: date) -> str:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.date().isoformat()
    return value.isoformat()


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return True
    return False


def normalize_date(value: Any) -> str:
    """Normalize a heterogeneous date value to YYYY-MM-DD text."""
    if is_blank(value):
        return ""

    if isinstance(value, np.datetime64):
        value = pd.Timestamp(value)
    if isinstance(value, date):
        return _native_to_iso(value)

    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        if value == 0:
            return ""
        converted = excel_serial_to_iso(float(value))
        return converted if converted is not None else str(value)

    text = str(value).strip()
    for pattern, order in TEXT_PATTERNS:
        m = pattern.match(text)
        if m:
            parts = dict(zip(order, m.groups(), strict=True))
            return f"{parts['year']}-{int(parts['month']):02d}-{int(parts['day']):02d}"
    return text


def parse_canonical_date(text: str) -> date | None:
    """Parse YYYY-MM-DD text into a date, None when it is not a real calendar date."""
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        return None
