from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo

from .normalizer import is_blank, normalize_date, parse_canonical_date

"""Due-date resolution: explicit due date or days-until-due -> (due_date, days_left).

"today" is always passed in by the caller and must be computed once per
pipeline run so that every row of one upload is measured against the same day.
"""

__all__ = [
    "DueResolution",
    "today_for",
    "parse_day_count",
    "resolve_due",
]

# parseInt 互換: 先頭の符号付き整数のみ採用 ("5 days" -> 5, "5.0" -> 5)
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class DueResolution:
    due_date: str  # YYYY-MM-DD or ""
    days_left: int | None  # None = could not be determined
    has_due_info: bool = True  # False when neither a due date nor a day count was supplied


def today_for(timezone: str = "UTC") -> date:
    """Current calendar date in the given IANA zone."""
    tz = UTC if timezone.upper() == "UTC" else ZoneInfo(timezone)
    return datetime.now(tz).date()


def parse_day_count(value: Any) -> int | None:
    """Leading integer of a day-count cell, None when there is none."""
    if is_blank(value):
        return None
    m = _LEADING_INT.match(str(value))
    if not m:
        return None
    return int(m.group(1))


def resolve_due(due_value: Any, due_days_value: Any, today: date) -> DueResolution:
    """Reconcile a due date and a days-until-due figure.

    The explicit due date always wins when one is present, even if the day
    count disagrees with it.
    """
    if not is_blank(due_value):
        canonical = normalize_date(due_value)
        due = parse_canonical_date(canonical)
        if due is None:
            return DueResolution(due_date=canonical, days_left=None)
        return DueResolution(due_date=canonical, days_left=(due - today).days)

    days = parse_day_count(due_days_value)
    if days is not None:
        try:
            due_date = (today + timedelta(days=days)).isoformat()
        except OverflowError:
            return DueResolution(due_date="", days_left=None)
        return DueResolution(due_date=due_date, days_left=days)

    return DueResolution(due_date="", days_left=None, has_due_info=False)
