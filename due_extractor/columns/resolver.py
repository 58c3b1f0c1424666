from __future__ import annotations

import re
from collections.abc import Collection, Iterable, Mapping, Sequence
from typing import Any

"""Heuristic column resolution for loosely named spreadsheet headers.

Upload files come from many different authors, so headers are matched by
substring on a normalized form ("Party's GSTIN#" -> "partysgstin") rather than
by equality. Resolution is first-match-wins in original column order.
"""

__all__ = [
    "FieldCandidates",
    "DEFAULT_FIELD_CANDIDATES",
    "normalize_column_name",
    "resolve_column_key",
    "resolve_column",
    "resolve_fields",
]

FieldCandidates = Mapping[str, Sequence[str]]

_NON_ALNUM = re.compile(r"[^a-z0-9]")

# semantic field -> accepted substrings (order of fields is not significant)
DEFAULT_FIELD_CANDIDATES: dict[str, tuple[str, ...]] = {
    "party_name": ("partyname", "party", "name", "customer"),
    "bill_no": ("billno", "bill", "invoice", "invoiceno"),
    "bill_date": ("billdate", "invoicedate", "date"),
    "due_date": ("duedate", "due"),
    "due_days": ("duedays", "days"),
    "bill_amount": ("billamount", "amount", "total"),
    "party_gstin": ("partygstin", "gstin", "gst"),
}


def normalize_column_name(name: Any) -> str:
    """Lower-case and drop everything outside [a-z0-9]."""
    return _NON_ALNUM.sub("", str(name).lower())


def resolve_column_key(
    row: Mapping[str, Any], candidates: Iterable[str], exclude: Collection[str] = ()
) -> str | None:
    """Return the first header whose normalized form contains any candidate."""
    names = tuple(candidates)
    for key in row:
        if key in exclude:
            continue
        normalized = normalize_column_name(key)
        if any(name in normalized for name in names):
            return key
    return None


def resolve_column(
    row: Mapping[str, Any], candidates: Iterable[str], exclude: Collection[str] = ()
) -> Any | None:
    """Return the value under the first matching header, or None when no header matches.

    A matching header with an empty cell returns the empty value, so callers can
    tell "absent" from "present but empty".
    """
    key = resolve_column_key(row, candidates, exclude)
    if key is None:
        return None
    return row[key]


def resolve_fields(
    row: Mapping[str, Any], field_candidates: FieldCandidates = DEFAULT_FIELD_CANDIDATES
) -> dict[str, Any]:
    """Resolve every semantic field of a candidate table independently."""
    return {field: resolve_column(row, names) for field, names in field_candidates.items()}
