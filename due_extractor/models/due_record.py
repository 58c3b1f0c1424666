from __future__ import annotations

from dataclasses import asdict, dataclass

"""DueRecord model: one extracted invoice inside the due-date window."""

__all__ = [
    "DueRecord",
]


@dataclass(frozen=True)
class DueRecord:
    """Canonical output unit of the extractor.

    Attributes:
        party_name: Non-empty trimmed party / customer name
        bill_no: Non-empty trimmed bill or invoice number
        bill_date: YYYY-MM-DD, or "" when the row had no usable bill date
        due_date: YYYY-MM-DD (empty only for legacy undated rows)
        bill_amount: Trimmed passthrough text, "" when absent
        days_left: Negative = overdue, 0 = due today, positive = due later
        party_gstin: Trimmed tax id, None when the row did not supply one
    """
    party_name: str
    bill_no: str
    bill_date: str
    due_date: str
    bill_amount: str
    days_left: int
    party_gstin: str | None = None

    def to_dict(self) -> dict[str, object]:
        """Serialize to the consumer-facing dict (party_gstin omitted when absent)."""
        data = asdict(self)
        if self.party_gstin is None:
            del data["party_gstin"]
        return data
