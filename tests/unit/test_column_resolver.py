from __future__ import annotations

import pytest

from due_extractor.columns.resolver import (
    DEFAULT_FIELD_CANDIDATES,
    normalize_column_name,
    resolve_column,
    resolve_column_key,
    resolve_fields,
)


@pytest.mark.parametrize(
    "header,expected",
    [
        ("Due Date", "duedate"),
        ("Party's GSTIN#", "partysgstin"),
        ("  BILL_NO ", "billno"),
        ("Invoice-No.", "invoiceno"),
        ("Amount (INR)", "amountinr"),
        (2024, "2024"),
    ],
)
def test_normalize_column_name(header, expected):
    assert normalize_column_name(header) == expected


def test_resolve_substring_match():
    row = {"Invoice Date": "2024-01-01", "Customer Name": "Acme"}
    assert resolve_column(row, ["date"]) == "2024-01-01"
    assert resolve_column(row, ["customer"]) == "Acme"


def test_resolve_first_header_wins_over_candidate_order():
    """Header order decides, not the order of the candidate list."""
    row = {"Invoice Date": "a", "Bill Date": "b"}
    assert resolve_column(row, ["billdate", "invoicedate", "date"]) == "a"


def test_resolve_earlier_header_chosen_when_both_match():
    row = {"Due": "first", "Due Date": "second"}
    assert resolve_column(row, ["duedate", "due"]) == "first"
    assert resolve_column_key(row, ["duedate", "due"]) == "Due"


def test_resolve_permissive_substring():
    row = {"Sub Due Date": "x"}
    assert resolve_column(row, ["due"]) == "x"


def test_resolve_no_match_returns_none():
    row = {"Foo": "bar"}
    assert resolve_column(row, ["party", "name"]) is None


def test_resolve_present_but_empty_is_not_none():
    row = {"Party Name": ""}
    assert resolve_column(row, ["partyname"]) == ""


def test_resolve_exclude_skips_header():
    row = {"Due Days": "5", "Due Date": "2024-03-06"}
    assert resolve_column(row, ["duedate", "due"]) == "5"
    assert resolve_column(row, ["duedate", "due"], exclude=("Due Days",)) == "2024-03-06"


def test_resolve_fields_default_table():
    row = {
        "Party Name": "Acme",
        "Bill No": "INV-1",
        "Amount": "100",
        "GSTIN": "27AAAPL1234C1ZV",
    }
    fields = resolve_fields(row)
    assert set(fields) == set(DEFAULT_FIELD_CANDIDATES)
    assert fields["party_name"] == "Acme"
    assert fields["bill_no"] == "INV-1"
    assert fields["bill_amount"] == "100"
    assert fields["party_gstin"] == "27AAAPL1234C1ZV"
    assert fields["due_date"] is None
    assert fields["due_days"] is None


def test_resolve_fields_custom_table():
    row = {"Kunde": "Acme", "Rechnung": "R-1"}
    fields = resolve_fields(row, {"party_name": ["kunde"], "bill_no": ["rechnung"]})
    assert fields == {"party_name": "Acme", "bill_no": "R-1"}
