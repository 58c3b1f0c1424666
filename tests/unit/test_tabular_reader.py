from __future__ import annotations

from datetime import datetime

import pytest

from due_extractor.errors import ParseError
from due_extractor.tabular.reader import detect_delimiter, detect_format, parse, read_table


def test_csv_rows_keyed_by_original_header():
    data = b"Party Name,Bill No,Due Date\nAcme,INV-1,2024-01-10\nBeta,INV-2,2024-01-12\n"
    rows = parse(data, "text/csv")
    assert len(rows) == 2
    assert rows[0].values == {"Party Name": "Acme", "Bill No": "INV-1", "Due Date": "2024-01-10"}
    assert list(rows[0].values) == ["Party Name", "Bill No", "Due Date"]
    assert rows[0].row_number == 2
    assert rows[1].row_number == 3


def test_csv_values_kept_as_display_text():
    rows = parse(b"Bill No,Amount\n00123,1500.50\n", "text/csv")
    assert rows[0].values == {"Bill No": "00123", "Amount": "1500.50"}


def test_csv_missing_cells_default_to_empty_text():
    rows = parse(b"A,B,C\n1,,\n2\n", "text/csv")
    assert rows[0].values == {"A": "1", "B": "", "C": ""}
    assert rows[1].values == {"A": "2", "B": "", "C": ""}


def test_csv_blank_lines_skipped():
    rows = parse(b"A,B\n1,2\n\n,\n3,4\n", "text/csv")
    assert [r.values["A"] for r in rows] == ["1", "3"]


def test_csv_semicolon_delimiter_and_bom():
    rows = parse("\ufeffParty;Bill;Due\nAcme;1;2024-01-10\n".encode("utf-8"), "text/csv")
    assert rows[0].values == {"Party": "Acme", "Bill": "1", "Due": "2024-01-10"}


def test_csv_latin1_fallback():
    rows = parse("Party,Bill\nCaf\xe9,1\n".encode("latin-1"), None)
    assert rows[0].values["Party"] == "Caf\xe9"


def test_csv_blank_header_cells_renamed():
    sheet = read_table(b"Party,,Bill,\nAcme,x,1,y\n", "text/csv")
    assert sheet.columns == ["Party", "__EMPTY", "Bill", "__EMPTY_1"]
    assert sheet.rows[0].values["__EMPTY"] == "x"


def test_csv_extra_fields_on_first_row_do_not_shift_columns():
    # unquoted thousands separator gives the first data row one extra field
    data = b"Party Name,Bill No,Due Date,Amount\nAcme,INV-1,2024-01-10,1,200\nBeta,INV-2,2024-01-09,50\n"
    rows = parse(data, "text/csv")
    assert [r.values for r in rows] == [
        {"Party Name": "Acme", "Bill No": "INV-1", "Due Date": "2024-01-10", "Amount": "1"},
        {"Party Name": "Beta", "Bill No": "INV-2", "Due Date": "2024-01-09", "Amount": "50"},
    ]


def test_csv_extra_fields_on_later_row_truncated():
    data = b"Party,Bill,Due\nAcme,1,2024-01-10\nBeta,2,2024-01-09,extra,more\nGamma,3,2024-01-11\n"
    rows = parse(data, "text/csv")
    assert [r.values["Party"] for r in rows] == ["Acme", "Beta", "Gamma"]
    assert rows[1].values == {"Party": "Beta", "Bill": "2", "Due": "2024-01-09"}
    assert [r.row_number for r in rows] == [2, 3, 4]


@pytest.mark.parametrize("data", [b"", b"   \n", b"Party,Bill,Due\n"])
def test_csv_empty_or_header_only_yields_no_rows(data):
    assert parse(data, "text/csv") == []


def test_declared_type_is_not_used_for_detection(xlsx_bytes):
    data = xlsx_bytes({"Sheet1": [["Party", "Bill"], ["Acme", "1"]]})
    # 申告が CSV でも内容 (ZIP シグネチャ) から xlsx と判定する
    rows = parse(data, "text/csv")
    assert rows[0].values == {"Party": "Acme", "Bill": "1"}


def test_xlsx_display_values(xlsx_bytes):
    data = xlsx_bytes(
        {
            "Invoices": [
                ["Party", "Bill No", "Amount", "Due Date", "Note"],
                ["Acme", 101, 1500.5, datetime(2024, 1, 10), None],
                ["Beta", 102, 2000.0, datetime(2024, 1, 12), "ok"],
            ]
        }
    )
    sheet = read_table(data)
    assert sheet.sheet_name == "Invoices"
    assert sheet.columns == ["Party", "Bill No", "Amount", "Due Date", "Note"]
    first, second = sheet.rows
    assert first.values["Bill No"] == "101"
    assert first.values["Amount"] == "1500.5"
    assert first.values["Note"] == ""
    assert isinstance(first.values["Due Date"], datetime)
    assert first.values["Due Date"].date().isoformat() == "2024-01-10"
    assert second.values["Amount"] == "2000"


def test_xlsx_only_first_sheet_read(xlsx_bytes):
    data = xlsx_bytes(
        {
            "First": [["Party"], ["A"]],
            "Second": [["Party"], ["B"], ["C"]],
        }
    )
    rows = parse(data)
    assert [r.values["Party"] for r in rows] == ["A"]


def test_xlsx_header_only_yields_no_rows(xlsx_bytes):
    data = xlsx_bytes({"Sheet1": [["Party", "Bill"]]})
    assert parse(data) == []


def test_corrupt_workbook_raises_parse_error():
    with pytest.raises(ParseError) as e:
        parse(b"PK\x03\x04this is not a zip archive", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")
    assert str(e.value).startswith("Failed to parse file:")
    assert e.value.__cause__ is not None


def test_corrupt_xls_raises_parse_error():
    with pytest.raises(ParseError):
        parse(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 64, "application/vnd.ms-excel")


def test_binary_content_raises_parse_error():
    with pytest.raises(ParseError):
        parse(b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR", "image/png")


def test_detect_format():
    assert detect_format(b"PK\x03\x04rest") == "xlsx"
    assert detect_format(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1rest") == "xls"
    assert detect_format(b"a,b\n1,2") == "csv"


@pytest.mark.parametrize(
    "header,expected",
    [
        ("a,b,c", ","),
        ("a;b;c", ";"),
        ("a\tb\tc", "\t"),
        ("a|b|c", "|"),
        ("single", ","),
        ("\"Party; Name\",\"Bill; No\",Due", ","),
        ("\"a,b\";c;d", ";"),
    ],
)
def test_detect_delimiter(header, expected):
    assert detect_delimiter(header) == expected
