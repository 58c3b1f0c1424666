from __future__ import annotations

import io
import logging
import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

import pandas as pd

from ..errors import ParseError
from ..models.row_data import RowData

"""Tabular reader: upload bytes -> ordered RowData sequence.

- 構造は内容から判定 (declared media type は診断ログのみ)
- 先頭シートのみ読み込み、1行目をヘッダとする
- 値は "display" モード: 数値は文字列化、欠損セルは空文字
"""

__all__ = [
    "SheetData",
    "detect_format",
    "detect_delimiter",
    "read_table",
    "parse",
]

logger = logging.getLogger(__name__)

XLSX_SIGNATURE = b"PK\x03\x04"
XLS_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
CANDIDATE_DELIMITERS = (",", ";", "\t", "|")
CSV_SHEET_NAME = ""
_UNNAMED_HEADER = re.compile(r"^Unnamed: \d+(\.\d+)?$")


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]
    rows: list[RowData]


def detect_format(data: bytes) -> str:
    """Return "xlsx", "xls" or "csv" based on the leading bytes."""
    if data.startswith(XLSX_SIGNATURE):
        return "xlsx"
    if data.startswith(XLS_SIGNATURE):
        return "xls"
    return "csv"


def detect_delimiter(header_line: str) -> str:
    """Pick the candidate delimiter occurring most often outside quotes in the header line."""
    counts = dict.fromkeys(CANDIDATE_DELIMITERS, 0)
    in_quotes = False
    for ch in header_line:
        if ch == '"':
            in_quotes = not in_quotes
        elif not in_quotes and ch in counts:
            counts[ch] += 1
    best = max(counts, key=lambda d: counts[d])
    return best if counts[best] > 0 else ","


def _decode_text(data: bytes) -> str:
    if b"\x00" in data[:4096]:
        raise ParseError("binary content is neither CSV nor a supported workbook")
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        # Excel の "CSV" 保存は cp1252 系が多い; latin-1 は全バイトを受理する
        return data.decode("latin-1")


def _display_value(val: Any) -> Any:
    """Convert a raw cell into its display form."""
    if val is None:
        return ""
    if isinstance(val, str):
        return val
    if isinstance(val, bool):
        return "TRUE" if val else "FALSE"
    # NaN / NaT (NaT は datetime のサブクラスなので先に判定)
    if pd.api.types.is_scalar(val) and pd.isna(val):
        return ""
    if isinstance(val, pd.Timestamp):
        return val.to_pydatetime()
    if isinstance(val, (datetime, date)):
        return val
    if isinstance(val, float):
        if math.isinf(val):
            return str(val)
        if val.is_integer():
            return str(int(val))
        return str(val)
    return str(val)


def _column_names(df: pd.DataFrame) -> list[str]:
    """Header texts; blank header cells become __EMPTY, __EMPTY_1, ...

    pandas labels them "Unnamed: N", which would match the "name" candidate.
    """
    columns: list[str] = []
    empty_count = 0
    for c in df.columns:
        text = str(c)
        if _UNNAMED_HEADER.match(text):
            text = "__EMPTY" if empty_count == 0 else f"__EMPTY_{empty_count}"
            empty_count += 1
        columns.append(text)
    return columns


def _frame_to_rows(df: pd.DataFrame) -> tuple[list[str], list[RowData]]:
    columns = _column_names(df)
    rows: list[RowData] = []
    for offset, raw in enumerate(df.itertuples(index=False, name=None)):
        values = {col: _display_value(v) for col, v in zip(columns, raw, strict=False)}
        # 全セル空の行はスキップ
        if all(v == "" for v in values.values()):
            continue
        rows.append(RowData(row_number=offset + 2, values=values))
    return columns, rows


def _read_csv(data: bytes) -> pd.DataFrame:
    text = _decode_text(data)
    if not text.strip():
        return pd.DataFrame()
    header_line = text.splitlines()[0]
    delimiter = detect_delimiter(header_line)
    # index_col=False: 余分なフィールドがあっても先頭列を index にしない
    header = pd.read_csv(io.StringIO(text), sep=delimiter, nrows=0, index_col=False)
    # usecols をヘッダ幅に固定 -> 行末の余分なフィールドは行ごとに切り捨て
    return pd.read_csv(
        io.StringIO(text),
        sep=delimiter,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        index_col=False,
        usecols=range(len(header.columns)),
        on_bad_lines="warn",
    )


def _read_workbook(data: bytes, fmt: str) -> tuple[str, pd.DataFrame]:
    engine = "openpyxl" if fmt == "xlsx" else "xlrd"
    xls = pd.ExcelFile(io.BytesIO(data), engine=engine)
    if not xls.sheet_names:
        return "", pd.DataFrame()
    first = xls.sheet_names[0]
    if len(xls.sheet_names) > 1:
        logger.debug(f"workbook has {len(xls.sheet_names)} sheets; reading only '{first}'")
    df = xls.parse(first, header=0, dtype=object)
    return str(first), df


def read_table(data: bytes, media_type: str | None = None) -> SheetData:
    """Read the first sheet of an upload.

    Parameters
    ----------
    data: アップロードされたファイルの生バイト
    media_type: 申告された MIME タイプ (判定には使わない)

    Raises
    ------
    ParseError: content cannot be read as CSV or Excel data
    """
    fmt = detect_format(data)
    logger.debug(f"reading upload: detected={fmt} declared={media_type or '-'} bytes={len(data)}")
    try:
        if fmt == "csv":
            sheet_name, df = CSV_SHEET_NAME, _read_csv(data)
        else:
            sheet_name, df = _read_workbook(data, fmt)
    except ParseError:
        raise
    except pd.errors.EmptyDataError:
        sheet_name, df = "", pd.DataFrame()
    except Exception as e:
        raise ParseError(e) from e

    columns, rows = _frame_to_rows(df)
    return SheetData(sheet_name=sheet_name, columns=columns, rows=rows)


def parse(data: bytes, media_type: str | None = None) -> list[RowData]:
    """Parse upload bytes into RowData objects (header line excluded)."""
    return read_table(data, media_type).rows
