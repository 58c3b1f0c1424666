# Shared pytest fixtures
from __future__ import annotations
import io
import tempfile
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from due_extractor.logging.init import reset_logging


@pytest.fixture(autouse=True)
def _clean_state(monkeypatch):
    # 環境変数 / ロガー状態をテスト間で持ち越さない
    monkeypatch.delenv("DUE_EXTRACTOR_CONFIG", raising=False)
    monkeypatch.delenv("DUE_EXTRACTOR_TIMEZONE", raising=False)
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """timezone: UTC
window:
  min_days: -30
  max_days: 7
include_undated_rows: false
error_log_dir: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "extract.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def make_xlsx_bytes(sheets: dict[str, list[list[Any]]]) -> bytes:
    """Build an .xlsx workbook in memory; the first list of each sheet is the header."""
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        for name, rows in sheets.items():
            header, *data = rows
            pd.DataFrame(data, columns=header).to_excel(writer, sheet_name=name, index=False)
    return buf.getvalue()


@pytest.fixture()
def xlsx_bytes():
    return make_xlsx_bytes
