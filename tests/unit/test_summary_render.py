from __future__ import annotations

from datetime import UTC, datetime, timedelta

from due_extractor.models.run_result import FileStat, RunResult
from due_extractor.services.summary import render_summary_line

START = datetime(2024, 1, 8, 9, 0, 0, tzinfo=UTC)


def _result(elapsed: float, stats: list[FileStat]) -> RunResult:
    return RunResult(start_time=START, end_time=START + timedelta(seconds=elapsed), file_stats=stats)


def test_render_mixed_run():
    stats = [
        FileStat("a.csv", "success", total_rows=10, due_records=4, skipped_rows=2),
        FileStat("b.xlsx", "success", total_rows=5, due_records=1, skipped_rows=0),
        FileStat("c.xlsx", "error", error="Failed to parse file: bad zip"),
    ]
    line = render_summary_line(_result(1.25, stats))
    assert line == "SUMMARY files=3/3 success=2 failed=1 rows=15 records=5 skipped_rows=2 elapsed_sec=1.25"


def test_render_empty_run():
    line = render_summary_line(_result(0, []))
    assert line == "SUMMARY files=0/0 success=0 failed=0 rows=0 records=0 skipped_rows=0 elapsed_sec=0"


def test_render_small_and_integral_elapsed():
    assert render_summary_line(_result(0.0015, [])).endswith("elapsed_sec=0.0015")
    assert render_summary_line(_result(3, [])).endswith("elapsed_sec=3")
