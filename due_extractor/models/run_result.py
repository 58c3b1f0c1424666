from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

"""Run result models for the command-line batch.

FileStat tracks one processed upload; RunResult aggregates a whole CLI run
and feeds the SUMMARY line.
"""

__all__ = [
    "FileStat",
    "RunResult",
]


@dataclass(frozen=True)
class FileStat:
    """Per-file processing statistics."""
    file_name: str
    status: str  # success / error
    total_rows: int = 0  # 解析したデータ行数
    due_records: int = 0  # 出力レコード数
    skipped_rows: int = 0
    elapsed_seconds: float = 0.0
    error: str | None = None


@dataclass(frozen=True)
class RunResult:
    """Aggregated results of one CLI run."""
    start_time: datetime
    end_time: datetime
    file_stats: list[FileStat] = field(default_factory=list)

    @property
    def success_files(self) -> int:
        return sum(1 for s in self.file_stats if s.status == "success")

    @property
    def failed_files(self) -> int:
        return sum(1 for s in self.file_stats if s.status != "success")

    @property
    def total_rows(self) -> int:
        return sum(s.total_rows for s in self.file_stats)

    @property
    def total_records(self) -> int:
        return sum(s.due_records for s in self.file_stats)

    @property
    def skipped_rows(self) -> int:
        return sum(s.skipped_rows for s in self.file_stats)

    @property
    def elapsed_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()
