from __future__ import annotations

import argparse
import json
import mimetypes
import sys
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from due_extractor.config.loader import ConfigError, ExtractorSettings, load_config
from due_extractor.dates.due import today_for
from due_extractor.errors import ExtractionError
from due_extractor.logging.error_log import ErrorLogBuffer
from due_extractor.logging.init import log_summary, set_debug, setup_logging
from due_extractor.models.error_record import ErrorRecord
from due_extractor.models.run_result import FileStat, RunResult
from due_extractor.services.processor import process_file
from due_extractor.services.progress import ProgressTracker
from due_extractor.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env, then the YAML config
- Process every given CSV / Excel file against one "today"
- Write one result envelope per file as a JSON array (stdout or --output);
  log lines go to stderr whenever stdout carries the JSON
- Flush skipped rows / failed files to the JSON Lines error log
- Emit the SUMMARY line and map the outcome to an exit code
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv; .env values override the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="due-extractor",
        description="Extract invoices due within the window from CSV / Excel files",
    )
    p.add_argument("files", nargs="*", type=Path, help="CSV / XLSX / XLS files to process")
    p.add_argument("--config", type=Path, default=None, help="YAML config path (default: config/extract.yml)")
    p.add_argument("--today", default=None, help="Reference date YYYY-MM-DD (default: today in config timezone)")
    p.add_argument("--output", type=Path, default=None, help="Write the JSON result here instead of stdout")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _process_path(
    path: Path, today: date, settings: ExtractorSettings, error_log: ErrorLogBuffer
) -> tuple[dict[str, Any], FileStat]:
    started = datetime.now(UTC)
    media_type, _ = mimetypes.guess_type(path.name)

    def _elapsed() -> float:
        return (datetime.now(UTC) - started).total_seconds()

    try:
        data = path.read_bytes()
    except OSError as e:
        message = f"cannot read file: {e}"
        error_log.append(ErrorRecord.create(path.name, "", -1, "FILE_READ_ERROR", message))
        return {"status": "error", "message": message}, FileStat(path.name, "error", elapsed_seconds=_elapsed(), error=message)

    try:
        result = process_file(data, media_type, path.name, today=today, settings=settings)
    except ExtractionError as e:
        error_log.append(ErrorRecord.create(path.name, "", -1, e.error_type, e.message))
        return e.to_dict(), FileStat(path.name, "error", elapsed_seconds=_elapsed(), error=e.message)

    error_log.add_skipped_rows(path.name, result.sheet_name, result.skipped_rows)
    stat = FileStat(
        file_name=path.name,
        status="success",
        total_rows=result.total_rows,
        due_records=len(result.due_records),
        skipped_rows=len(result.skipped_rows),
        elapsed_seconds=_elapsed(),
    )
    return result.to_dict(), stat


def _write_output(payload: list[dict[str, Any]], output: Path | None) -> None:
    text = json.dumps(payload, ensure_ascii=False, indent=2)
    if output is None:
        print(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n", encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    # NOTE: 空リスト [] はそのまま使う (None のときのみ sys.argv を読む)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    # 結果 JSON を stdout に書く場合、ログは stderr へ (stdout はデータ専用)
    logger = setup_logging(sys.stdout if args.output is not None else sys.stderr)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        set_debug()
        logger.debug("debug mode enabled")

    try:
        settings = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.today:
        try:
            today = date.fromisoformat(args.today)
        except ValueError:
            logger.error(f"invalid --today value: {args.today!r} (expected YYYY-MM-DD)")
            return EXIT_FATAL
    else:
        today = today_for(settings.timezone)

    if not args.files:
        logger.error("no input files given")
        return EXIT_FATAL

    logger.info(f"Processing {len(args.files)} file(s) with today={today.isoformat()} tz={settings.timezone}")

    start_time = datetime.now(UTC)
    error_log = ErrorLogBuffer(Path(settings.error_log_dir))
    payload: list[dict[str, Any]] = []
    stats: list[FileStat] = []
    with ProgressTracker(len(args.files)) as progress:
        for path in args.files:
            progress.start_file(path)
            envelope, stat = _process_path(path, today, settings, error_log)
            if stat.status != "success":
                logger.error(f"{path.name}: {stat.error}")
            payload.append({"file": path.name, **envelope})
            stats.append(stat)
            progress.finish_file(records=stat.due_records)

    _write_output(payload, args.output)
    log_path = error_log.flush()
    if log_path is not None:
        logger.info(f"error log written: {log_path}")

    result = RunResult(start_time=start_time, end_time=datetime.now(UTC), file_stats=stats)
    # log_summary が "SUMMARY " を付与するため先頭を除去
    log_summary(render_summary_line(result)[len("SUMMARY "):])

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL
