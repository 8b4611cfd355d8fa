"""Reading and writing daily log files.

Files live flat in one directory as ``YYYY-MM-DD.md``. Every write-back is
atomic, optionally committed to a git repository in the log directory, and
recorded in the activity log. A failed commit or log append restores the
previous file content.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from pathlib import Path
from typing import Any

from daylog.activity import (
    ActivityRecord,
    _append_activity_record,
    _read_activity_records,
)
from daylog.carryover import collect_carryover_tasks, complete_task_chain
from daylog.editing import find_task, new_entry
from daylog.errors import DaylogError, ErrorCode
from daylog.formatter import format_log
from daylog.history import DayHistory
from daylog.models import LogEntry, LogFile
from daylog.parser import parse_log
from daylog.paths import log_file_path, parse_log_filename, validate_log_dir
from daylog.state import is_carryover_done, mark_carryover_done
from daylog.utils import _atomic_write, _remove_file

logger = logging.getLogger(__name__)


def list_log_dates(log_dir: Path) -> list[date]:
    """Sorted dates that have a log file; a missing directory has none."""
    validate_log_dir(log_dir)
    if not log_dir.exists():
        return []
    dates = []
    for path in log_dir.iterdir():
        if not path.is_file():
            continue
        day = parse_log_filename(path.name)
        if day is not None:
            dates.append(day)
    return sorted(dates)


def read_log_text(log_dir: Path, day: date) -> str:
    """Return the file's text, or an empty string when no file exists for ``day``."""
    path = log_file_path(log_dir, day)
    if not path.exists():
        return ""
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise DaylogError(
            ErrorCode.FILE_UNREADABLE,
            "Log file could not be read.",
            {"path": str(path), "reason": exc.strerror or str(exc)},
        ) from exc
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DaylogError(
            ErrorCode.INVALID_ENCODING,
            "Log file is not valid UTF-8.",
            {"path": str(path), "offset": exc.start},
        ) from exc


def load_log_file(log_dir: Path, day: date) -> LogFile:
    return parse_log(read_log_text(log_dir, day), day)


def load_log_files(
    log_dir: Path, start: date | None = None, end: date | None = None
) -> list[LogFile]:
    """Parse every log file whose date lies within the optional bounds."""
    files = []
    for day in list_log_dates(log_dir):
        if start is not None and day < start:
            continue
        if end is not None and day > end:
            continue
        files.append(load_log_file(log_dir, day))
    return files


def _restore_day_file(target_path: Path, original_content: str | None) -> None:
    if original_content is None:
        _remove_file(target_path)
    else:
        _atomic_write(target_path, original_content)


def save_log_file(
    log_dir: Path,
    log_file: LogFile,
    operation: str,
    *,
    git_history: bool = False,
    summary: str | None = None,
) -> str | None:
    """Write ``log_file`` back to disk and return the commit SHA, if any."""
    validate_log_dir(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    day = log_file.date
    target_path = log_file_path(log_dir, day)
    original_content = read_log_text(log_dir, day) if target_path.exists() else None
    summary = summary or operation.replace("_", " ")

    history = DayHistory.open(log_dir) if git_history else None
    _atomic_write(target_path, format_log(log_file))

    commit_sha: str | None = None
    if history is not None:
        try:
            commit_sha = history.commit_day(day, operation, summary)
        except Exception as exc:
            _restore_day_file(target_path, original_content)
            history.undo(day)
            raise DaylogError(
                ErrorCode.GIT_ERROR,
                "Git commit failed; day file restored.",
                {"date": day.isoformat(), "operation": operation},
            ) from exc

    try:
        _append_activity_record(
            log_dir, ActivityRecord.now(day, operation, summary, commit_sha)
        )
    except Exception as exc:
        _restore_day_file(target_path, original_content)
        if history is not None:
            history.undo(day)
        raise DaylogError(
            ErrorCode.LOG_ERROR,
            "Activity log write failed; day file restored.",
            {"date": day.isoformat(), "operation": operation},
        ) from exc

    logger.info("Saved %s (%s)", target_path.name, operation)
    return commit_sha


def append_entry(
    log_dir: Path,
    day: date,
    body: str,
    timestamp: time | None = None,
    *,
    git_history: bool = False,
    operation: str = "append_entry",
) -> LogEntry:
    """Add a timestamped entry to the end of ``day``'s file, creating it if needed."""
    log_file = load_log_file(log_dir, day)
    if timestamp is None:
        timestamp = datetime.now().time()
    entry = new_entry(log_file, timestamp, body)
    save_log_file(log_dir, log_file, operation, git_history=git_history)
    return entry


def carry_over_tasks(
    log_dir: Path,
    today: date,
    timestamp: time | None = None,
    *,
    git_history: bool = False,
) -> LogEntry | None:
    """Copy open tasks from earlier days into one new entry of ``today``'s log.

    Runs at most once per day; later calls return ``None`` until the date
    changes. Also returns ``None`` when nothing is left to carry.
    """
    if is_carryover_done(log_dir, today):
        return None
    lines = collect_carryover_tasks(load_log_files(log_dir, end=today), today)
    entry = None
    if lines:
        entry = append_entry(
            log_dir,
            today,
            "\n".join(lines),
            timestamp,
            git_history=git_history,
            operation="carry_over_tasks",
        )
        logger.info("Carried %d open tasks into %s", len(lines), today.isoformat())
    mark_carryover_done(log_dir, today)
    return entry


def complete_carried_task(
    log_dir: Path, day: date, line_offset: int, *, git_history: bool = False
) -> int:
    """Check a task and the earlier days' copies it was carried from.

    Returns how many tasks were newly checked across all days.
    """
    files = {log_file.date: log_file for log_file in load_log_files(log_dir, end=day)}
    log_file = files.get(day) or load_log_file(log_dir, day)
    task = find_task(log_file, line_offset)
    completed = complete_task_chain(files, log_file, task)
    for changed_day, count in sorted(completed.items()):
        save_log_file(
            log_dir,
            files.get(changed_day, log_file),
            "complete_task_chain",
            git_history=git_history,
            summary=f"check {count} carried task{'s' if count != 1 else ''}",
        )
    return sum(completed.values())


def read_activity_log(
    log_dir: Path,
    limit: int = 50,
    since: datetime | None = None,
    day: date | None = None,
) -> list[dict[str, Any]]:
    """Latest write-back records, oldest first, optionally for one day only."""
    if not isinstance(limit, int) or isinstance(limit, bool) or limit <= 0:
        raise DaylogError(
            ErrorCode.INVALID_TYPE,
            "limit must be a positive integer.",
            {"limit": str(limit)},
        )
    if since is not None and since.tzinfo is None:
        since = since.astimezone()
    return [
        record.to_dict()
        for record in _read_activity_records(log_dir, limit, since=since, day=day)
    ]
