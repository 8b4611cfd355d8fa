"""Mapping between calendar days and log file paths."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

from daylog.constants import LOG_FILE_EXTENSION, LOG_FILENAME_DATE_FORMAT
from daylog.errors import DaylogError, ErrorCode


def log_filename(day: date) -> str:
    return f"{day.strftime(LOG_FILENAME_DATE_FORMAT)}{LOG_FILE_EXTENSION}"


def log_file_path(log_dir: Path, day: date) -> Path:
    return log_dir / log_filename(day)


def parse_log_filename(name: str) -> date | None:
    """Return the date encoded in a ``YYYY-MM-DD.md`` file name, if any."""
    if not name.endswith(LOG_FILE_EXTENSION):
        return None
    stem = name[: -len(LOG_FILE_EXTENSION)]
    if len(stem) != 10:
        return None
    try:
        return datetime.strptime(stem, LOG_FILENAME_DATE_FORMAT).date()
    except ValueError:
        return None


def validate_log_dir(log_dir: Path) -> Path:
    if log_dir.exists() and not log_dir.is_dir():
        raise DaylogError(
            ErrorCode.INVALID_LOG_DIR,
            "Log path must reference a directory.",
            {"path": str(log_dir)},
        )
    return log_dir
