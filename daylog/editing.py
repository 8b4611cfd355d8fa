"""In-memory edits applied to parsed logs before write-back."""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime, time
from typing import Any, Iterable

from daylog.errors import DaylogError, ErrorCode
from daylog.formatter import format_heading, format_log, render_line
from daylog.models import (
    BodyLine,
    LogEntry,
    LogFile,
    Priority,
    TaskLine,
)
from daylog.parser import parse_body_line, parse_note_line
from daylog.tokens import TokenField

_PRIORITY_CYCLE: dict[Priority | None, Priority | None] = {
    None: Priority.A,
    Priority.A: Priority.B,
    Priority.B: Priority.C,
    Priority.C: None,
}
_SCHEDULE_FIELDS = {token_field.value for token_field in TokenField}
_FIELD_TYPES: dict[str, type] = {
    "scheduled": date,
    "due": date,
    "start": date,
    "time": time,
    "duration_minutes": int,
}
_TYPE_HINTS = {
    "scheduled": "date",
    "due": "date",
    "start": "date",
    "time": "time of day in whole minutes",
    "duration_minutes": "non-negative int",
}


def toggle_task(task: TaskLine) -> bool:
    task.done = not task.done
    return task.done


def cycle_priority(task: TaskLine) -> Priority | None:
    """Advance the priority marker: none, A, B, C, then none again."""
    task.priority = _PRIORITY_CYCLE[task.priority]
    return task.priority


def set_schedule_field(line: BodyLine, field_name: str, value: Any) -> None:
    """Set or clear (``value=None``) one schedule field of a task or note."""
    if field_name not in _SCHEDULE_FIELDS:
        raise DaylogError(
            ErrorCode.UNKNOWN_FIELD,
            "Unknown schedule field.",
            {"field": field_name, "allowed": sorted(_SCHEDULE_FIELDS)},
        )
    expected = _FIELD_TYPES[field_name]
    if value is not None and not _is_storable(value, expected):
        raise DaylogError(
            ErrorCode.INVALID_TYPE,
            f"{field_name} must be a {_TYPE_HINTS[field_name]}.",
            {"field": field_name, "type": type(value).__name__},
        )
    setattr(line.schedule, field_name, value)


def _is_storable(value: Any, expected: type) -> bool:
    """Whether ``value`` survives being written as a token and parsed back."""
    if not isinstance(value, expected):
        return False
    if expected is date:
        return not isinstance(value, datetime)
    if expected is time:
        return value.second == 0 and value.microsecond == 0 and value.tzinfo is None
    return not isinstance(value, bool) and value >= 0


def complete_entry_tasks(entry: LogEntry) -> int:
    completed = 0
    for task in entry.tasks:
        if not task.done:
            task.done = True
            completed += 1
    return completed


def find_line(log_file: LogFile, line_offset: int) -> BodyLine | None:
    for _entry, line in log_file.iter_lines():
        if line.line_offset == line_offset:
            return line
    return None


def find_task(log_file: LogFile, line_offset: int) -> TaskLine:
    line = find_line(log_file, line_offset)
    if line is None:
        raise DaylogError(
            ErrorCode.LINE_NOT_FOUND,
            "No body line at this offset.",
            {"date": log_file.date.isoformat(), "lineOffset": line_offset},
        )
    if not isinstance(line, TaskLine):
        raise DaylogError(
            ErrorCode.NOT_A_TASK,
            "Line is not a checkbox task.",
            {"date": log_file.date.isoformat(), "lineOffset": line_offset},
        )
    return line


def new_entry(log_file: LogFile, timestamp: time, body: str) -> LogEntry:
    """Append an entry, keeping one blank line between it and earlier content."""
    rendered = format_log(log_file)
    line_count = len(rendered.split("\n")) if rendered else 0
    if rendered and not rendered.endswith("\n"):
        if log_file.entries:
            log_file.entries[-1].lines.append(parse_note_line("", line_count))
        else:
            log_file.preamble.append("")
        line_count += 1

    entry = LogEntry(
        timestamp=timestamp.replace(microsecond=0),
        file_date=log_file.date,
        line_offset=line_count,
    )
    body_lines = body.rstrip("\n").split("\n") if body.strip() else []
    for index, text in enumerate([*body_lines, ""], start=line_count + 1):
        entry.lines.append(parse_body_line(text, index))
    log_file.entries.append(entry)
    return entry


def collect_tags(files: Iterable[LogFile]) -> list[tuple[str, int]]:
    """Count tag occurrences, most frequent first, ties by name."""
    counts: Counter[str] = Counter()
    for log_file in files:
        for _entry, line in log_file.iter_lines():
            counts.update(line.tags)
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))


def entry_text(entry: LogEntry) -> str:
    lines = [format_heading(entry)]
    lines.extend(render_line(line) for line in entry.lines)
    return "\n".join(lines)


def search_entries(
    files: Iterable[LogFile], keywords: Iterable[str]
) -> list[LogEntry]:
    """Rank entries by how many keywords they contain, case-insensitively."""
    normalized = [keyword.strip().lower() for keyword in keywords if keyword.strip()]
    if not normalized:
        return []

    scored: list[tuple[int, LogEntry]] = []
    for log_file in files:
        for entry in log_file.entries:
            haystack = entry_text(entry).lower()
            score = sum(1 for keyword in normalized if keyword in haystack)
            if score:
                scored.append((score, entry))

    scored.sort(
        key=lambda item: (item[0], item[1].file_date, item[1].line_offset),
        reverse=True,
    )
    return [entry for _score, entry in scored]
