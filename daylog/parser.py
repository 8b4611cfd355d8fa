"""Parse daily log text into ``LogFile`` models."""

from __future__ import annotations

import logging
import re
from datetime import date, time

from daylog.fold_marker import split_fold_marker
from daylog.metadata import extract_metadata
from daylog.models import BodyLine, LogEntry, LogFile, NoteLine, TaskLine
from daylog.tokens import scan_tags, split_priority

logger = logging.getLogger(__name__)

HEADING_PATTERN = re.compile(
    r"^## \[(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})\]"
    # the title or fold marker is separated by whitespace, or the marker is glued on
    r"(?P<rest>(?:(?:[ \t]|<!--).*)?)$"
)
TASK_LINE_PATTERN = re.compile(
    r"^(?P<indent>[ \t]*)- \[(?P<status>[ xX])\](?: (?P<text>.*))?$"
)
NOTE_LINE_PATTERN = re.compile(
    r"^(?P<indent>[ \t]*)(?P<marker>(?:[-*+]|\d+[.)]) )?(?P<text>.*)$"
)


def parse_log(text: str, file_date: date) -> LogFile:
    """Parse one file's text. Never raises; unrecognized text is kept verbatim."""
    log_file = LogFile(date=file_date)
    if not text:
        return log_file

    current: LogEntry | None = None
    for index, line in enumerate(text.split("\n")):
        entry = parse_heading(line, file_date, index)
        if entry is not None:
            log_file.entries.append(entry)
            current = entry
            continue
        if current is None:
            log_file.preamble.append(line)
            continue
        current.lines.append(parse_body_line(line, index))

    if log_file.preamble and not log_file.entries and any(
        line.strip() for line in log_file.preamble
    ):
        logger.debug("No entry headings found in log for %s", file_date.isoformat())
    return log_file


def parse_heading(line: str, file_date: date, line_offset: int) -> LogEntry | None:
    content, line_ending = (line[:-1], "\r") if line.endswith("\r") else (line, "")
    match = HEADING_PATTERN.match(content)
    if not match:
        return None

    hour, minute, second = (int(match[name]) for name in ("hour", "minute", "second"))
    if hour > 23 or minute > 59 or second > 59:
        logger.debug("Treating heading with invalid timestamp as text: %r", line)
        return None

    title, fold_state, marker_present = split_fold_marker(match["rest"])
    return LogEntry(
        timestamp=time(hour, minute, second),
        file_date=file_date,
        line_offset=line_offset,
        fold_state=fold_state,
        title=title,
        fold_marker_present=marker_present,
        line_ending=line_ending,
        raw=content,
    )


def parse_body_line(line: str, line_offset: int) -> BodyLine:
    task = parse_task_line(line, line_offset)
    if task is not None:
        return task
    return parse_note_line(line, line_offset)


def parse_task_line(line: str, line_offset: int) -> TaskLine | None:
    match = TASK_LINE_PATTERN.match(line)
    if not match:
        return None

    text = match["text"] or ""
    priority, remainder = split_priority(text)
    schedule, display_text = extract_metadata(remainder)
    return TaskLine(
        raw=line,
        line_offset=line_offset,
        indent=match["indent"],
        done=match["status"] != " ",
        priority=priority,
        text=text,
        display_text=display_text,
        schedule=schedule,
        tags=scan_tags(text),
    )


def parse_note_line(line: str, line_offset: int) -> NoteLine:
    match = NOTE_LINE_PATTERN.match(line)
    text = match["text"]
    schedule, display_text = extract_metadata(text)
    return NoteLine(
        raw=line,
        line_offset=line_offset,
        indent=match["indent"],
        marker=match["marker"] or "",
        display_text=display_text,
        schedule=schedule,
        tags=scan_tags(text),
    )
