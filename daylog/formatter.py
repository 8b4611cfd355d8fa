"""Render ``LogFile`` models back to daily log text."""

from __future__ import annotations

from daylog.fold_marker import append_fold_marker
from daylog.metadata import compose_text
from daylog.models import BodyLine, LogEntry, LogFile, NoteLine, TaskLine


def format_log(log_file: LogFile) -> str:
    """Inverse of ``parse_log`` for every field the model captures."""
    lines = list(log_file.preamble)
    for entry in log_file.entries:
        lines.append(format_heading(entry))
        lines.extend(render_line(line) for line in entry.lines)
    return "\n".join(lines)


def format_heading(entry: LogEntry) -> str:
    if not entry.is_modified:
        return entry.raw + entry.line_ending
    heading = f"## [{entry.timestamp.strftime('%H:%M:%S')}]{entry.title}"
    heading = append_fold_marker(heading, entry.fold_state, entry.fold_marker_present)
    return heading + entry.line_ending


def render_line(line: BodyLine) -> str:
    """Return the verbatim source line, or a recomposed one if it was edited."""
    if not line.is_modified:
        return line.raw
    line_ending = "\r" if line.raw.endswith("\r") else ""
    if isinstance(line, TaskLine):
        return compose_task_line(line) + line_ending
    return compose_note_line(line) + line_ending


def compose_task_line(task: TaskLine) -> str:
    checkbox = "- [x]" if task.done else "- [ ]"
    parts = [checkbox]
    if task.priority is not None:
        parts.append(f"[#{task.priority.value}]")
    body = compose_text(task.display_text, task.schedule)
    if body:
        parts.append(body)
    return task.indent + " ".join(parts)


def compose_note_line(note: NoteLine) -> str:
    return note.indent + note.marker + compose_text(note.display_text, note.schedule)
