"""Metadata extraction and canonical token serialization."""

from __future__ import annotations

from daylog.models import TaskSchedule
from daylog.tokens import Token, scan_tokens


def extract_metadata(line: str) -> tuple[TaskSchedule, str]:
    """Return the schedule carried by ``line`` and the line with its tokens removed.

    A field given more than once takes its last value. Removal runs from the
    rightmost token leftwards so earlier offsets stay valid.
    """
    tokens = scan_tokens(line)
    schedule = TaskSchedule()
    for token in tokens:
        setattr(schedule, token.field.value, token.value)
    return schedule, strip_tokens(line, tokens)


def strip_tokens(text: str, tokens: list[Token]) -> str:
    for token in sorted(tokens, key=lambda item: item.start, reverse=True):
        text = _remove_span(text, token.start, token.end)
    return text.rstrip()


def _remove_span(text: str, start: int, end: int) -> str:
    left = text[:start]
    right = text[end:]
    if not left.strip():
        return left + right.lstrip(" ")
    run = (len(left) - len(left.rstrip(" "))) + (len(right) - len(right.lstrip(" ")))
    if run >= 2:
        return left.rstrip(" ") + " " + right.lstrip(" ")
    return left + right


def format_tokens(schedule: TaskSchedule) -> str:
    """Serialize a schedule as canonical tokens, omitting absent fields."""
    parts: list[str] = []
    if schedule.scheduled is not None:
        parts.append(f"@sched({schedule.scheduled.isoformat()})")
    if schedule.due is not None:
        parts.append(f"@due({schedule.due.isoformat()})")
    if schedule.start is not None:
        parts.append(f"@start({schedule.start.isoformat()})")
    if schedule.time is not None:
        parts.append(f"@time({schedule.time.strftime('%H:%M')})")
    if schedule.duration_minutes is not None:
        parts.append(f"@dur({format_duration(schedule.duration_minutes)})")
    return " ".join(parts)


def format_duration(minutes: int) -> str:
    return f"{minutes}m"


def compose_text(display_text: str, schedule: TaskSchedule) -> str:
    """Append canonical tokens to display text with single-space separation."""
    display = display_text.rstrip()
    tokens = format_tokens(schedule)
    if not tokens:
        return display
    if not display:
        return tokens
    return f"{display} {tokens}"
