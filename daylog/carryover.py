"""Carry unfinished tasks forward into a new day.

A carried task is copied into today's log with a marker naming the day it
came from::

    - [ ] [#A] Renew passport @due(2025-02-01) ⟦2025-01-09⟧

Tasks are matched across days by identity: the display text without the
marker, whitespace-collapsed and lowercased. Following the markers back
from a carried copy yields the chain of earlier copies of the same task.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Iterable, Mapping

from daylog.metadata import compose_text
from daylog.models import LogFile, TaskLine
from daylog.tokens import parse_date_value

# trailing tags may follow the marker
CARRYOVER_MARKER_PATTERN = re.compile(
    r"[ \t]*⟦(?P<date>[^⟦⟧]*)⟧(?P<tags>(?:[ \t]+#\S+)*)[ \t]*$"
)


def encode_carryover_marker(source_day: date) -> str:
    return f"⟦{source_day.isoformat()}⟧"


def split_carryover_marker(text: str) -> tuple[str, date | None]:
    """Remove a trailing ``⟦YYYY-MM-DD⟧`` marker; tags after it are kept."""
    match = CARRYOVER_MARKER_PATTERN.search(text)
    if not match:
        return text, None
    source_day = parse_date_value(match["date"])
    if source_day is None:
        return text, None
    return text[: match.start()] + match["tags"], source_day


def carried_from(task: TaskLine) -> date | None:
    return split_carryover_marker(task.display_text)[1]


def task_identity(task: TaskLine) -> str:
    text, _source_day = split_carryover_marker(task.display_text)
    return " ".join(text.split()).lower()


def carryover_line(task: TaskLine, source_day: date) -> str:
    """Render an open copy of ``task`` marked as carried from ``source_day``."""
    text, _previous = split_carryover_marker(task.display_text)
    parts = ["- [ ]"]
    if task.priority is not None:
        parts.append(f"[#{task.priority.value}]")
    body = compose_text(text, task.schedule)
    if body:
        parts.append(body)
    parts.append(encode_carryover_marker(source_day))
    return task.indent + " ".join(parts)


def collect_carryover_tasks(files: Iterable[LogFile], today: date) -> list[str]:
    """Return task lines for every open task not yet resolved by ``today``.

    Days are scanned newest first. A task is resolved once any later day
    (today included) lists it, done or not, so each task is carried at most
    once, from the most recent day that mentions it. Within one day a task
    counts as done if any of its copies is checked.
    """
    files = list(files)
    resolved: set[str] = set()
    for log_file in files:
        if log_file.date == today:
            resolved.update(task_identity(task) for task in log_file.tasks)

    carried: list[str] = []
    past = sorted(
        (log_file for log_file in files if log_file.date < today),
        key=lambda log_file: log_file.date,
        reverse=True,
    )
    for log_file in past:
        first_seen: dict[str, TaskLine] = {}
        done: dict[str, bool] = {}
        for task in log_file.tasks:
            identity = task_identity(task)
            if identity not in first_seen:
                first_seen[identity] = task
                done[identity] = task.done
            elif task.done:
                done[identity] = True

        for identity, task in first_seen.items():
            if identity in resolved:
                continue
            resolved.add(identity)
            if done[identity] or not identity:
                continue
            carried.append(carryover_line(task, log_file.date))
    return carried


def complete_task_chain(
    files: Mapping[date, LogFile], log_file: LogFile, task: TaskLine
) -> dict[date, int]:
    """Check ``task`` and every earlier copy it was carried from.

    Returns the number of tasks newly checked per day; days without changes
    are omitted.
    """
    completed: dict[date, int] = {}
    if not task.done:
        task.done = True
        completed[log_file.date] = 1

    identity = task_identity(task)
    pending = [carried_from(task)]
    visited: set[date] = set()
    while pending:
        source_day = pending.pop()
        if source_day is None or source_day in visited or source_day >= log_file.date:
            continue
        visited.add(source_day)
        source_file = files.get(source_day)
        if source_file is None:
            continue
        for source_task in source_file.tasks:
            if task_identity(source_task) != identity:
                continue
            if not source_task.done:
                source_task.done = True
                completed[source_day] = completed.get(source_day, 0) + 1
            pending.append(carried_from(source_task))
    return completed
