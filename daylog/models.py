"""Data model for parsed daily log files and derived agenda views."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, time
from enum import Enum
from typing import Any, Iterator, Union


class FoldState(str, Enum):
    """Per-entry collapse setting persisted in the heading line."""

    COLLAPSED = "collapsed"
    CONTENTS_ONLY = "contents"
    EXPANDED_ALL = "expanded"


class Priority(str, Enum):
    A = "A"
    B = "B"
    C = "C"


_PRIORITY_RANK = {Priority.A: 0, Priority.B: 1, Priority.C: 2}


def priority_rank(priority: Priority | None) -> int:
    """Sort key ordering A < B < C < no priority."""
    return _PRIORITY_RANK.get(priority, len(_PRIORITY_RANK))


@dataclass
class TaskSchedule:
    """Scheduling metadata; every field is independently optional."""

    scheduled: date | None = None
    due: date | None = None
    start: date | None = None
    time: time | None = None
    duration_minutes: int | None = None

    def is_empty(self) -> bool:
        return not self.has_date() and self.time is None and self.duration_minutes is None

    def has_date(self) -> bool:
        return any(value is not None for value in (self.scheduled, self.due, self.start))

    def effective_date(self) -> date | None:
        if self.scheduled is not None:
            return self.scheduled
        if self.due is not None:
            return self.due
        return self.start

    def copy(self) -> TaskSchedule:
        return replace(self)


@dataclass
class TaskLine:
    """A checkbox body line.

    ``raw`` is the verbatim source line. The remaining fields are parsed from
    it and may be mutated by an editor; the formatter re-serializes the line
    only when one of them differs from what was parsed.
    """

    raw: str = field(compare=False)
    line_offset: int
    indent: str
    done: bool
    priority: Priority | None
    text: str = field(compare=False)
    display_text: str
    schedule: TaskSchedule
    tags: list[str] = field(default_factory=list)
    _origin: tuple[Any, ...] = field(default=(), compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self._origin:
            self.mark_clean()

    def _snapshot(self) -> tuple[Any, ...]:
        return (self.done, self.priority, self.display_text, self.schedule.copy())

    def mark_clean(self) -> None:
        self._origin = self._snapshot()

    @property
    def is_modified(self) -> bool:
        return self._snapshot() != self._origin

    def unique_tags(self) -> list[str]:
        return unique_tags(self.tags)


@dataclass
class NoteLine:
    """Any non-checkbox body line, blank lines included."""

    raw: str = field(compare=False)
    line_offset: int
    indent: str
    marker: str
    display_text: str
    schedule: TaskSchedule
    tags: list[str] = field(default_factory=list)
    _origin: tuple[Any, ...] = field(default=(), compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self._origin:
            self.mark_clean()

    def _snapshot(self) -> tuple[Any, ...]:
        return (self.display_text, self.schedule.copy())

    def mark_clean(self) -> None:
        self._origin = self._snapshot()

    @property
    def is_modified(self) -> bool:
        return self._snapshot() != self._origin

    @property
    def is_blank(self) -> bool:
        return not self.raw.strip()

    def unique_tags(self) -> list[str]:
        return unique_tags(self.tags)


BodyLine = Union[TaskLine, NoteLine]


@dataclass
class LogEntry:
    """A timestamped block of body lines."""

    timestamp: time
    file_date: date
    line_offset: int = 0
    lines: list[BodyLine] = field(default_factory=list)
    fold_state: FoldState = FoldState.EXPANDED_ALL
    title: str = ""
    fold_marker_present: bool = field(default=False, compare=False)
    line_ending: str = field(default="", compare=False, repr=False)
    raw: str = field(default="", compare=False, repr=False)
    _origin: tuple[Any, ...] = field(default=(), compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self._origin:
            self.mark_clean()

    def _snapshot(self) -> tuple[Any, ...]:
        return (self.timestamp, self.title, self.fold_state)

    def mark_clean(self) -> None:
        self._origin = self._snapshot()

    @property
    def is_modified(self) -> bool:
        """True when the heading must be recomposed instead of echoed from ``raw``."""
        return not self.raw or self._snapshot() != self._origin

    @property
    def tasks(self) -> list[TaskLine]:
        return [line for line in self.lines if isinstance(line, TaskLine)]

    @property
    def notes(self) -> list[NoteLine]:
        return [line for line in self.lines if isinstance(line, NoteLine)]


@dataclass
class LogFile:
    """One day's log, identified by its calendar date."""

    date: date
    entries: list[LogEntry] = field(default_factory=list)
    preamble: list[str] = field(default_factory=list)

    def sort_entries(self) -> None:
        """Explicitly re-sort entries by timestamp; equal timestamps keep file order."""
        self.entries.sort(key=lambda entry: entry.timestamp)

    def iter_lines(self) -> Iterator[tuple[LogEntry, BodyLine]]:
        for entry in self.entries:
            for line in entry.lines:
                yield entry, line

    @property
    def tasks(self) -> list[TaskLine]:
        return [line for _entry, line in self.iter_lines() if isinstance(line, TaskLine)]


class AgendaItemKind(str, Enum):
    TASK = "task"
    NOTE = "note"


class AgendaBucket(str, Enum):
    """Per-day display groupings, declared in display order."""

    OVERDUE = "overdue"
    ALL_DAY = "all_day"
    TIMED = "timed"
    UNSCHEDULED = "unscheduled"

    @property
    def rank(self) -> int:
        return list(AgendaBucket).index(self)


class StatusFilter(str, Enum):
    OPEN = "open"
    DONE = "done"
    ALL = "all"

    def matches(self, done: bool) -> bool:
        if self is StatusFilter.OPEN:
            return not done
        if self is StatusFilter.DONE:
            return done
        return True

    def next(self) -> StatusFilter:
        members = list(StatusFilter)
        return members[(members.index(self) + 1) % len(members)]


@dataclass(frozen=True)
class AgendaEntry:
    """Read-only agenda projection of a task or scheduled note.

    ``day`` is the agenda day the item is listed under. ``date`` is its
    effective date, or the due date for overdue tasks.
    """

    kind: AgendaItemKind
    day: date
    bucket: AgendaBucket
    date: date
    time: time | None
    duration_minutes: int | None
    text: str
    done: bool
    priority: Priority | None
    file_date: date
    line_offset: int
    tags: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "day": self.day.isoformat(),
            "bucket": self.bucket.value,
            "date": self.date.isoformat(),
            "time": self.time.strftime("%H:%M") if self.time else None,
            "durationMinutes": self.duration_minutes,
            "text": self.text,
            "done": self.done,
            "priority": self.priority.value if self.priority else None,
            "fileDate": self.file_date.isoformat(),
            "lineOffset": self.line_offset,
            "tags": list(self.tags),
        }


def unique_tags(tags: list[str]) -> list[str]:
    """De-duplicate tags keeping first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for tag in tags:
        if tag in seen:
            continue
        seen.add(tag)
        result.append(tag)
    return result
