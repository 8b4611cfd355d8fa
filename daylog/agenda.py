"""Agenda derivation across many parsed log files.

Items are grouped per day into buckets displayed in this order:

1. overdue: open tasks whose due date is before the anchor day
2. all-day: dated items without a time
3. timed: ascending time, then priority, then source order
4. unscheduled: undated items from files outside the range (opt-in)

The anchor day is ``today`` when it falls inside the queried range, otherwise
the first day of the range. Duration is carried for display only.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from itertools import groupby
from typing import Any, Iterable

from daylog.errors import DaylogError, ErrorCode
from daylog.models import (
    AgendaBucket,
    AgendaEntry,
    AgendaItemKind,
    BodyLine,
    LogFile,
    StatusFilter,
    TaskLine,
    priority_rank,
)


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar days."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise DaylogError(
                ErrorCode.INVALID_RANGE,
                "Range end must not be before its start.",
                {"start": self.start.isoformat(), "end": self.end.isoformat()},
            )

    def __contains__(self, day: object) -> bool:
        return isinstance(day, date) and self.start <= day <= self.end

    @classmethod
    def single(cls, day: date) -> DateRange:
        return cls(day, day)


def derive_agenda(
    files: Iterable[LogFile],
    date_range: DateRange | tuple[date, date],
    status_filter: StatusFilter = StatusFilter.OPEN,
    show_unscheduled: bool = False,
    today: date | None = None,
) -> list[AgendaEntry]:
    """Build the ordered agenda for ``date_range`` from parsed files."""
    if not isinstance(date_range, DateRange):
        date_range = DateRange(*date_range)
    anchor = today if today in date_range else date_range.start

    keyed: list[tuple[tuple[Any, ...], AgendaEntry]] = []
    for file_index, log_file in enumerate(files):
        for _entry, line in log_file.iter_lines():
            item = _project_line(line, log_file.date, date_range, anchor, show_unscheduled)
            if item is None:
                continue
            keyed.append((_sort_key(item, file_index), item))

    keyed.sort(key=lambda pair: pair[0])
    return filter_agenda([item for _key, item in keyed], status_filter)


def filter_agenda(
    entries: Iterable[AgendaEntry],
    status_filter: StatusFilter = StatusFilter.ALL,
    tag: str | None = None,
) -> list[AgendaEntry]:
    """Re-filter an already derived agenda per item, keeping its order."""
    return [
        item
        for item in entries
        if status_filter.matches(item.done) and (tag is None or tag in item.tags)
    ]


def group_agenda(
    entries: Iterable[AgendaEntry],
) -> list[tuple[date, AgendaBucket, list[AgendaEntry]]]:
    """Group consecutive entries by day and bucket; only non-empty groups appear."""
    return [
        (day, bucket, list(items))
        for (day, bucket), items in groupby(entries, key=lambda item: (item.day, item.bucket))
    ]


def _project_line(
    line: BodyLine,
    file_date: date,
    date_range: DateRange,
    anchor: date,
    show_unscheduled: bool,
) -> AgendaEntry | None:
    schedule = line.schedule
    is_task = isinstance(line, TaskLine)
    if not is_task and (schedule.is_empty() or not line.display_text.strip()):
        return None

    done = line.done if is_task else False
    effective = schedule.effective_date() or file_date

    if is_task and schedule.due is not None and not done and schedule.due < anchor:
        # overdue items are dated and ordered by their due date
        day, bucket, effective = anchor, AgendaBucket.OVERDUE, schedule.due
    elif schedule.has_date() or file_date in date_range:
        if effective not in date_range:
            return None
        day = effective
        bucket = AgendaBucket.TIMED if schedule.time is not None else AgendaBucket.ALL_DAY
    elif show_unscheduled:
        day, bucket = anchor, AgendaBucket.UNSCHEDULED
    else:
        return None

    return AgendaEntry(
        kind=AgendaItemKind.TASK if is_task else AgendaItemKind.NOTE,
        day=day,
        bucket=bucket,
        date=effective,
        time=schedule.time,
        duration_minutes=schedule.duration_minutes,
        text=line.display_text.strip(),
        done=done,
        priority=line.priority if is_task else None,
        file_date=file_date,
        line_offset=line.line_offset,
        tags=tuple(line.unique_tags()),
    )


def _sort_key(item: AgendaEntry, file_index: int) -> tuple[Any, ...]:
    if item.bucket is AgendaBucket.OVERDUE:
        primary: Any = item.date
    elif item.bucket is AgendaBucket.TIMED:
        primary = item.time
    else:
        primary = 0
    return (
        item.day,
        item.bucket.rank,
        primary,
        priority_rank(item.priority),
        item.file_date,
        file_index,
        item.line_offset,
    )
