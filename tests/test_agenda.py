from datetime import date, time

import pytest

from daylog.agenda import DateRange, derive_agenda, filter_agenda, group_agenda
from daylog.errors import DaylogError
from daylog.models import AgendaBucket, AgendaItemKind, Priority, StatusFilter
from daylog.parser import parse_log


def _log(day, *body_lines):
    return parse_log("\n".join(["## [09:00:00]", *body_lines, ""]), day)


def _single(day):
    return DateRange.single(day)


def test_timed_task_scenario():
    log_file = _log(
        date(2025, 1, 10),
        "- [ ] [#A] Plan sprint @sched(2025-01-10) @time(10:00) @dur(90m)",
    )

    (item,) = derive_agenda([log_file], _single(date(2025, 1, 10)), StatusFilter.OPEN)

    assert item.kind is AgendaItemKind.TASK
    assert item.day == date(2025, 1, 10)
    assert item.bucket is AgendaBucket.TIMED
    assert item.time == time(10, 0)
    assert item.duration_minutes == 90
    assert item.priority is Priority.A
    assert item.text == "Plan sprint"
    assert (item.file_date, item.line_offset) == (date(2025, 1, 10), 1)


def test_overdue_task_is_listed_on_the_query_day():
    log_file = _log(date(2025, 1, 1), "- [ ] Renew passport @due(2025-01-01)")

    (item,) = derive_agenda([log_file], _single(date(2025, 1, 5)))

    assert item.bucket is AgendaBucket.OVERDUE
    assert item.day == date(2025, 1, 5)
    assert item.date == date(2025, 1, 1)


def test_done_task_is_never_overdue():
    log_file = _log(date(2025, 1, 1), "- [x] Renew passport @due(2025-01-01)")

    assert derive_agenda([log_file], _single(date(2025, 1, 5)), StatusFilter.ALL) == []


def test_due_on_the_query_day_is_not_overdue():
    log_file = _log(date(2025, 1, 1), "- [ ] Renew passport @due(2025-01-05)")

    (item,) = derive_agenda([log_file], _single(date(2025, 1, 5)))

    assert item.bucket is AgendaBucket.ALL_DAY


def test_overdue_anchor_is_today_when_inside_the_range():
    log_file = _log(date(2025, 1, 1), "- [ ] Late @due(2025-01-02)")
    date_range = DateRange(date(2025, 1, 1), date(2025, 1, 7))

    (item,) = derive_agenda([log_file], date_range, today=date(2025, 1, 4))
    assert (item.day, item.bucket) == (date(2025, 1, 4), AgendaBucket.OVERDUE)

    (item,) = derive_agenda([log_file], date_range, today=date(2025, 2, 1))
    assert (item.day, item.bucket) == (date(2025, 1, 2), AgendaBucket.ALL_DAY)


def test_effective_date_prefers_due_over_start():
    log_file = _log(date(2025, 2, 20), "- [ ] Report @due(2025-03-10) @start(2025-03-01)")
    date_range = DateRange(date(2025, 3, 1), date(2025, 3, 10))

    (item,) = derive_agenda([log_file], date_range)

    assert item.day == date(2025, 3, 10)
    assert item.bucket is AgendaBucket.ALL_DAY


def test_undated_task_uses_its_file_date():
    log_file = _log(date(2025, 1, 10), "- [ ] Water plants")

    (item,) = derive_agenda([log_file], DateRange(date(2025, 1, 9), date(2025, 1, 11)))

    assert (item.day, item.bucket) == (date(2025, 1, 10), AgendaBucket.ALL_DAY)


def test_undated_task_outside_range_needs_show_unscheduled():
    log_file = _log(date(2024, 12, 30), "- [ ] Someday")
    date_range = DateRange(date(2025, 1, 10), date(2025, 1, 12))

    assert derive_agenda([log_file], date_range) == []

    (item,) = derive_agenda(
        [log_file], date_range, show_unscheduled=True, today=date(2025, 1, 11)
    )
    assert item.bucket is AgendaBucket.UNSCHEDULED
    assert item.day == date(2025, 1, 11)


def test_dated_item_outside_range_is_excluded_even_with_show_unscheduled():
    log_file = _log(date(2025, 1, 10), "- [ ] Later @sched(2025-02-01)")

    items = derive_agenda([log_file], _single(date(2025, 1, 10)), show_unscheduled=True)

    assert items == []


def test_notes_need_a_schedule_and_text():
    log_file = _log(
        date(2025, 1, 10),
        "Dentist @sched(2025-01-11) @time(15:00)",
        "Just a thought",
        "@sched(2025-01-11)",
        "",
    )

    (item,) = derive_agenda([log_file], _single(date(2025, 1, 11)))

    assert item.kind is AgendaItemKind.NOTE
    assert item.bucket is AgendaBucket.TIMED
    assert item.text == "Dentist"
    assert item.done is False


def test_buckets_are_ordered_within_a_day():
    log_file = _log(
        date(2025, 1, 5),
        "- [ ] Timed @time(08:00)",
        "- [ ] All day",
        "- [ ] Old @due(2025-01-01)",
    )
    unscheduled = _log(date(2024, 12, 1), "- [ ] Whenever")

    items = derive_agenda(
        [log_file, unscheduled], _single(date(2025, 1, 5)), show_unscheduled=True
    )

    assert [item.bucket for item in items] == [
        AgendaBucket.OVERDUE,
        AgendaBucket.ALL_DAY,
        AgendaBucket.TIMED,
        AgendaBucket.UNSCHEDULED,
    ]


def test_timed_items_sort_by_time_then_priority_then_source_order():
    log_file = _log(
        date(2025, 1, 10),
        "- [ ] [#C] c @time(09:00)",
        "- [ ] [#A] a @time(09:00)",
        "- [ ] none @time(09:00)",
        "- [ ] [#B] b @time(09:00)",
        "- [ ] early @time(07:30)",
        "- [ ] none again @time(09:00)",
    )

    items = derive_agenda([log_file], _single(date(2025, 1, 10)))

    assert [item.text for item in items] == ["early", "a", "b", "c", "none", "none again"]
    assert [item.priority for item in items[1:5]] == [
        Priority.A,
        Priority.B,
        Priority.C,
        None,
    ]


def test_items_from_several_files_merge_by_day():
    first = _log(date(2025, 1, 10), "- [ ] tomorrow @sched(2025-01-11)")
    second = _log(date(2025, 1, 11), "- [ ] today")

    items = derive_agenda([first, second], DateRange(date(2025, 1, 10), date(2025, 1, 11)))

    assert [(item.day, item.text) for item in items] == [
        (date(2025, 1, 11), "tomorrow"),
        (date(2025, 1, 11), "today"),
    ]


def test_status_filters():
    log_file = _log(date(2025, 1, 10), "- [ ] open one", "- [x] done one")
    day = _single(date(2025, 1, 10))

    assert [item.text for item in derive_agenda([log_file], day, StatusFilter.OPEN)] == [
        "open one"
    ]
    assert [item.text for item in derive_agenda([log_file], day, StatusFilter.DONE)] == [
        "done one"
    ]
    assert len(derive_agenda([log_file], day, StatusFilter.ALL)) == 2


def test_status_filter_cycles():
    assert StatusFilter.OPEN.next() is StatusFilter.DONE
    assert StatusFilter.DONE.next() is StatusFilter.ALL
    assert StatusFilter.ALL.next() is StatusFilter.OPEN


def test_filter_agenda_refilters_without_rederiving():
    log_file = _log(
        date(2025, 1, 10), "- [ ] errands #home", "- [x] report #work", "- [ ] call #work"
    )
    items = derive_agenda([log_file], _single(date(2025, 1, 10)), StatusFilter.ALL)

    assert [item.text for item in filter_agenda(items, StatusFilter.OPEN)] == [
        "errands #home",
        "call #work",
    ]
    assert [item.text for item in filter_agenda(items, tag="#work")] == [
        "report #work",
        "call #work",
    ]


def test_group_agenda_omits_empty_groups():
    log_file = _log(date(2025, 1, 10), "- [ ] a @time(09:00)", "- [ ] b @time(10:00)")

    groups = group_agenda(derive_agenda([log_file], _single(date(2025, 1, 10))))

    assert [(day, bucket, len(items)) for day, bucket, items in groups] == [
        (date(2025, 1, 10), AgendaBucket.TIMED, 2)
    ]


def test_reversed_range_is_rejected():
    with pytest.raises(DaylogError) as excinfo:
        derive_agenda([], (date(2025, 1, 10), date(2025, 1, 9)))

    assert excinfo.value.error.code == "INVALID_RANGE"


def test_agenda_entry_to_dict():
    log_file = _log(date(2025, 1, 10), "- [ ] [#B] Call @time(18:00) @dur(15m) #family")

    (item,) = derive_agenda([log_file], _single(date(2025, 1, 10)))

    assert item.to_dict() == {
        "kind": "task",
        "day": "2025-01-10",
        "bucket": "timed",
        "date": "2025-01-10",
        "time": "18:00",
        "durationMinutes": 15,
        "text": "Call #family",
        "done": False,
        "priority": "B",
        "fileDate": "2025-01-10",
        "lineOffset": 1,
        "tags": ["#family"],
    }
