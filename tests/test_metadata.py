from datetime import date, time

from daylog.metadata import compose_text, extract_metadata, format_tokens
from daylog.models import TaskSchedule


def test_extract_metadata_last_value_wins():
    schedule, display = extract_metadata("@due(2025-01-01) @due(2025-01-02)")

    assert schedule.due == date(2025, 1, 2)
    assert display == ""


def test_extract_metadata_keeps_tags_and_collapses_spacing():
    schedule, display = extract_metadata("buy milk #errand @sched(2025-02-01)")

    assert schedule.scheduled == date(2025, 2, 1)
    assert display == "buy milk #errand"


def test_extract_metadata_joins_text_around_inner_tokens():
    schedule, display = extract_metadata("Pay @due(2025-01-01) rent @due(2025-02-01)")

    assert schedule.due == date(2025, 2, 1)
    assert display == "Pay rent"


def test_extract_metadata_drops_leading_token():
    schedule, display = extract_metadata("@sched(2025-01-10) Write report")

    assert schedule.scheduled == date(2025, 1, 10)
    assert display == "Write report"


def test_extract_metadata_leaves_malformed_time_verbatim():
    schedule, display = extract_metadata("meet @time(25:99)")

    assert schedule.time is None
    assert schedule.is_empty()
    assert display == "meet @time(25:99)"


def test_extract_metadata_normalizes_aliases():
    schedule, display = extract_metadata(
        "Review scheduled:: 2025-01-10 time:: 09:30 duration:: 1h"
    )

    assert schedule == TaskSchedule(
        scheduled=date(2025, 1, 10), time=time(9, 30), duration_minutes=60
    )
    assert display == "Review"


def test_format_tokens_uses_canonical_order():
    schedule = TaskSchedule(
        due=date(2025, 1, 12),
        scheduled=date(2025, 1, 10),
        duration_minutes=90,
        time=time(9, 30),
    )

    assert format_tokens(schedule) == (
        "@sched(2025-01-10) @due(2025-01-12) @time(09:30) @dur(90m)"
    )


def test_format_tokens_omits_absent_fields():
    assert format_tokens(TaskSchedule()) == ""
    assert format_tokens(TaskSchedule(start=date(2025, 3, 1))) == "@start(2025-03-01)"


def test_compose_text_is_stable_under_reextraction():
    schedule = TaskSchedule(due=date(2025, 1, 5), time=time(18, 0))
    composed = compose_text("Pay rent  ", schedule)

    assert composed == "Pay rent @due(2025-01-05) @time(18:00)"
    assert extract_metadata(composed) == (schedule, "Pay rent")


def test_effective_date_precedence():
    schedule = TaskSchedule(due=date(2025, 3, 10), start=date(2025, 3, 1))

    assert schedule.effective_date() == date(2025, 3, 10)
    schedule.scheduled = date(2025, 3, 5)
    assert schedule.effective_date() == date(2025, 3, 5)
