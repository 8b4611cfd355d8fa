from datetime import date

from daylog.carryover import (
    carried_from,
    carryover_line,
    collect_carryover_tasks,
    complete_task_chain,
    split_carryover_marker,
    task_identity,
)
from daylog.parser import parse_log

TODAY = date(2025, 1, 10)


def _log(day, *lines):
    return parse_log("\n".join(["## [09:00:00]", *lines]), day)


def test_split_carryover_marker():
    assert split_carryover_marker("Call bank ⟦2025-01-08⟧") == (
        "Call bank",
        date(2025, 1, 8),
    )
    assert split_carryover_marker("Call bank ⟦someday⟧") == ("Call bank ⟦someday⟧", None)
    assert split_carryover_marker("⟦2025-01-08⟧ Call bank") == (
        "⟦2025-01-08⟧ Call bank",
        None,
    )


def test_identity_ignores_marker_case_and_spacing():
    first = _log(date(2025, 1, 8), "- [ ] Call  Bank").tasks[0]
    carried = _log(date(2025, 1, 9), "- [x] [#B] call bank ⟦2025-01-08⟧").tasks[0]

    assert task_identity(first) == task_identity(carried) == "call bank"
    assert carried_from(first) is None
    assert carried_from(carried) == date(2025, 1, 8)


def test_carryover_line_replaces_the_previous_marker():
    task = _log(
        date(2025, 1, 9), "  - [ ] [#A] Pay rent ⟦2025-01-08⟧ due:: 2025-01-31 #home"
    ).tasks[0]

    assert carryover_line(task, date(2025, 1, 9)) == (
        "  - [ ] [#A] Pay rent #home @due(2025-01-31) ⟦2025-01-09⟧"
    )


def test_collect_carries_open_tasks_from_the_latest_mention():
    files = [
        _log(date(2025, 1, 7), "- [ ] Old open", "- [ ] Seen later"),
        _log(date(2025, 1, 8), "- [ ] Seen later", "- [ ] Fixed later"),
        _log(date(2025, 1, 9), "- [x] Fixed later", "- [ ] Fixed later"),
    ]

    assert collect_carryover_tasks(files, TODAY) == [
        "- [ ] Seen later ⟦2025-01-08⟧",
        "- [ ] Old open ⟦2025-01-07⟧",
    ]


def test_collect_skips_tasks_already_in_today_and_future_days():
    files = [
        _log(
            date(2025, 1, 9),
            "- [ ] Already copied",
            "- [ ] Pending",
            "- [ ] @due(2025-01-20)",
        ),
        _log(TODAY, "- [ ] already copied ⟦2025-01-09⟧"),
        _log(date(2025, 1, 11), "- [ ] Future"),
    ]

    assert collect_carryover_tasks(files, TODAY) == ["- [ ] Pending ⟦2025-01-09⟧"]


def test_complete_task_chain_follows_markers_back():
    older = _log(date(2025, 1, 8), "- [ ] Call bank", "- [ ] Call bank")
    middle = _log(date(2025, 1, 9), "- [x] Call bank ⟦2025-01-08⟧")
    current = _log(TODAY, "- [ ] Call bank ⟦2025-01-09⟧")
    files = {log_file.date: log_file for log_file in (older, middle, current)}

    completed = complete_task_chain(files, current, current.tasks[0])

    assert completed == {TODAY: 1, date(2025, 1, 8): 2}
    assert all(task.done for task in older.tasks)


def test_complete_task_chain_ignores_markers_pointing_forward():
    current = _log(TODAY, "- [ ] Loop ⟦2025-01-12⟧")
    later = _log(date(2025, 1, 12), "- [ ] Loop")
    files = {TODAY: current, date(2025, 1, 12): later}

    assert complete_task_chain(files, current, current.tasks[0]) == {TODAY: 1}
    assert later.tasks[0].done is False
