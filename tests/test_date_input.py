from datetime import date, time

import pytest

from daylog.date_input import (
    parse_date_input,
    parse_duration_input,
    parse_time_input,
    require_date_input,
)
from daylog.errors import DaylogError

BASE = date(2025, 1, 15)  # a Wednesday


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("today", BASE),
        ("Tomorrow", date(2025, 1, 16)),
        ("yesterday", date(2025, 1, 14)),
        ("2025-02-02", date(2025, 2, 2)),
        ("+3d", date(2025, 1, 18)),
        ("-1w", date(2025, 1, 8)),
        ("2w", date(2025, 1, 29)),
        ("+1m", date(2025, 2, 15)),
        ("mon", date(2025, 1, 20)),
        ("next mon", date(2025, 1, 20)),
        ("wed", BASE),
        ("next wednesday", date(2025, 1, 22)),
        ("Friday", date(2025, 1, 17)),
    ],
)
def test_parse_date_input(text, expected):
    assert parse_date_input(text, BASE) == expected


def test_month_offsets_clamp_to_month_end():
    assert parse_date_input("+1m", date(2025, 1, 31)) == date(2025, 2, 28)
    assert parse_date_input("-1m", date(2024, 3, 31)) == date(2024, 2, 29)


@pytest.mark.parametrize("text", ["", "   ", "soon", "+3x", "3", "next", "next week", "2025-02-30"])
def test_parse_date_input_rejects_unknown_forms(text):
    assert parse_date_input(text, BASE) is None


def test_require_date_input_raises():
    with pytest.raises(DaylogError) as excinfo:
        require_date_input("someday", BASE)

    assert excinfo.value.error.code == "INVALID_DATE"
    assert excinfo.value.error.details == {"value": "someday"}


def test_time_and_duration_inputs_share_token_rules():
    assert parse_time_input(" 07:45 ") == time(7, 45)
    assert parse_time_input("7:45") is None
    assert parse_duration_input("1h15m") == 75
    assert parse_duration_input("an hour") is None
