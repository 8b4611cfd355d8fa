"""Free-form date, time and duration input for editing commands.

Accepted date forms, all case-insensitive and relative to ``base``:

- ISO dates: ``2025-01-15``
- ``today``, ``tomorrow``, ``yesterday``
- offsets: ``+3d``, ``-1w``, ``2m`` (months clamp to the last valid day)
- weekdays: ``mon``, ``friday`` (next occurrence, today included) and
  ``next mon`` (never today)
"""

from __future__ import annotations

import re
from datetime import date, time, timedelta

from dateutil.relativedelta import FR, MO, SA, SU, TH, TU, WE, relativedelta

from daylog.errors import DaylogError, ErrorCode
from daylog.tokens import parse_date_value, parse_duration_value, parse_time_value

OFFSET_PATTERN = re.compile(r"(?P<sign>[+-]?)(?P<amount>\d+)(?P<unit>[dwm])")

_KEYWORD_OFFSETS = {"today": 0, "tomorrow": 1, "yesterday": -1}
_WEEKDAY_PREFIXES = (
    ("mon", MO),
    ("tue", TU),
    ("wed", WE),
    ("thu", TH),
    ("fri", FR),
    ("sat", SA),
    ("sun", SU),
)


def parse_date_input(text: str, base: date) -> date | None:
    normalized = text.strip().lower()
    if not normalized:
        return None

    parsed = parse_date_value(normalized)
    if parsed is not None:
        return parsed
    if normalized in _KEYWORD_OFFSETS:
        return base + timedelta(days=_KEYWORD_OFFSETS[normalized])

    parsed = _parse_offset(normalized, base)
    if parsed is not None:
        return parsed
    return _parse_weekday(normalized, base)


def require_date_input(text: str, base: date) -> date:
    parsed = parse_date_input(text, base)
    if parsed is None:
        raise DaylogError(
            ErrorCode.INVALID_DATE,
            "Date must be YYYY-MM-DD, a keyword, an offset or a weekday.",
            {"value": text},
        )
    return parsed


def parse_time_input(text: str) -> time | None:
    return parse_time_value(text)


def parse_duration_input(text: str) -> int | None:
    return parse_duration_value(text)


def _parse_offset(text: str, base: date) -> date | None:
    match = OFFSET_PATTERN.fullmatch(text)
    if not match:
        return None
    amount = int(match["amount"])
    if match["sign"] == "-":
        amount = -amount
    unit = match["unit"]
    if unit == "d":
        return base + timedelta(days=amount)
    if unit == "w":
        return base + timedelta(weeks=amount)
    return base + relativedelta(months=amount)


def _parse_weekday(text: str, base: date) -> date | None:
    parts = text.split()
    force_next = False
    if len(parts) == 2 and parts[0] == "next":
        force_next = True
        parts = parts[1:]
    if len(parts) != 1:
        return None

    for prefix, weekday in _WEEKDAY_PREFIXES:
        if parts[0].startswith(prefix):
            return base + relativedelta(days=1 if force_next else 0, weekday=weekday)
    return None
