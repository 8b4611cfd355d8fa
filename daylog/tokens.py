"""Inline token grammar for scheduling, priority and tag metadata.

Two syntaxes map onto the same fields:

- canonical ``@sched(2025-01-10)``, ``@due(...)``, ``@start(...)``,
  ``@time(09:30)``, ``@dur(1h30m)``
- double-colon aliases ``scheduled:: 2025-01-10``, ``due::``, ``start::``,
  ``time::``, ``duration::``

A token whose value does not parse is not a token at all: it stays in the
text verbatim and the field is left absent.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, time
from enum import Enum
from typing import Any

from daylog.models import Priority

logger = logging.getLogger(__name__)


class TokenField(str, Enum):
    SCHEDULED = "scheduled"
    DUE = "due"
    START = "start"
    TIME = "time"
    DURATION = "duration_minutes"


AT_TOKEN_PATTERN = re.compile(r"@(?P<key>[A-Za-z]+)\((?P<value>[^()\n]*)\)")
ALIAS_TOKEN_PATTERN = re.compile(
    r"(?<![A-Za-z0-9_])(?P<key>scheduled|due|start|time|duration)::[ \t]*(?P<value>\S+)"
)
PRIORITY_PATTERN = re.compile(r"^ ?\[#(?P<priority>[ABC])\](?= |$)")

DATE_VALUE_PATTERN = re.compile(r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})")
TIME_VALUE_PATTERN = re.compile(r"(?P<hour>\d{2}):(?P<minute>\d{2})")
DURATION_VALUE_PATTERN = re.compile(r"(?:\d+[hmHM])+")
DURATION_PART_PATTERN = re.compile(r"(?P<amount>\d+)(?P<unit>[hmHM])")

AT_TOKEN_KEYS = {
    "sched": TokenField.SCHEDULED,
    "scheduled": TokenField.SCHEDULED,
    "due": TokenField.DUE,
    "start": TokenField.START,
    "time": TokenField.TIME,
    "dur": TokenField.DURATION,
    "duration": TokenField.DURATION,
}
ALIAS_TOKEN_KEYS = {
    "scheduled": TokenField.SCHEDULED,
    "due": TokenField.DUE,
    "start": TokenField.START,
    "time": TokenField.TIME,
    "duration": TokenField.DURATION,
}


@dataclass(frozen=True)
class Token:
    """A recognized token and its span in the scanned text."""

    field: TokenField
    start: int
    end: int
    value: Any


def parse_date_value(value: str) -> date | None:
    match = DATE_VALUE_PATTERN.fullmatch(value.strip())
    if not match:
        return None
    try:
        return date(int(match["year"]), int(match["month"]), int(match["day"]))
    except ValueError:
        return None


def parse_time_value(value: str) -> time | None:
    match = TIME_VALUE_PATTERN.fullmatch(value.strip())
    if not match:
        return None
    hour = int(match["hour"])
    minute = int(match["minute"])
    if hour > 23 or minute > 59:
        return None
    return time(hour, minute)


def parse_duration_value(value: str) -> int | None:
    stripped = value.strip()
    if not DURATION_VALUE_PATTERN.fullmatch(stripped):
        return None
    total = 0
    for part in DURATION_PART_PATTERN.finditer(stripped):
        amount = int(part["amount"])
        total += amount * 60 if part["unit"].lower() == "h" else amount
    return total


_VALUE_PARSERS = {
    TokenField.SCHEDULED: parse_date_value,
    TokenField.DUE: parse_date_value,
    TokenField.START: parse_date_value,
    TokenField.TIME: parse_time_value,
    TokenField.DURATION: parse_duration_value,
}


def parse_field_value(token_field: TokenField, value: str) -> Any:
    return _VALUE_PARSERS[token_field](value)


def scan_tokens(text: str) -> list[Token]:
    """Return the valid tokens of ``text`` in left-to-right order."""
    candidates: list[tuple[TokenField, re.Match[str]]] = []
    for match in AT_TOKEN_PATTERN.finditer(text):
        token_field = AT_TOKEN_KEYS.get(match["key"].lower())
        if token_field is not None:
            candidates.append((token_field, match))
    for match in ALIAS_TOKEN_PATTERN.finditer(text):
        candidates.append((ALIAS_TOKEN_KEYS[match["key"]], match))

    candidates.sort(key=lambda item: item[1].start())
    tokens: list[Token] = []
    last_end = -1
    for token_field, match in candidates:
        value = parse_field_value(token_field, match["value"])
        if value is None:
            logger.debug("Leaving malformed token %r as text", match.group(0))
            continue
        if match.start() < last_end:
            continue
        tokens.append(Token(token_field, match.start(), match.end(), value))
        last_end = match.end()
    return tokens


def split_priority(text: str) -> tuple[Priority | None, str]:
    """Split a leading ``[#A]`` style marker off checkbox text."""
    match = PRIORITY_PATTERN.match(text)
    if not match:
        return None, text
    return Priority(match["priority"]), text[match.end():].lstrip(" ")


def scan_tags(text: str) -> list[str]:
    return [word for word in text.split() if word.startswith("#") and word.strip("#")]
