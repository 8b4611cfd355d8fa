"""Small JSON state file kept next to the activity log."""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any

from daylog.constants import STATE_DIRNAME, STATE_FILENAME
from daylog.errors import DaylogError, ErrorCode
from daylog.utils import _atomic_write

logger = logging.getLogger(__name__)

CARRYOVER_CHECKED_KEY = "carryoverCheckedDate"


def _state_path(log_dir: Path) -> Path:
    return log_dir / STATE_DIRNAME / STATE_FILENAME


def _read_state(log_dir: Path) -> dict[str, Any]:
    state_path = _state_path(log_dir)
    if not state_path.exists():
        return {}
    try:
        contents = state_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DaylogError(
            ErrorCode.STATE_UNREADABLE,
            "State file could not be read.",
            {"path": str(state_path), "reason": exc.strerror or str(exc)},
        ) from exc
    try:
        state = json.loads(contents)
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed state file %s", state_path)
        return {}
    return state if isinstance(state, dict) else {}


def _write_state(log_dir: Path, state: dict[str, Any]) -> None:
    state_path = _state_path(log_dir)
    state_path.parent.mkdir(parents=True, exist_ok=True)
    _atomic_write(state_path, json.dumps(state, indent=2, sort_keys=True) + "\n")


def is_carryover_done(log_dir: Path, today: date) -> bool:
    return _read_state(log_dir).get(CARRYOVER_CHECKED_KEY) == today.isoformat()


def mark_carryover_done(log_dir: Path, today: date) -> None:
    state = _read_state(log_dir)
    state[CARRYOVER_CHECKED_KEY] = today.isoformat()
    _write_state(log_dir, state)
