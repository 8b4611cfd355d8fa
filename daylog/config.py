"""Configuration loading for the daylog command line."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from daylog.constants import DEFAULT_AGENDA_DAYS


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


@dataclass(frozen=True)
class AppConfig:
    log_path: Path
    git_history: bool
    agenda_days: int


def _read_dotenv_value(dotenv_path: Path, key: str) -> str | None:
    """Read a single key from a .env file without mutating the environment."""
    if not dotenv_path.is_file():
        return None
    try:
        content = dotenv_path.read_text(encoding="utf-8")
    except OSError:
        return None

    for line in content.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if stripped.startswith("export "):
            stripped = stripped[len("export ") :].strip()
        if "=" not in stripped:
            continue
        name, value = stripped.split("=", 1)
        if name.strip() != key:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        return value or None
    return None


def _read_setting(dotenv_path: Path, key: str) -> str | None:
    value = os.environ.get(key)
    if value is None:
        value = _read_dotenv_value(dotenv_path, key)
    return value


def _read_bool(raw_value: str | None, *, default: bool, key: str) -> bool:
    if raw_value is None:
        return default
    normalized = raw_value.strip().lower()
    if not normalized:
        return default
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ConfigError(f"{key} must be a boolean value.")


def _read_positive_int(raw_value: str | None, *, default: int, key: str) -> int:
    if raw_value is None or not raw_value.strip():
        return default
    try:
        value = int(raw_value.strip())
    except ValueError:
        raise ConfigError(f"{key} must be a positive integer.") from None
    if value <= 0:
        raise ConfigError(f"{key} must be a positive integer.")
    return value


def load_config(log_path: Path | None = None) -> AppConfig:
    """Load configuration from the environment, falling back to ./.env.

    An explicit ``log_path`` takes precedence over ``DAYLOG_LOG_PATH``.
    """
    dotenv_path = Path.cwd() / ".env"

    path_key = "DAYLOG_LOG_PATH"
    if log_path is not None:
        raw_path = str(log_path)
    else:
        raw_path = (_read_setting(dotenv_path, path_key) or "").strip()
    if not raw_path:
        raise ConfigError(f"{path_key} is required; set it to the log directory.")

    git_key = "DAYLOG_GIT_HISTORY"
    git_history = _read_bool(
        _read_setting(dotenv_path, git_key), default=False, key=git_key
    )

    days_key = "DAYLOG_AGENDA_DAYS"
    agenda_days = _read_positive_int(
        _read_setting(dotenv_path, days_key), default=DEFAULT_AGENDA_DAYS, key=days_key
    )

    return AppConfig(
        log_path=Path(raw_path).expanduser().resolve(),
        git_history=git_history,
        agenda_days=agenda_days,
    )
