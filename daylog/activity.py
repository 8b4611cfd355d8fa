"""Journal of write-backs, one JSON object per line in ``.daylog/activity.log``.

Each record names the log day that was rewritten, so the journal can be
read back for a single day as well as in full.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from daylog.constants import ACTIVITY_LOG_FILENAME, STATE_DIRNAME
from daylog.paths import log_filename
from daylog.tokens import parse_date_value


@dataclass(frozen=True)
class ActivityRecord:
    recorded_at: datetime
    day: date
    operation: str
    summary: str
    commit_sha: str | None = None

    @classmethod
    def now(
        cls, day: date, operation: str, summary: str, commit_sha: str | None
    ) -> ActivityRecord:
        return cls(datetime.now(timezone.utc), day, operation, summary, commit_sha)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.recorded_at.isoformat(),
            "date": self.day.isoformat(),
            "path": log_filename(self.day),
            "operation": self.operation,
            "summary": self.summary,
            "commitSha": self.commit_sha,
        }

    @classmethod
    def from_dict(cls, payload: Any) -> ActivityRecord | None:
        """Rebuild a record; lines written by other tools yield ``None``."""
        if not isinstance(payload, dict):
            return None
        try:
            recorded_at = datetime.fromisoformat(payload["timestamp"])
        except (KeyError, TypeError, ValueError):
            return None
        day = parse_date_value(str(payload.get("date", "")))
        operation = payload.get("operation")
        if day is None or not isinstance(operation, str):
            return None
        return cls(
            recorded_at,
            day,
            operation,
            str(payload.get("summary", "")),
            payload.get("commitSha"),
        )


def _activity_log_path(log_dir: Path) -> Path:
    return log_dir / STATE_DIRNAME / ACTIVITY_LOG_FILENAME


def _append_activity_record(log_dir: Path, record: ActivityRecord) -> None:
    log_path = _activity_log_path(log_dir)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(record.to_dict(), sort_keys=True, separators=(",", ":"))
    with log_path.open("a", encoding="utf-8") as log_file:
        log_file.write(payload + "\n")
        log_file.flush()
        os.fsync(log_file.fileno())


def _read_activity_records(
    log_dir: Path,
    limit: int,
    since: datetime | None = None,
    day: date | None = None,
) -> list[ActivityRecord]:
    log_path = _activity_log_path(log_dir)
    if not log_path.exists():
        return []
    records: list[ActivityRecord] = []
    for line in log_path.read_text(encoding="utf-8").splitlines():
        try:
            record = ActivityRecord.from_dict(json.loads(line))
        except json.JSONDecodeError:
            continue
        if record is None:
            continue
        if day is not None and record.day != day:
            continue
        if since is not None and record.recorded_at < since:
            continue
        records.append(record)
    return records[-limit:]
