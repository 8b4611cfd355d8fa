"""Shared constants for the daylog file format and storage layout."""

from __future__ import annotations

LOG_FILE_EXTENSION = ".md"
LOG_FILENAME_DATE_FORMAT = "%Y-%m-%d"
STATE_DIRNAME = ".daylog"
ACTIVITY_LOG_FILENAME = "activity.log"
STATE_FILENAME = "state.json"
DEFAULT_AGENDA_DAYS = 7

FOLD_MARKER_NAMESPACE = "daylog"
FOLD_MARKER_VERSION = "v1"
