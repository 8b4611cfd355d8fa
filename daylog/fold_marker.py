"""Fold state stored as an HTML comment at the end of an entry heading.

The marker renders as nothing in Markdown viewers::

    ## [09:00:00] <!-- daylog:v1 fold=collapsed -->

Only whitelisted versions and values are decoded. Anything else in the
``daylog:`` namespace is ignored, left in the heading text, and the entry
falls back to ``FoldState.EXPANDED_ALL``.
"""

from __future__ import annotations

import logging
import re

from daylog.constants import FOLD_MARKER_NAMESPACE, FOLD_MARKER_VERSION
from daylog.models import FoldState

logger = logging.getLogger(__name__)

DEFAULT_FOLD_STATE = FoldState.EXPANDED_ALL

# At most one separator character belongs to the marker; any further
# whitespace is part of the title.
MARKER_PATTERN = re.compile(
    r"[ \t]?<!--[ \t]*"
    + re.escape(FOLD_MARKER_NAMESPACE)
    + r":(?P<payload>(?:(?!-->).)*)-->[ \t]*$"
)

_PAYLOAD_VALUES = {state.value: state for state in FoldState}


def encode_fold_marker(state: FoldState) -> str:
    return f"<!-- {FOLD_MARKER_NAMESPACE}:{FOLD_MARKER_VERSION} fold={state.value} -->"


def decode_payload(payload: str) -> FoldState | None:
    parts = payload.split()
    if len(parts) != 2 or parts[0] != FOLD_MARKER_VERSION:
        return None
    key, separator, value = parts[1].partition("=")
    if key != "fold" or not separator:
        return None
    return _PAYLOAD_VALUES.get(value)


def split_fold_marker(heading_rest: str) -> tuple[str, FoldState, bool]:
    """Split the text after a heading timestamp into title, fold state, marker flag."""
    match = MARKER_PATTERN.search(heading_rest)
    if not match:
        return heading_rest, DEFAULT_FOLD_STATE, False

    state = decode_payload(match["payload"])
    if state is None:
        logger.debug("Ignoring unrecognized fold marker %r", match.group(0).strip())
        return heading_rest, DEFAULT_FOLD_STATE, False
    return heading_rest[: match.start()], state, True


def append_fold_marker(heading: str, state: FoldState, marker_present: bool) -> str:
    """Attach a marker for ``state`` unless the default needs none."""
    if state is DEFAULT_FOLD_STATE and not marker_present:
        return heading
    return f"{heading} {encode_fold_marker(state)}"
