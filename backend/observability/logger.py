"""
JSONL event logger.

- Write one JSON object per line
- Output to stdout
- No buffering, no batching
- No side effects beyond logging

Events may carry a "level" key (DEBUG/INFO/WARNING/ERROR, default INFO);
events below the configured level are dropped.
"""

from __future__ import annotations

import json
import sys
import time
from typing import Any, Mapping, Callable


_LEVELS: dict[str, int] = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
}

_min_level: int = _LEVELS["INFO"]


# ------------------------------------------------------------------
# Explicit output sink (patchable in tests)
# ------------------------------------------------------------------

def _stdout_print(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()

_print: Callable[[str], None] = _stdout_print


def set_level(level: str) -> None:
    """Set the minimum emitted level; unknown names fall back to INFO."""
    global _min_level  # pylint: disable=global-statement
    _min_level = _LEVELS.get(level.strip().upper(), _LEVELS["INFO"])


def log_event(event: Mapping[str, Any]) -> None:
    """
    Write a single JSONL event to stdout.

    The caller is responsible for:
    - Supplying a fully-formed event dict (event_type, session_id, ...)

    This function:
    - Drops events below the configured level
    - Stamps ts_ms when the caller did not
    - Serializes to JSON and writes exactly one line
    - Never raises
    """
    level = _LEVELS.get(str(event.get("level", "INFO")).upper(), _LEVELS["INFO"])
    if level < _min_level:
        return

    payload: dict[str, Any] = dict(event)
    if payload.get("ts_ms") is None:
        payload["ts_ms"] = time.time_ns() // 1_000_000

    try:
        line = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        # Last-resort fallback: logging must never crash the controller
        fallback: dict[str, Any] = {
            "ts_ms": payload["ts_ms"],
            "event_type": "LOGGER_SERIALIZATION_ERROR",
            "error": str(e),
            "original_event_repr": repr(event),
        }
        line = json.dumps(fallback, ensure_ascii=False, separators=(",", ":"))

    _print(line)
