# pylint: disable=missing-module-docstring,missing-function-docstring

import json
from typing import Any

import pytest

from observability import logger


@pytest.fixture
def captured(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    lines: list[str] = []

    # Patch the explicit output sink used by logger
    monkeypatch.setattr(logger, "_print", lines.append)
    monkeypatch.setattr(logger, "_min_level", logger._LEVELS["INFO"])  # pylint: disable=protected-access
    return lines


def test_log_event_emits_valid_jsonl(captured: list[str]) -> None:
    """
    Contract:
    - log_event emits exactly one JSONL line
    - payload is serialized as-is
    - output sink is patchable
    """
    payload: dict[str, Any] = {
        "ts_ms": 42,
        "event_type": "TEST",
        "value": 123,
    }

    logger.log_event(payload)

    # Exactly one line emitted
    assert len(captured) == 1

    # Must be valid JSON
    decoded = json.loads(captured[0])

    # Payload must be preserved exactly
    assert decoded == payload


def test_log_event_stamps_missing_timestamp(captured: list[str]) -> None:
    logger.log_event({"event_type": "TEST"})

    decoded = json.loads(captured[0])
    assert isinstance(decoded["ts_ms"], int)
    assert decoded["ts_ms"] > 0


def test_log_event_drops_events_below_level(captured: list[str]) -> None:
    logger.set_level("warning")

    logger.log_event({"event_type": "QUIET"})
    logger.log_event({"event_type": "DEBUGGY", "level": "DEBUG"})
    logger.log_event({"event_type": "LOUD", "level": "ERROR"})

    assert [json.loads(line)["event_type"] for line in captured] == ["LOUD"]


def test_unknown_level_name_falls_back_to_info(captured: list[str]) -> None:
    logger.set_level("chatty")

    logger.log_event({"event_type": "DEBUGGY", "level": "DEBUG"})
    logger.log_event({"event_type": "NORMAL"})

    assert [json.loads(line)["event_type"] for line in captured] == ["NORMAL"]


def test_unserializable_payload_falls_back(captured: list[str]) -> None:
    logger.log_event({"ts_ms": 1, "event_type": "TEST", "value": object()})

    decoded = json.loads(captured[0])
    assert decoded["event_type"] == "LOGGER_SERIALIZATION_ERROR"
    assert decoded["ts_ms"] == 1
