# pylint: disable=missing-module-docstring,missing-function-docstring

from orchestrator.commands import LogEvent
from orchestrator.endpoints import EndpointPair, EndpointSet
from orchestrator.enums.environment import Environment
from orchestrator.enums.mode import Mode
from orchestrator.events import EventType, LoadFailed, LoadSucceeded, Start
from orchestrator.reducer import reduce
from orchestrator.state_dataclass import SessionState


ENDPOINTS = EndpointSet(
    pairs={Environment.PROD: EndpointPair(primary="https://a.example/")},
)


def test_reducer_emits_logevent_with_required_fields():
    state = SessionState()

    event = Start(
        event_type=EventType.START,
        ts_ms=123,
    )

    _, commands = reduce(state, event, endpoints=ENDPOINTS)

    log_events = [c for c in commands if isinstance(c, LogEvent)]
    assert log_events, "Reducer must emit at least one LogEvent"

    payload = log_events[0].event

    for key in (
        "ts_ms",
        "mode",
        "environment",
        "using_backup",
        "consecutive_failures",
        "pending_timer",
        "event_type",
        "decision",
        "details",
    ):
        assert key in payload

    assert payload["ts_ms"] == 123
    assert payload["event_type"] == "START"
    assert payload["environment"] == "prod"
    assert payload["details"]["role"] == "PRIMARY"


def test_state_changed_is_logged_last():
    state = SessionState()

    _, commands = reduce(
        state,
        LoadSucceeded(
            event_type=EventType.LOAD_SUCCEEDED,
            ts_ms=5,
            url="https://a.example/",
        ),
        endpoints=ENDPOINTS,
    )

    assert isinstance(commands[-1], LogEvent)
    last = commands[-1].event
    assert last["decision"] == "state_changed"
    assert last["mode"] == Mode.LOADED.value
    assert last["details"] == {
        "from_mode": "LOADING",
        "to_mode": "LOADED",
        "source": "load_succeeded",
    }


def test_ignored_event_logs_reason():
    state = SessionState()

    new_state, commands = reduce(
        state,
        LoadFailed(
            event_type=EventType.LOAD_FAILED,
            ts_ms=7,
            error_code=-105,
            is_main_frame=False,
            url="https://a.example/missing.png",
        ),
        endpoints=ENDPOINTS,
    )

    assert new_state == state
    assert len(commands) == 1
    assert commands[0].event["decision"] == "ignore"
    assert commands[0].event["details"] == {"reason": "sub_frame_failure"}
