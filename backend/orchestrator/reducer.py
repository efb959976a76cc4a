"""
Pure resilience reducer.

(state, event) -> (new_state, commands)

Rules:
- Pure: no side effects, no IO, no clocks.
- Deterministic: output depends only on inputs.
- Total: every (mode, event) pair is handled or explicitly ignored (logged).
"""

# At most one timer is pending at any time. Any schedule is preceded by a
# CancelTimer for the previous handle; reducer owns timer semantics and the
# runtime must not cancel timers implicitly (except on shutdown).

from __future__ import annotations

from dataclasses import replace
from typing import Any

from orchestrator.classifier import Classification, classify, is_navigation_aborted
from orchestrator.commands import (
    CancelTimer,
    Command,
    LoadOfflinePage,
    LoadUrl,
    LogEvent,
    ShowDiagnostics,
    StartTimer,
)
from orchestrator.endpoints import EndpointSet
from orchestrator.enums.mode import Mode
from orchestrator.events import (
    BackupRetryReady,
    EnterDiagnosticMode,
    Event,
    EventType,
    LoadFailed,
    LoadSucceeded,
    OfflineRecoveryTick,
    SessionEnded,
    SessionStarted,
    Start,
    ToggleEnvironment,
)
from orchestrator.policy import ResiliencePolicy, is_offline_url, threshold_reached
from orchestrator.state_dataclass import SessionState


# =============================================================================
# Timer IDs
# =============================================================================

TIMER_OFFLINE_RECOVERY = "offline_recovery"
TIMER_BACKUP_RETRY = "backup_retry"


Result = tuple[SessionState, tuple[Command, ...]]


# =============================================================================
# Small helpers
# =============================================================================

def _log(
    state: SessionState,
    event: Event,
    decision: str,
    details: dict[str, Any] | None = None,
) -> LogEvent:
    return LogEvent(
        event={
            "ts_ms": event.ts_ms,
            "mode": state.mode.value,
            "environment": state.active_environment.value,
            "using_backup": state.using_backup,
            "consecutive_failures": state.consecutive_failures,
            "pending_timer": state.pending_timer,
            "event_type": event.event_type.value,
            "decision": decision,
            "details": details or {},
        }
    )


def _logs_last(commands: tuple[Command, ...]) -> tuple[Command, ...]:
    non_logs: list[Command] = []
    logs: list[Command] = []
    state_change_logs: list[Command] = []

    for command in commands:
        if isinstance(command, LogEvent):
            if command.event.get("decision") == "state_changed":
                state_change_logs.append(command)
            else:
                logs.append(command)
        else:
            non_logs.append(command)

    return tuple(non_logs + logs + state_change_logs)


def _ignore(state: SessionState, event: Event, reason: str) -> Result:
    return state, (_log(state, event, "ignore", {"reason": reason}),)


def _finish(
    prev: SessionState,
    new_state: SessionState,
    event: Event,
    commands: list[Command],
    source: str,
) -> Result:
    """Append a state_changed log when the mode moved, then order logs last."""
    if prev.mode is not new_state.mode:
        commands.append(
            _log(
                new_state,
                event,
                "state_changed",
                {
                    "from_mode": prev.mode.value,
                    "to_mode": new_state.mode.value,
                    "source": source,
                },
            )
        )
    return new_state, _logs_last(tuple(commands))


def _cancel_pending(
    state: SessionState, keep: str | None = None
) -> tuple[str | None, list[Command]]:
    """
    Cancel the outstanding timer unless it is `keep`.

    Returns the timer id still pending afterwards and the commands to emit.
    """
    if state.pending_timer is None or state.pending_timer == keep:
        return state.pending_timer, []
    return None, [CancelTimer(timer_id=state.pending_timer)]


def _endpoint_url(
    state: SessionState, endpoints: EndpointSet, using_backup: bool
) -> tuple[str, dict[str, Any]]:
    endpoint = endpoints.resolve(state.active_environment, using_backup)
    url = endpoints.decorate(endpoint.url)
    return url, {
        "url": url,
        "role": endpoint.role.value,
        "environment": endpoint.environment.value,
    }


# =============================================================================
# Handlers
# =============================================================================

def _on_start(
    state: SessionState, event: Event, endpoints: EndpointSet
) -> Result:
    url, details = _endpoint_url(state, endpoints, state.using_backup)

    if state.mode is Mode.OFFLINE:
        # Recovery attempt: the interval keeps running until a load succeeds.
        new_state = replace(state, current_url=url)
        return new_state, (
            LoadUrl(url=url),
            _log(new_state, event, "offline_recovery_attempt", details),
        )

    pending, cmds = _cancel_pending(state)
    new_state = replace(
        state,
        mode=Mode.LOADING,
        pending_timer=pending,
        current_url=url,
    )
    cmds.append(LoadUrl(url=url))
    cmds.append(_log(new_state, event, "load_endpoint", details))
    return _finish(state, new_state, event, cmds, "start")


def _on_load_succeeded(
    state: SessionState, event: LoadSucceeded, policy: ResiliencePolicy
) -> Result:
    if is_offline_url(policy, event.url):
        return _ignore(state, event, "offline_page_loaded")

    pending, cmds = _cancel_pending(state)
    new_state = replace(
        state,
        consecutive_failures=0,
        mode=Mode.LOADED,
        pending_timer=pending,
    )
    cmds.append(
        _log(
            new_state,
            event,
            "load_succeeded",
            {
                "url": event.url,
                "failures_cleared": state.consecutive_failures,
            },
        )
    )
    return _finish(state, new_state, event, cmds, "load_succeeded")


def _on_load_failed(
    state: SessionState,
    event: LoadFailed,
    endpoints: EndpointSet,
    policy: ResiliencePolicy,
) -> Result:
    if is_offline_url(policy, event.url):
        return _ignore(state, event, "offline_page_failure")

    if classify(event.error_code, event.is_main_frame) is Classification.IGNORABLE:
        reason = (
            "sub_frame_failure"
            if not event.is_main_frame
            else "navigation_aborted"
            if is_navigation_aborted(event.error_code)
            else "ignorable_failure"
        )
        return _ignore(state, event, reason)

    failures = state.consecutive_failures + 1
    failure_details: dict[str, Any] = {
        "error_code": event.error_code,
        "url": event.url,
        "description": event.description,
        "consecutive_failures": failures,
    }

    # ------------------------------------------------------------------
    # Threshold reached: offline page + single recovery interval
    # ------------------------------------------------------------------
    if threshold_reached(policy, failures):
        pending, cmds = _cancel_pending(state, keep=TIMER_OFFLINE_RECOVERY)
        new_state = replace(
            state,
            consecutive_failures=failures,
            using_backup=False,
            mode=Mode.OFFLINE,
            pending_timer=TIMER_OFFLINE_RECOVERY,
            current_url=policy.offline_url,
        )
        cmds.append(LoadOfflinePage(url=policy.offline_url))
        if pending != TIMER_OFFLINE_RECOVERY:
            cmds.append(
                StartTimer(
                    timer_id=TIMER_OFFLINE_RECOVERY,
                    duration_ms=policy.offline_recovery_interval_ms,
                    timeout_event_type=EventType.OFFLINE_RECOVERY_TICK,
                    repeat=True,
                )
            )
        cmds.append(_log(new_state, event, "enter_offline", failure_details))
        return _finish(state, new_state, event, cmds, "threshold_reached")

    pending, cmds = _cancel_pending(state)

    # ------------------------------------------------------------------
    # Primary failed: fail over to the backup immediately
    # ------------------------------------------------------------------
    if not state.using_backup:
        new_state = replace(
            state,
            consecutive_failures=failures,
            using_backup=True,
            mode=Mode.RETRYING,
            pending_timer=pending,
        )
        url, details = _endpoint_url(new_state, endpoints, True)
        new_state = replace(new_state, current_url=url)
        cmds.append(LoadUrl(url=url))
        cmds.append(
            _log(new_state, event, "failover_to_backup", {**failure_details, **details})
        )
        return _finish(state, new_state, event, cmds, "failover_to_backup")

    # ------------------------------------------------------------------
    # Backup failed: delayed retry of the primary
    # ------------------------------------------------------------------
    new_state = replace(
        state,
        consecutive_failures=failures,
        using_backup=False,
        mode=Mode.RETRYING,
        pending_timer=TIMER_BACKUP_RETRY,
    )
    cmds.append(
        StartTimer(
            timer_id=TIMER_BACKUP_RETRY,
            duration_ms=policy.backup_retry_delay_ms,
            timeout_event_type=EventType.BACKUP_RETRY_READY,
        )
    )
    cmds.append(
        _log(
            new_state,
            event,
            "schedule_primary_retry",
            {**failure_details, "delay_ms": policy.backup_retry_delay_ms},
        )
    )
    return _finish(state, new_state, event, cmds, "schedule_primary_retry")


def _on_backup_retry_ready(
    state: SessionState, event: BackupRetryReady, endpoints: EndpointSet
) -> Result:
    if state.pending_timer != event.timer_id:
        return _ignore(state, event, "stale_timer")

    new_state = replace(state, using_backup=False, pending_timer=None)
    url, details = _endpoint_url(new_state, endpoints, False)
    new_state = replace(new_state, mode=Mode.RETRYING, current_url=url)
    return _finish(
        state,
        new_state,
        event,
        [LoadUrl(url=url), _log(new_state, event, "retry_primary", details)],
        "retry_primary",
    )


def _on_toggle_environment(
    state: SessionState, event: ToggleEnvironment, endpoints: EndpointSet
) -> Result:
    _, cmds = _cancel_pending(state)
    new_environment = endpoints.next_environment(state.active_environment)

    new_state = replace(
        state,
        active_environment=new_environment,
        using_backup=False,
        mode=Mode.LOADING,
        pending_timer=None,
    )
    url, details = _endpoint_url(new_state, endpoints, False)
    new_state = replace(new_state, current_url=url)

    cmds.append(LoadUrl(url=url))
    cmds.append(
        _log(
            new_state,
            event,
            "toggle_environment",
            {"from_environment": state.active_environment.value, **details},
        )
    )
    return _finish(state, new_state, event, cmds, "toggle_environment")


# =============================================================================
# Reducer entrypoint
# =============================================================================

def reduce(
    state: SessionState,
    event: Event,
    *,
    endpoints: EndpointSet,
    policy: ResiliencePolicy | None = None,
) -> Result:
    """
    Pure reducer for the endpoint resilience state machine.

    Given the current session state and a single event, returns:
    - the next state
    - a tuple of commands describing required side effects

    Properties:
    - Deterministic: no IO, clocks, or randomness
    - Total: every (mode, event) pair is handled or explicitly ignored
    - Timer-safe: ignores timer events whose timer is no longer pending
    - Never fatal: failures degrade to OFFLINE, never terminate
    """
    policy = policy or ResiliencePolicy()

    if isinstance(event, SessionStarted):
        return state, (
            _log(state, event, "session_started", {"session_id": event.session_id}),
        )

    if isinstance(event, SessionEnded):
        return state, (
            _log(state, event, "session_ended", {"session_id": event.session_id}),
        )

    if isinstance(event, Start):
        return _on_start(state, event, endpoints)

    if isinstance(event, LoadSucceeded):
        return _on_load_succeeded(state, event, policy)

    if isinstance(event, LoadFailed):
        return _on_load_failed(state, event, endpoints, policy)

    if isinstance(event, OfflineRecoveryTick):
        if state.mode is not Mode.OFFLINE or state.pending_timer != event.timer_id:
            return _ignore(state, event, "stale_timer")
        return _on_start(state, event, endpoints)

    if isinstance(event, BackupRetryReady):
        return _on_backup_retry_ready(state, event, endpoints)

    if isinstance(event, ToggleEnvironment):
        return _on_toggle_environment(state, event, endpoints)

    if isinstance(event, EnterDiagnosticMode):
        return state, (
            ShowDiagnostics(),
            _log(state, event, "enter_diagnostic_mode"),
        )

    return _ignore(state, event, "unhandled_event")
