"""
Runtime execution shell for a single display session.

Responsibilities:
- Own controller state
- Call pure reducer
- Serialize events through a single-consumer queue
- Execute commands with side effects (render surface, timers, logging)
- Schedule and cancel timers
- Convert timer expiry into events
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from typing import TYPE_CHECKING

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
from orchestrator.events import (
    BackupRetryReady,
    Event,
    EventType,
    OfflineRecoveryTick,
    Start,
)
from orchestrator.policy import ResiliencePolicy
from orchestrator.reducer import reduce
from orchestrator.state_dataclass import SessionState

from observability.logger import log_event


if TYPE_CHECKING:
    from orchestrator.runtime_context import RuntimeExecutionContext


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class Runtime:
    """
    Runtime execution boundary for a single display session.

    Owns one display's controller state and everything that touches it.

    Every input converges on handle_event(): display reports, hotkey
    commands and timer expiry alike. Each event goes through reduce()
    exactly once; the resulting state is swapped in before any of the
    emitted commands run.

    Ordering:
    - One event at a time, in arrival order. An event handed in while
      another is executing is appended to the inbox and drained by the
      call already in progress.
    - Commands run in the order the reducer emitted them.
    - No decisions are made here; only execution.
    """

    def __init__(
        self,
        *,
        initial_state: SessionState,
        context: RuntimeExecutionContext,
        endpoints: EndpointSet,
        policy: ResiliencePolicy,
    ) -> None:
        self._state = initial_state
        self._ctx = context
        self._endpoints = endpoints
        self._policy = policy
        self._timers: dict[str, asyncio.Task[None]] = {}
        self._inbox: deque[Event] = deque()
        self._draining = False
        self._closed = False

    @property
    def state(self) -> SessionState:
        """
        Return the current immutable session state.

        Consumers must never modify this state directly; it is only
        replaced internally by Runtime via the reducer.
        """
        return self._state

    @property
    def pending_timers(self) -> tuple[str, ...]:
        """Ids of timers whose tasks have not finished."""
        return tuple(
            timer_id for timer_id, task in self._timers.items() if not task.done()
        )

    async def start(self) -> None:
        """Issue the initial load of the resolved endpoint."""
        await self.handle_event(Start(event_type=EventType.START, ts_ms=_now_ms()))

    async def handle_event(self, event: Event) -> None:
        """
        Process a single event through the controller pipeline.

        Processing steps (per event, strictly sequential):
        1. Pass the current state and event to the pure reducer
        2. Swap in the new session state
        3. Execute all emitted commands in reducer order

        All event sources converge here:
        - Gateway (render surface reports, mode toggle commands)
        - Timers (offline recovery ticks, backup retry delay)

        Events handed in after shutdown() are dropped.
        """
        if self._closed:
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "EVENT_AFTER_SHUTDOWN",
                "session_id": self._ctx.session_id,
                "dropped_event": event.event_type.value,
            })
            return

        self._inbox.append(event)
        if self._draining:
            return

        self._draining = True
        try:
            while self._inbox:
                await self._process(self._inbox.popleft())
        finally:
            self._draining = False

    async def shutdown(self) -> None:
        """
        Clean shutdown of runtime.

        Cancels all in-flight timers and waits for their tasks to finish so
        no timer callback can fire against a discarded session.
        Called by gateway on display disconnect.
        """
        self._closed = True
        self._inbox.clear()

        tasks = [
            task
            for task in self._timers.values()
            if task is not asyncio.current_task()
        ]
        for timer_id in list(self._timers.keys()):
            self._cancel_timer(timer_id)

        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # Event processing
    # ------------------------------------------------------------------

    async def _process(self, event: Event) -> None:
        new_state, commands = reduce(
            self._state,
            event,
            endpoints=self._endpoints,
            policy=self._policy,
        )
        self._state = new_state

        for cmd in commands:
            await self._execute_command(cmd)

    # ------------------------------------------------------------------
    # Command execution (side effects)
    # ------------------------------------------------------------------

    async def _execute_command(self, cmd: Command) -> None:
        """Execute a single command with side effects."""

        if isinstance(cmd, LogEvent):
            log_event({
                **cmd.event,
                "session_id": self._ctx.session_id,
                "connection_status": self._ctx.connection_status.value,
            })

        elif isinstance(cmd, StartTimer):
            self._start_timer(
                timer_id=cmd.timer_id,
                duration_ms=cmd.duration_ms,
                timeout_event_type=cmd.timeout_event_type,
                repeat=cmd.repeat,
            )

        elif isinstance(cmd, CancelTimer):
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "TIMER_CANCELLED",
                "timer_id": cmd.timer_id,
                "session_id": self._ctx.session_id,
            })
            self._cancel_timer(cmd.timer_id)

        elif isinstance(cmd, (LoadUrl, LoadOfflinePage, ShowDiagnostics)):
            await self._call_surface(cmd)

        else:
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "COMMAND_NOT_IMPLEMENTED",
                "session_id": self._ctx.session_id,
                "command_type": type(cmd).__name__,
            })

    async def _call_surface(self, cmd: LoadUrl | LoadOfflinePage | ShowDiagnostics) -> None:
        """
        Forward a render surface command.

        A failing surface call is logged and never interrupts the drain;
        the surface reports navigation outcomes through events only.
        """
        surface = self._ctx.render_surface
        if surface is None:
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "SURFACE_MISSING",
                "session_id": self._ctx.session_id,
                "command_type": cmd.command_type.value,
            })
            return

        try:
            if isinstance(cmd, LoadUrl):
                await surface.load(cmd.url)
            elif isinstance(cmd, LoadOfflinePage):
                await surface.load_offline_page(cmd.url)
            else:
                await surface.show_diagnostics()
        except Exception as exc:  # pylint: disable=broad-exception-caught
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "SURFACE_COMMAND_FAILED",
                "session_id": self._ctx.session_id,
                "command_type": cmd.command_type.value,
                "exception": type(exc).__name__,
                "message": str(exc),
            })
            return

        log_event({
            "ts_ms": _now_ms(),
            "event_type": f"{cmd.command_type.value}_EXECUTED",
            "session_id": self._ctx.session_id,
            "url": getattr(cmd, "url", None),
        })

    # ------------------------------------------------------------------
    # Timer management
    # ------------------------------------------------------------------

    def _start_timer(
        self,
        *,
        timer_id: str,
        duration_ms: int,
        timeout_event_type: EventType,
        repeat: bool,
    ) -> None:
        """
        Start or replace a timer that emits a timeout event.

        Timer tasks re-enter handle_event() when they expire,
        maintaining the single event entry point invariant.

        Timers are the mechanism for all temporal behavior:
        - Offline recovery interval (repeating)
        - Primary retry after a backup failure (one-shot)
        """
        # Cancel existing timer if present (idempotent)
        self._cancel_timer(timer_id)

        async def _timer_task() -> None:
            try:
                while True:
                    await asyncio.sleep(duration_ms / 1000.0)

                    if not repeat:
                        # One-shot: release the handle before re-entering
                        if self._timers.get(timer_id) is asyncio.current_task():
                            del self._timers[timer_id]

                    event = self._construct_timeout_event(
                        timer_id=timer_id,
                        timeout_event_type=timeout_event_type,
                    )
                    try:
                        await self.handle_event(event)
                    except Exception as exc:  # pylint: disable=broad-exception-caught
                        # A failed tick must not end the recovery interval
                        log_event({
                            "ts_ms": _now_ms(),
                            "level": "ERROR",
                            "event_type": "TIMER_EVENT_FAILED",
                            "session_id": self._ctx.session_id,
                            "timer_id": timer_id,
                            "exception": type(exc).__name__,
                            "message": str(exc),
                        })

                    # Released or replaced while handling its own event
                    if not repeat or self._timers.get(timer_id) is not asyncio.current_task():
                        return

            except asyncio.CancelledError:
                # Timer was cancelled - this is normal
                return

        self._timers[timer_id] = asyncio.create_task(_timer_task())

    def _cancel_timer(self, timer_id: str) -> None:
        """
        Cancel an in-flight timer if it exists.

        Idempotent: safe to call even if timer doesn't exist. A timer
        cancelling itself (from within its own callback) is only
        released, not interrupted.
        """
        task = self._timers.pop(timer_id, None)
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    def _construct_timeout_event(
        self,
        *,
        timer_id: str,
        timeout_event_type: EventType,
    ) -> Event:
        """
        Construct the appropriate timeout event based on type.

        The reducer emits timer commands with just EventType; runtime
        constructs the full event, stamping the timer_id for stale gating.
        """
        ts = _now_ms()

        if timeout_event_type is EventType.OFFLINE_RECOVERY_TICK:
            return OfflineRecoveryTick(
                event_type=EventType.OFFLINE_RECOVERY_TICK,
                ts_ms=ts,
                timer_id=timer_id,
            )

        if timeout_event_type is EventType.BACKUP_RETRY_READY:
            return BackupRetryReady(
                event_type=EventType.BACKUP_RETRY_READY,
                ts_ms=ts,
                timer_id=timer_id,
            )

        # Fallback: unknown timeout type
        # This should never happen if reducer is correct
        raise ValueError(
            f"Unknown timeout event type: {timeout_event_type} "
            f"for timer_id: {timer_id}"
        )
