"""
Display gateway.

Responsibilities:
- Owns DisplaySession lifecycle
- Tracks connection_status independently of controller mode
- Routes inbound JSON messages from the display -> controller events
- Answers certificate-trust and permission prompts
- Forwards mode toggle commands (WebSocket or HTTP) into the runtime

NOT responsible for:
- Executing commands (runtime)
- Any state machine logic (reducer)
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

from uuid import uuid4

from orchestrator.endpoints import EndpointSet
from orchestrator.events import (
    EnterDiagnosticMode,
    Event,
    EventType,
    LoadFailed,
    LoadSucceeded,
    SessionEnded,
    SessionStarted,
    ToggleEnvironment,
)
from orchestrator.policy import ResiliencePolicy
from orchestrator.runtime import Runtime
from orchestrator.runtime_context import RuntimeExecutionContext
from orchestrator.state_dataclass import SessionState

from session.connection_status import ConnectionStatus
from session.display_session import DisplaySession
from session.host_policy import certificate_trusted, permission_granted
from session.render_surface import WebSocketRenderSurface

from constants import GRANTED_PERMISSIONS

from observability.logger import log_event

if TYPE_CHECKING:
    from config import AppConfig

# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def _new_session_id() -> str:
    return f"disp_{uuid4().hex[:12]}"


# ------------------------------------------------------------------
# Gateway result
# ------------------------------------------------------------------

@dataclass(frozen=True)
class GatewayResult:
    """
    Return value for gateway boundary methods.

    outbound_json:
        JSON messages to send to the display, in order
    """
    outbound_json: tuple[dict[str, Any], ...] = ()


# ------------------------------------------------------------------
# DisplayGateway
# ------------------------------------------------------------------

class DisplayGateway:
    """One gateway == one display session."""

    def __init__(
        self,
        *,
        config: AppConfig,
        endpoints: EndpointSet | None = None,
        policy: ResiliencePolicy | None = None,
    ) -> None:
        self._config = config
        self._endpoints = endpoints or EndpointSet.from_config(config)
        self._policy = policy or ResiliencePolicy.from_config(config)
        self.session: DisplaySession | None = None

    async def on_ws_connect(self) -> GatewayResult:
        """
        Called when the display's WebSocket connection is accepted.

        Sends SESSION_INIT, then the initial load of the resolved endpoint.
        """
        session_id = _new_session_id()

        self.session = DisplaySession(session_id=session_id)
        self.session.connection_status = ConnectionStatus.UP
        self.session.attach_render_surface(WebSocketRenderSurface(self.session))

        runtime = Runtime(
            initial_state=SessionState(
                active_environment=self._endpoints.default_environment,
            ),
            context=RuntimeExecutionContext(session=self.session),
            endpoints=self._endpoints,
            policy=self._policy,
        )
        self.session.attach_runtime(runtime)

        self.session.enqueue_control({
            "type": "SESSION_INIT",
            "session_id": session_id,
            "environment": self._endpoints.default_environment.value,
            "environments": [e.value for e in self._endpoints.environments],
            "offline_url": self._policy.offline_url,
            "granted_permissions": sorted(GRANTED_PERMISSIONS),
            "dev_mode": self._config.dev_mode,
        })

        await self._dispatch(
            SessionStarted(
                event_type=EventType.SESSION_STARTED,
                ts_ms=_now_ms(),
                session_id=session_id,
            )
        )
        await runtime.start()

        return GatewayResult(outbound_json=self._drain_control_out())

    async def on_ws_disconnect(self, reason: str | None = None) -> GatewayResult:
        """Called when the display WebSocket disconnects; releases all timers."""
        if self.session is None:
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "WS_DISCONNECT_WITHOUT_SESSION",
                "reason": reason,
            })
            return GatewayResult()

        session_id = self.session.session_id

        await self._dispatch(
            SessionEnded(
                event_type=EventType.SESSION_ENDED,
                ts_ms=_now_ms(),
                session_id=session_id,
            )
        )

        runtime = self.session.runtime
        if runtime is not None:
            await runtime.shutdown()

        self.session.connection_status = ConnectionStatus.DOWN

        log_event({
            "ts_ms": _now_ms(),
            "event_type": "DISPLAY_DISCONNECTED",
            "session_id": session_id,
            "reason": reason,
        })
        return GatewayResult()

    # ------------------------------------------------------------------
    # Inbound messages
    # ------------------------------------------------------------------

    async def on_json_message(self, payload: str) -> GatewayResult:
        """Route inbound JSON from the display to controller events."""
        if self.session is None:
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "MESSAGE_WITHOUT_SESSION",
                "payload_preview": payload[:100],
            })
            return GatewayResult()

        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "JSON_DECODE_ERROR",
                "session_id": self.session.session_id,
                "error": str(e),
                "payload_preview": payload[:100],
            })
            return GatewayResult()

        if not isinstance(data, dict):
            return self._reject("NOT_AN_OBJECT", payload)

        msg_type = data.get("type")
        ts_ms = data.get("ts_ms")
        if ts_ms is None:
            ts_ms = _now_ms()
        elif not isinstance(ts_ms, int) or isinstance(ts_ms, bool):
            return self._reject("INVALID_TIMESTAMP", payload)

        event: Event | None = None

        if msg_type == "LOAD_FINISHED":
            url = data.get("url")
            if not isinstance(url, str):
                return self._reject("MISSING_URL", payload)
            event = LoadSucceeded(
                event_type=EventType.LOAD_SUCCEEDED,
                ts_ms=ts_ms,
                url=url,
            )
        elif msg_type == "LOAD_FAILED":
            error_code = data.get("error_code")
            url = data.get("url", "")
            is_main_frame = data.get("is_main_frame", True)
            if (
                not isinstance(error_code, int)
                or isinstance(error_code, bool)
                or not isinstance(url, str)
                or not isinstance(is_main_frame, bool)
            ):
                return self._reject("INVALID_LOAD_FAILED", payload)
            event = LoadFailed(
                event_type=EventType.LOAD_FAILED,
                ts_ms=ts_ms,
                error_code=error_code,
                is_main_frame=is_main_frame,
                url=url,
                description=str(data.get("description", "")),
            )
        elif msg_type == "TOGGLE_ENVIRONMENT":
            event = ToggleEnvironment(
                event_type=EventType.TOGGLE_ENVIRONMENT, ts_ms=ts_ms
            )
        elif msg_type == "ENTER_DIAGNOSTIC_MODE":
            event = EnterDiagnosticMode(
                event_type=EventType.ENTER_DIAGNOSTIC_MODE, ts_ms=ts_ms
            )
        elif msg_type == "CERTIFICATE_ERROR":
            self._answer_certificate_error(data)
        elif msg_type == "PERMISSION_REQUEST":
            self._answer_permission_request(data)
        else:
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "UNKNOWN_MESSAGE_TYPE",
                "msg_type": msg_type,
                "session_id": self.session.session_id,
            })
            return GatewayResult()

        if event is not None:
            await self._dispatch(event)

        return GatewayResult(outbound_json=self._drain_control_out())

    # ------------------------------------------------------------------
    # Mode toggle commands (HTTP / hotkey daemon)
    # ------------------------------------------------------------------

    async def toggle_environment(self) -> None:
        """Forward an environment-toggle hotkey; output is pushed, not returned."""
        await self._dispatch(
            ToggleEnvironment(event_type=EventType.TOGGLE_ENVIRONMENT, ts_ms=_now_ms())
        )

    async def enter_diagnostic_mode(self) -> None:
        """Forward a diagnostic hotkey; output is pushed, not returned."""
        await self._dispatch(
            EnterDiagnosticMode(
                event_type=EventType.ENTER_DIAGNOSTIC_MODE, ts_ms=_now_ms()
            )
        )

    def snapshot(self) -> dict[str, Any] | None:
        """Read-only view of the session for status endpoints."""
        if self.session is None or self.session.runtime is None:
            return None
        state = self.session.runtime.state
        return {
            **self.session.log_context(),
            "mode": state.mode.value,
            "environment": state.active_environment.value,
            "using_backup": state.using_backup,
            "consecutive_failures": state.consecutive_failures,
            "pending_timer": state.pending_timer,
            "current_url": state.current_url,
        }

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------

    def _answer_certificate_error(self, data: dict[str, Any]) -> None:
        assert self.session is not None
        url = str(data.get("url", ""))
        trusted = certificate_trusted(url, self._endpoints, self._config.dev_mode)
        log_event({
            "ts_ms": _now_ms(),
            "event_type": "CERTIFICATE_DECISION",
            "session_id": self.session.session_id,
            "url": url,
            "trusted": trusted,
        })
        self.session.enqueue_control({
            "type": "CERTIFICATE_DECISION",
            "url": url,
            "trusted": trusted,
            "request_id": data.get("request_id"),
        })

    def _answer_permission_request(self, data: dict[str, Any]) -> None:
        assert self.session is not None
        permission = str(data.get("permission", ""))
        granted = permission_granted(permission)
        log_event({
            "ts_ms": _now_ms(),
            "event_type": "PERMISSION_DECISION",
            "session_id": self.session.session_id,
            "permission": permission,
            "granted": granted,
        })
        self.session.enqueue_control({
            "type": "PERMISSION_DECISION",
            "permission": permission,
            "granted": granted,
            "request_id": data.get("request_id"),
        })

    # ------------------------------------------------------------------
    # Runtime dispatch
    # ------------------------------------------------------------------

    async def _dispatch(self, event: Event) -> None:
        """Forward event into runtime; runtime owns all orchestration."""
        if self.session is None:
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "DISPATCH_WITHOUT_SESSION",
                "dropped_event": event.event_type.value,
            })
            return

        runtime = self.session.runtime
        assert runtime is not None, "Runtime must exist before dispatch"

        await runtime.handle_event(event)

    def _reject(self, reason: str, payload: str) -> GatewayResult:
        log_event({
            "ts_ms": _now_ms(),
            "level": "WARNING",
            "event_type": "INVALID_MESSAGE",
            "reason": reason,
            "session_id": self.session.session_id if self.session else None,
            "payload_preview": payload[:100],
        })
        return GatewayResult()

    def _drain_control_out(self) -> tuple[dict[str, Any], ...]:
        if self.session is None:
            return ()
        return self.session.drain_control()
