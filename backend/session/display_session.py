"""
Display session container.

- Owns the runtime (which owns the immutable session state)
- Owns connection status (mutable, gateway-controlled)
- Owns the outbound control queue toward the display client
- Owned and mutated by DisplayGateway
- NOT a state machine
- Contains no orchestration logic
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any

from orchestrator.runtime import Runtime
from orchestrator.runtime_context import RenderSurfaceProtocol
from session.connection_status import ConnectionStatus


# ---------------------------------------------------------------------
# DisplaySession
# ---------------------------------------------------------------------


@dataclass
class DisplaySession:
    """Mutable runtime container for a single display client."""

    # ------------------------------------------------------------------
    # Identity / lifecycle
    # ------------------------------------------------------------------

    session_id: str
    created_at: float = field(default_factory=time.time)

    # ------------------------------------------------------------------
    # Connection / gateway-controlled state
    # ------------------------------------------------------------------

    connection_status: ConnectionStatus = ConnectionStatus.DOWN

    # ------------------------------------------------------------------
    # Runtime (executes commands + owns authoritative state)
    # ------------------------------------------------------------------

    runtime: Runtime | None = None

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    render_surface: RenderSurfaceProtocol | None = None

    def __post_init__(self) -> None:
        self._control_out: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

    # ------------------------------------------------------------------
    # Wiring helpers (called by DisplayGateway)
    # ------------------------------------------------------------------

    def attach_render_surface(self, surface: RenderSurfaceProtocol) -> None:
        """Attach the render surface commands are forwarded to."""
        self.render_surface = surface

    def attach_runtime(self, runtime: Runtime) -> None:
        """
        Attach the runtime executor.

        Must be called after the render surface is attached.
        """
        self.runtime = runtime

    # ------------------------------------------------------------------
    # Observability helpers (read-only)
    # ------------------------------------------------------------------

    def log_context(self) -> dict[str, Any]:
        """Return standard logging context for this session."""
        return {
            "session_id": self.session_id,
            "connection_status": self.connection_status.value,
        }

    # ------------------------------------------------------------------
    # Outbound control messages
    # ------------------------------------------------------------------

    def enqueue_control(self, msg: dict[str, Any]) -> None:
        """
        Enqueue a control message for delivery to the display client.

        Messages are delivered in FIFO order, either drained with the
        reply to an inbound message or pushed by the route's sender task.
        """
        self._control_out.put_nowait(msg)

    def drain_control(self) -> tuple[dict[str, Any], ...]:
        """
        Drain all pending control messages without waiting.

        Returns an empty tuple if no messages are pending.
        """
        out: list[dict[str, Any]] = []
        while True:
            try:
                out.append(self._control_out.get_nowait())
            except asyncio.QueueEmpty:
                break
        return tuple(out)

    async def next_control(self) -> dict[str, Any]:
        """Wait for the next control message (timer-driven pushes)."""
        return await self._control_out.get()
