"""
WebSocket-backed render surface.

Translates controller commands into control messages for the display
client. Navigation itself happens in the client; outcomes come back as
LOAD_FINISHED / LOAD_FAILED messages through the gateway.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from session.display_session import DisplaySession


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class WebSocketRenderSurface:
    """Fire-and-forget render surface over the display's control socket."""

    def __init__(self, session: DisplaySession) -> None:
        self._session = session

    async def load(self, url: str) -> None:
        self._session.enqueue_control({
            "type": "LOAD",
            "url": url,
            "ts_ms": _now_ms(),
        })

    async def load_offline_page(self, url: str) -> None:
        self._session.enqueue_control({
            "type": "LOAD_OFFLINE",
            "url": url,
            "ts_ms": _now_ms(),
        })

    async def show_diagnostics(self) -> None:
        self._session.enqueue_control({
            "type": "SHOW_DIAGNOSTICS",
            "open_devtools": True,
            "release_kiosk_lock": True,
            "ts_ms": _now_ms(),
        })
