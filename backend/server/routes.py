"""
Route registration for the kiosk display controller.

Responsibilities:
- Define HTTP and WebSocket endpoints
- Wire gateway to WebSocket lifecycle
- Push timer-driven control messages to the display
- Pull dependencies from app.state
"""

from __future__ import annotations

import asyncio
import hmac
import json
from typing import Any

from fastapi import FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse

from constants import OFFLINE_PAGE_PATH
from observability.logger import log_event
from session.gateway import DisplayGateway, GatewayResult

from server.offline_page import OFFLINE_HTML


def register_routes(app: FastAPI) -> None:
    """Register all routes on the FastAPI app."""
    @app.get("/health")
    async def health() -> dict[str, str]: # pyright: ignore[reportUnusedFunction]
        return {"status": "ok"}

    @app.get(OFFLINE_PAGE_PATH, response_class=HTMLResponse)
    async def offline_page() -> HTMLResponse: # pyright: ignore[reportUnusedFunction]
        return HTMLResponse(content=OFFLINE_HTML)

    @app.get("/status")
    async def status() -> dict[str, Any]: # pyright: ignore[reportUnusedFunction]
        gateways: set[DisplayGateway] = app.state.gateways
        sessions = [
            snapshot
            for snapshot in (g.snapshot() for g in list(gateways))
            if snapshot is not None
        ]
        return {"sessions": sessions}

    @app.post("/commands/toggle-environment")
    async def toggle_environment(request: Request) -> dict[str, int]: # pyright: ignore[reportUnusedFunction]
        _guard_command(request)
        gateways: set[DisplayGateway] = app.state.gateways
        reached = 0
        for gateway in list(gateways):
            await gateway.toggle_environment()
            reached += 1
        return {"sessions": reached}

    @app.post("/commands/diagnostic-mode")
    async def diagnostic_mode(request: Request) -> dict[str, int]: # pyright: ignore[reportUnusedFunction]
        _guard_command(request)
        gateways: set[DisplayGateway] = app.state.gateways
        reached = 0
        for gateway in list(gateways):
            await gateway.enter_diagnostic_mode()
            reached += 1
        return {"sessions": reached}

    @app.websocket("/ws/display")
    async def display_endpoint(ws: WebSocket) -> None: # pyright: ignore[reportUnusedFunction]
        await ws.accept()

        gateways: set[DisplayGateway] = app.state.gateways
        gateway = DisplayGateway(
            config=app.state.config,
            endpoints=app.state.endpoints,
            policy=app.state.policy,
        )

        # Single writer at a time; replies and pushed messages share the socket
        send_lock = asyncio.Lock()
        pump: asyncio.Task[None] | None = None

        try:
            result = await gateway.on_ws_connect()
            gateways.add(gateway)
            await _flush_gateway_result(ws, result, send_lock)

            pump = asyncio.create_task(_pump_control(ws, gateway, send_lock))

            while True:
                text = await ws.receive_text()
                result = await gateway.on_json_message(text)
                await _flush_gateway_result(ws, result, send_lock)

        except WebSocketDisconnect:
            await gateway.on_ws_disconnect(reason="client_disconnect")

        except Exception as exc:  # pylint: disable=broad-exception-caught
            log_event({
                "level": "ERROR",
                "event_type": "WS_FATAL_ERROR",
                "session_id": gateway.session.session_id if gateway.session else None,
                "exception": type(exc).__name__,
                "message": str(exc),
            })
            await gateway.on_ws_disconnect(reason="server_error")

        finally:
            gateways.discard(gateway)
            if pump is not None:
                pump.cancel()
                await asyncio.gather(pump, return_exceptions=True)


async def _flush_gateway_result(
    ws: WebSocket,
    result: GatewayResult,
    send_lock: asyncio.Lock,
) -> None:
    async with send_lock:
        for msg in result.outbound_json:
            await ws.send_text(json.dumps(msg))


async def _pump_control(
    ws: WebSocket,
    gateway: DisplayGateway,
    send_lock: asyncio.Lock,
) -> None:
    """
    Forward control messages produced outside a request/reply cycle.

    Timer ticks and HTTP commands enqueue LOAD / LOAD_OFFLINE /
    SHOW_DIAGNOSTICS messages with no inbound message to reply to.
    """
    session = gateway.session
    assert session is not None

    while True:
        msg = await session.next_control()
        try:
            async with send_lock:
                await ws.send_text(json.dumps(msg))
        except (WebSocketDisconnect, RuntimeError) as exc:
            log_event({
                "level": "WARNING",
                "event_type": "WS_SEND_FAILED",
                "session_id": session.session_id,
                "msg_type": msg.get("type"),
                "exception": type(exc).__name__,
            })
            return


def _guard_command(request: Request) -> None:
    """
    Reject hotkey commands that did not come from the local hotkey daemon.

    Any request carrying an Origin header was sent by a browser (possibly
    by the page the kiosk renders) and is refused. When a command token
    is configured, X-Kiosk-Token must match it.
    """
    config = request.app.state.config
    origin = request.headers.get("origin")
    reason: str | None = None

    if origin is not None:
        reason = "browser_origin"
    elif config.command_token is not None and not hmac.compare_digest(
        request.headers.get("x-kiosk-token", ""), config.command_token
    ):
        reason = "bad_token"

    if reason is None:
        return

    log_event({
        "level": "WARNING",
        "event_type": "COMMAND_REJECTED",
        "path": request.url.path,
        "reason": reason,
        "origin": origin,
    })
    raise HTTPException(status_code=403, detail="forbidden")
