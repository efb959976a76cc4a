"""
FastAPI app factory.

Responsibilities:
- Create and configure FastAPI app
- Set up middleware
- Initialize shared resources (endpoint set, resilience policy)
- Register routes
- Release display timers on shutdown
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import AppConfig

from observability import logger
from observability.logger import log_event
from orchestrator.endpoints import EndpointSet
from orchestrator.policy import ResiliencePolicy
from session.gateway import DisplayGateway

from server.routes import register_routes


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield

    gateways: set[DisplayGateway] = app.state.gateways
    for gateway in list(gateways):
        await gateway.on_ws_disconnect(reason="server_shutdown")
    gateways.clear()


def create_app(config: AppConfig | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Raises:
        ConfigurationError if the endpoint configuration is unusable.
    """
    config = config or AppConfig.load_from_env()

    logger.set_level(config.log_level)

    # Fails fast: an unresolvable default environment is a startup defect
    endpoints = EndpointSet.from_config(config)
    policy = ResiliencePolicy.from_config(config)

    app = FastAPI(title="Kiosk Display Controller", lifespan=_lifespan)

    app.state.config = config
    app.state.endpoints = endpoints
    app.state.policy = policy
    app.state.gateways = set()

    # Middleware
    # Commands are never exposed cross-origin (see routes._guard_command)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.allowed_origins),
        allow_credentials=False,
        allow_methods=["GET"],
    )

    # Routes
    register_routes(app)

    log_event({
        "event_type": "APP_CREATED",
        "env": config.env,
        "default_environment": endpoints.default_environment.value,
        "environments": [e.value for e in endpoints.environments],
        "dev_mode": config.dev_mode,
        "offline_url": policy.offline_url,
    })

    return app
