"""
Application configuration.

Responsibilities:
- Load deployment-specific configuration
- Read environment variables
- Provide a typed, immutable config object

Non-responsibilities:
- No orchestration logic
- No behavioral constants (see constants.py)
- No runtime mutation
"""

from __future__ import annotations

import os
import socket
from dataclasses import dataclass

from constants import (
    BACKUP_RETRY_DELAY_MS,
    DEFAULT_APP_URL,
    DEFAULT_ENVIRONMENT,
    DEFAULT_HTTP_HOST,
    DEFAULT_HTTP_PORT,
    FAIL_THRESHOLD,
    OFFLINE_PAGE_PATH,
    OFFLINE_RECOVERY_INTERVAL_MS,
)


def _env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_optional(name: str) -> str | None:
    value = os.environ.get(name, "").strip()
    return value or None


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable application configuration.

    Constructed once at process startup.
    Passed downward to the app factory and every display gateway.
    """

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    env: str
    log_level: str

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    prod_url: str
    prod_backup_url: str | None
    test_url: str | None
    test_backup_url: str | None
    default_environment: str

    # Identity tag appended to every outgoing endpoint URL
    host_identity: str

    # Widens the certificate-bypass scope to every origin
    dev_mode: bool

    # ------------------------------------------------------------------
    # Resilience policy
    # ------------------------------------------------------------------

    fail_threshold: int
    offline_recovery_interval_ms: int
    backup_retry_delay_ms: int

    # ------------------------------------------------------------------
    # Host surface
    # ------------------------------------------------------------------

    http_host: str
    http_port: int
    offline_url: str

    # Shared secret for POST /commands/*; None accepts any non-browser caller
    command_token: str | None = None

    # Browser origins allowed by CORS (read-only routes only)
    allowed_origins: tuple[str, ...] = ()

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @staticmethod
    def load_from_env() -> AppConfig:
        """
        Load configuration from environment variables.

        Raises:
            ValueError if a numeric variable cannot be parsed.
        """
        http_host = os.environ.get("KIOSK_HTTP_HOST", DEFAULT_HTTP_HOST)
        http_port = int(os.environ.get("KIOSK_HTTP_PORT", str(DEFAULT_HTTP_PORT)))

        return AppConfig(
            env=os.environ.get("ENV", "dev"),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),

            prod_url=(
                _env_optional("KIOSK_PROD_URL")
                or _env_optional("APP_URL")
                or DEFAULT_APP_URL
            ),
            prod_backup_url=_env_optional("KIOSK_PROD_BACKUP_URL"),
            test_url=_env_optional("KIOSK_TEST_URL"),
            test_backup_url=_env_optional("KIOSK_TEST_BACKUP_URL"),
            default_environment=os.environ.get(
                "KIOSK_DEFAULT_ENVIRONMENT", DEFAULT_ENVIRONMENT
            ).strip().lower(),

            host_identity=os.environ.get("KIOSK_HOST_ID", socket.gethostname()),
            dev_mode=_env_flag("KIOSK_DEV_MODE"),

            fail_threshold=int(
                os.environ.get("KIOSK_FAIL_THRESHOLD", str(FAIL_THRESHOLD))
            ),
            offline_recovery_interval_ms=int(
                os.environ.get(
                    "KIOSK_OFFLINE_RETRY_MS", str(OFFLINE_RECOVERY_INTERVAL_MS)
                )
            ),
            backup_retry_delay_ms=int(
                os.environ.get("KIOSK_BACKUP_RETRY_MS", str(BACKUP_RETRY_DELAY_MS))
            ),

            http_host=http_host,
            http_port=http_port,
            offline_url=(
                _env_optional("KIOSK_OFFLINE_URL")
                or f"http://{http_host}:{http_port}{OFFLINE_PAGE_PATH}"
            ),
            command_token=_env_optional("KIOSK_COMMAND_TOKEN"),
            allowed_origins=tuple(
                origin.strip()
                for origin in os.environ.get("KIOSK_ALLOWED_ORIGINS", "").split(",")
                if origin.strip()
            ),
        )
