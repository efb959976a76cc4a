# pylint: disable=missing-module-docstring,missing-function-docstring

from dataclasses import replace
from typing import Any, Callable

import pytest

from config import AppConfig


PROD_URL = "https://a.example/app/"
PROD_BACKUP_URL = "https://b.example/app/"
TEST_URL = "https://test.example/app/"
OFFLINE_URL = "http://127.0.0.1:8765/offline"


def _base_config() -> AppConfig:
    return AppConfig(
        env="test",
        log_level="INFO",
        prod_url=PROD_URL,
        prod_backup_url=PROD_BACKUP_URL,
        test_url=TEST_URL,
        test_backup_url=None,
        default_environment="prod",
        host_identity="kiosk-01",
        dev_mode=False,
        fail_threshold=3,
        offline_recovery_interval_ms=30_000,
        backup_retry_delay_ms=5_000,
        http_host="127.0.0.1",
        http_port=8765,
        offline_url=OFFLINE_URL,
    )


@pytest.fixture
def make_config() -> Callable[..., AppConfig]:
    """Build an AppConfig without touching the process environment."""
    def _make(**overrides: Any) -> AppConfig:
        return replace(_base_config(), **overrides)

    return _make
