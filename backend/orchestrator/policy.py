"""
Resilience policy (v1).

Purpose:
- Bundle the configuration constants the reducer decides with
- Keep reducer pure: policy is an input, never read from the environment

This module contains NO timers, NO async, NO side effects.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from constants import (
    BACKUP_RETRY_DELAY_MS,
    FAIL_THRESHOLD,
    OFFLINE_PAGE_PATH,
    OFFLINE_RECOVERY_INTERVAL_MS,
)

if TYPE_CHECKING:
    from config import AppConfig


@dataclass(frozen=True)
class ResiliencePolicy:
    """
    Immutable failover/offline policy.

    Semantics:
    - fail_threshold consecutive real failures switch to the offline page.
    - offline_recovery_interval_ms is the period of the recovery interval.
    - backup_retry_delay_ms delays the primary retry after a backup failure.
    - offline_url identifies the offline document by prefix; successful
      loads under it never count as endpoint recoveries.
    """
    fail_threshold: int = FAIL_THRESHOLD
    offline_recovery_interval_ms: int = OFFLINE_RECOVERY_INTERVAL_MS
    backup_retry_delay_ms: int = BACKUP_RETRY_DELAY_MS
    offline_url: str = OFFLINE_PAGE_PATH

    @staticmethod
    def from_config(config: AppConfig) -> ResiliencePolicy:
        return ResiliencePolicy(
            fail_threshold=max(1, config.fail_threshold),
            offline_recovery_interval_ms=config.offline_recovery_interval_ms,
            backup_retry_delay_ms=config.backup_retry_delay_ms,
            offline_url=config.offline_url,
        )


def is_offline_url(policy: ResiliencePolicy, url: str) -> bool:
    """Recognize the offline document (and its fragments/queries) by prefix."""
    return url.startswith(policy.offline_url)


def threshold_reached(policy: ResiliencePolicy, consecutive_failures: int) -> bool:
    return consecutive_failures >= policy.fail_threshold
