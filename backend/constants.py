"""
BEHAVIOR-AS-CONSTANTS
---------------------
Single source of truth for the controller's behavioral defaults.

Rules:
- If changing a value changes runtime behavior, it belongs here.
- No magic numbers elsewhere in the codebase.
- Deployment overrides go through config.AppConfig, never through
  mutation of these values.
"""

from __future__ import annotations

from typing import Final

# =============================================================================
# Failover / offline policy
# =============================================================================

# Consecutive real failures before the offline page is shown.
FAIL_THRESHOLD: Final[int] = 3

# Period of the offline recovery interval (repeats until a load succeeds).
OFFLINE_RECOVERY_INTERVAL_MS: Final[int] = 30_000

# One-shot delay before the primary is retried after the backup failed.
BACKUP_RETRY_DELAY_MS: Final[int] = 5_000

# =============================================================================
# Failure classification
# =============================================================================

# Chromium net::ERR_ABORTED: a new navigation superseded the pending one.
ERR_ABORTED: Final[int] = -3

NAVIGATION_ABORTED_CODES: Final[frozenset[int]] = frozenset({ERR_ABORTED})

# =============================================================================
# Endpoints
# =============================================================================

DEFAULT_APP_URL: Final[str] = "https://10.0.0.10/app/vocs/"
DEFAULT_ENVIRONMENT: Final[str] = "prod"

# Query parameter carrying the kiosk's host identity on outgoing URLs.
HOST_IDENTITY_PARAM: Final[str] = "host"

# =============================================================================
# Host surface
# =============================================================================

DEFAULT_HTTP_HOST: Final[str] = "127.0.0.1"
DEFAULT_HTTP_PORT: Final[int] = 8765
OFFLINE_PAGE_PATH: Final[str] = "/offline"

# Only microphone access is ever granted to the rendered origin.
GRANTED_PERMISSIONS: Final[frozenset[str]] = frozenset({"media"})
