"""
Authoritative controller state container.

Rules:
- This dataclass is a pure data model.
- It contains ALL state the reducer may ever need.
- No behavior, no helpers, no derived logic.
"""
from __future__ import annotations

from dataclasses import dataclass

from orchestrator.enums.environment import Environment
from orchestrator.enums.mode import Mode


@dataclass(frozen=True)
class SessionState:
    """Immutable snapshot of all controller-owned state."""

    # ------------------------------------------------------------------
    # Endpoint selection
    # ------------------------------------------------------------------
    active_environment: Environment = Environment.PROD

    # Only meaningful while mode is not OFFLINE
    using_backup: bool = False

    # ------------------------------------------------------------------
    # Failure accounting
    # ------------------------------------------------------------------
    # Reset to 0 only by a successful top-level load of a live endpoint.
    consecutive_failures: int = 0

    # ------------------------------------------------------------------
    # Control mode
    # ------------------------------------------------------------------
    mode: Mode = Mode.LOADING

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------
    # Id of the single outstanding timer handle held by the runtime.
    # mode is OFFLINE iff this is the offline recovery interval.
    pending_timer: str | None = None

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------
    # Last URL the render surface was asked to load (offline page included)
    current_url: str | None = None
