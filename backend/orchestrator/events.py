"""
Unified event definitions for the resilience reducer.

Rules:
- Events describe facts that have occurred.
- Events carry data only (no behavior).
- All reducer decisions are based on these events.
- No clocks, no timers, no async, no side effects.

Timer events carry the timer_id that produced them for stale gating.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


# =============================================================================
# Event Type Enumeration
# =============================================================================

class EventType(str, Enum):
    """
    Canonical event types understood by the reducer.

    Every (mode, event_type) pair must be explicitly handled
    or explicitly ignored by the reducer.
    """

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------
    SESSION_STARTED = "SESSION_STARTED"
    SESSION_ENDED = "SESSION_ENDED"
    START = "START"

    # ------------------------------------------------------------------
    # Render surface
    # ------------------------------------------------------------------
    LOAD_SUCCEEDED = "LOAD_SUCCEEDED"
    LOAD_FAILED = "LOAD_FAILED"

    # ------------------------------------------------------------------
    # Mode toggle (OS-level hotkeys)
    # ------------------------------------------------------------------
    TOGGLE_ENVIRONMENT = "TOGGLE_ENVIRONMENT"
    ENTER_DIAGNOSTIC_MODE = "ENTER_DIAGNOSTIC_MODE"

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------
    OFFLINE_RECOVERY_TICK = "OFFLINE_RECOVERY_TICK"
    BACKUP_RETRY_READY = "BACKUP_RETRY_READY"


# =============================================================================
# Base Event
# =============================================================================

@dataclass(frozen=True)
class Event:
    """
    Base event type.

    All events must specify:
    - event_type: discriminant
    - ts_ms: timestamp provided by the source (or fake in tests)
    """

    event_type: EventType
    ts_ms: int


# =============================================================================
# Session Events
# =============================================================================

@dataclass(frozen=True)
class SessionStarted(Event):
    """Display session attached."""
    session_id: str


@dataclass(frozen=True)
class SessionEnded(Event):
    """Display session detached; timers are released by the runtime."""
    session_id: str


@dataclass(frozen=True)
class Start(Event):
    """Load the currently resolved endpoint."""


# =============================================================================
# Render Surface Events
# =============================================================================

@dataclass(frozen=True)
class LoadSucceeded(Event):
    """Top-level document finished loading."""
    url: str


@dataclass(frozen=True)
class LoadFailed(Event):
    """
    A load failed on the render surface.

    error_code follows Chromium net error numbering (negative ints).
    is_main_frame is False when only a sub-resource failed.
    """
    error_code: int
    is_main_frame: bool
    url: str
    description: str = ""


# =============================================================================
# Mode Toggle Events
# =============================================================================

@dataclass(frozen=True)
class ToggleEnvironment(Event):
    """Operator requested the next deployment environment."""


@dataclass(frozen=True)
class EnterDiagnosticMode(Event):
    """Operator requested the developer inspection surface."""


# =============================================================================
# Timer Events
# =============================================================================

@dataclass(frozen=True)
class OfflineRecoveryTick(Event):
    """Offline recovery interval elapsed (repeats while offline)."""
    timer_id: str


@dataclass(frozen=True)
class BackupRetryReady(Event):
    """One-shot delay before retrying the primary elapsed."""
    timer_id: str
