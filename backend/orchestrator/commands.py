"""
Side effects requested by the resilience reducer.

Rules:
- A command names an effect (navigate, show offline page, arm a timer,
  write a log line); the runtime performs it.
- Commands never carry behavior, clocks or IO handles.
- Every concrete command is a frozen dataclass value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from orchestrator.events import EventType

# =============================================================================
# Command Type Enumeration
# =============================================================================

class CommandType(str, Enum):
    """
    Discriminants for every command the reducer can emit.

    Values appear verbatim in runtime logs (e.g. LOAD_URL_EXECUTED).
    """

    # Render surface
    LOAD_URL = "LOAD_URL"
    LOAD_OFFLINE_PAGE = "LOAD_OFFLINE_PAGE"
    SHOW_DIAGNOSTICS = "SHOW_DIAGNOSTICS"

    # Timers
    START_TIMER = "START_TIMER"
    CANCEL_TIMER = "CANCEL_TIMER"

    # Observability
    LOG_EVENT = "LOG_EVENT"


# =============================================================================
# Base Command
# =============================================================================

class Command:
    """
    Common base of all reducer commands.

    command_type is the stable name used in logs.
    """

    command_type: CommandType


# =============================================================================
# Render Surface Commands
# =============================================================================

@dataclass(frozen=True)
class LoadUrl(Command):
    """Ask the render surface to navigate to url (fire-and-forget)."""
    url: str
    command_type: CommandType = CommandType.LOAD_URL


@dataclass(frozen=True)
class LoadOfflinePage(Command):
    """Ask the render surface to show the local offline document."""
    url: str
    command_type: CommandType = CommandType.LOAD_OFFLINE_PAGE


@dataclass(frozen=True)
class ShowDiagnostics(Command):
    """Expose developer inspection and release the kiosk lock."""
    command_type: CommandType = CommandType.SHOW_DIAGNOSTICS


# =============================================================================
# Timer Commands
# =============================================================================

@dataclass(frozen=True)
class StartTimer(Command):
    """
    Arm the named timer, replacing any task with the same id.

    When it elapses the runtime feeds timeout_event_type back in as an event.
    A repeating timer keeps injecting every duration_ms until cancelled.
    """
    timer_id: str
    duration_ms: int
    timeout_event_type: EventType
    repeat: bool = False
    command_type: CommandType = CommandType.START_TIMER


@dataclass(frozen=True)
class CancelTimer(Command):
    """Disarm a timer; unknown ids are a no-op."""
    timer_id: str
    command_type: CommandType = CommandType.CANCEL_TIMER


# =============================================================================
# Observability Commands
# =============================================================================

@dataclass(frozen=True)
class LogEvent(Command):
    """Write one JSONL line (runtime adds session context)."""
    event: dict[str, Any]
    command_type: CommandType = CommandType.LOG_EVENT
