"""
Runtime execution context.

Provides Runtime with live access to session-owned imperative resources
needed for command execution and side effects (render surface, status).

This module contains:
- Narrow Protocols (capabilities, not implementations)
- Zero orchestration logic
- Zero state mutation
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from session.connection_status import ConnectionStatus

if TYPE_CHECKING:
    from session.display_session import DisplaySession


# ---------------------------------------------------------------------
# Collaborator Protocols
# ---------------------------------------------------------------------

@runtime_checkable
class RenderSurfaceProtocol(Protocol):
    """
    Render surface capability consumed by the controller.

    Contract:
    - All calls are fire-and-forget; completion is reported later as
      LoadSucceeded / LoadFailed events, never as a return value.
    - Calls must not block on the navigation itself.
    """

    async def load(self, url: str) -> None: ...

    async def load_offline_page(self, url: str) -> None: ...

    async def show_diagnostics(self) -> None:
        """
        Toggle the developer inspection surface and release any
        exclusive full-screen lock.
        """


# ---------------------------------------------------------------------
# Runtime Execution Context
# ---------------------------------------------------------------------

class RuntimeExecutionContext:
    """
    Imperative execution context for Runtime.

    This object provides *live views* into session-owned resources
    so Runtime does not need to synchronize or cache anything.

    Runtime is allowed to:
    - Call the render surface
    - Observe connection state

    Runtime is NOT allowed to:
    - Mutate session state directly
    - Perform orchestration decisions
    """

    def __init__(self, session: DisplaySession) -> None:
        self.session = session

    # ----------------------------
    # Session metadata
    # ----------------------------

    @property
    def session_id(self) -> str:
        return self.session.session_id

    @property
    def connection_status(self) -> ConnectionStatus:
        return self.session.connection_status

    # ----------------------------
    # Collaborators
    # ----------------------------

    @property
    def render_surface(self) -> RenderSurfaceProtocol | None:
        return self.session.render_surface
