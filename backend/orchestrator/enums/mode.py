"""
Controller mode enumeration.

Rules:
- This enum defines ONLY the controller modes.
- No behavior, no helper methods, no side effects.
- Transitions are defined exclusively in the reducer.
"""

from __future__ import annotations

from enum import Enum


class Mode(str, Enum):
    """
    What the display is doing with respect to its endpoints.

    LOADING:
        A load of the live endpoint was issued; no outcome yet.

    LOADED:
        The last top-level load of a live endpoint succeeded.

    RETRYING:
        A real failure occurred below the offline threshold; the
        controller is failing over between primary and backup.

    OFFLINE:
        The offline page is shown and exactly one recovery interval
        is running against the live endpoint.
    """

    LOADING = "LOADING"
    LOADED = "LOADED"
    RETRYING = "RETRYING"
    OFFLINE = "OFFLINE"
