"""
Load failure classification.

Purpose:
- Decide whether a reported load failure may drive failover
- Keep the reducer free of error-code knowledge

This module contains NO timers, NO async, NO side effects.
"""
from __future__ import annotations

from enum import Enum

from constants import NAVIGATION_ABORTED_CODES


class Classification(str, Enum):
    """
    Failure classification used by the resilience reducer.

    IGNORABLE:
        A sub-resource failed (not the document itself), or the
        navigation was aborted because a newer one superseded it.
        Discarded without touching session state.

    REAL:
        Connectivity, DNS, TLS or HTTP failure of the main document.
        Counted toward failover and the offline threshold.

    Notes:
    - Rapid successive loads (e.g. toggling environments) abort the
      previous navigation; classifying those as REAL would trigger
      false failovers.
    """

    IGNORABLE = "ignorable"
    REAL = "real"


def is_navigation_aborted(error_code: int) -> bool:
    return error_code in NAVIGATION_ABORTED_CODES


def classify(error_code: int, is_main_frame: bool) -> Classification:
    """Classify a single load failure reported by the render surface."""
    if not is_main_frame:
        return Classification.IGNORABLE

    if is_navigation_aborted(error_code):
        return Classification.IGNORABLE

    return Classification.REAL
