"""
Host trust and permission policy.

Answers the display client's certificate-error and permission prompts.
Pure functions; no state, no IO.
"""

from __future__ import annotations

from orchestrator.endpoints import EndpointSet

from constants import GRANTED_PERMISSIONS


def certificate_trusted(url: str, endpoints: EndpointSet, dev_mode: bool) -> bool:
    """
    Decide whether a certificate error for url may be bypassed.

    In dev mode every certificate error is bypassed. Otherwise only URLs
    under a configured endpoint are trusted; every other origin must fail
    validation normally.
    """
    if dev_mode:
        return True
    return endpoints.matches_prefix(url)


def permission_granted(permission: str) -> bool:
    """Media (microphone) is granted unconditionally; everything else is denied."""
    return permission in GRANTED_PERMISSIONS
