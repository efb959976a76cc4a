"""
Deployment environment enumeration.

Rules:
- This enum names environments only.
- Which environments are configured, and their rotation order,
  is owned by EndpointSet.
"""

from __future__ import annotations

from enum import Enum


class Environment(str, Enum):
    """Named deployment target with its own primary/backup endpoint pair."""

    PROD = "prod"
    TEST = "test"
