"""Endpoint role enumeration."""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Position of an endpoint within its environment's pair."""

    PRIMARY = "PRIMARY"
    BACKUP = "BACKUP"
