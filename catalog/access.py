"""Visibility and lock gating against the session's special access level.

Locking is a presentation gate only; nothing here protects content.
"""
from __future__ import annotations

from typing import Optional

from .levels import LEVEL_RANGE

__all__ = ["ACCESS_CODE_PREFIX", "is_unlocked", "is_visible", "parse_access_code"]

ACCESS_CODE_PREFIX = "code"


def is_visible(hidden_level: int, special_access_level: int) -> bool:
    return hidden_level == 0 or hidden_level <= special_access_level


def is_unlocked(locked_level: int, special_access_level: int) -> bool:
    return locked_level == 0 or locked_level <= special_access_level


def parse_access_code(text: Optional[str]) -> Optional[int]:
    """Map a code phrase such as ``code3`` to its level, or None."""

    code = (text or "").strip().lower()
    for level in LEVEL_RANGE:
        if code == f"{ACCESS_CODE_PREFIX}{level}":
            return level
    return None
