"""Graded hidden/locked levels and their displayed access numbers."""
from __future__ import annotations

from typing import Dict, List, Sequence

__all__ = [
    "ACCESS_LEVELS",
    "LEVEL_RANGE",
    "MAX_LEVEL",
    "format_badges",
    "level_name",
    "resolve_level",
    "to_access_level",
]

MAX_LEVEL = 6
LEVEL_RANGE = range(1, MAX_LEVEL + 1)

# internal level -> access number shown to users
ACCESS_LEVELS: Dict[int, int] = {0: 0, 1: 6, 2: 9, 3: 10, 4: 11, 5: 12, 6: 13}


def resolve_level(tags: Sequence[str], keyword: str) -> int:
    """Return the lowest graded ``keyword`` level present in *tags*.

    ``hidden2`` beats ``hidden5`` regardless of order; a bare ``hidden`` only
    counts as level 1 when no graded tag matched. Keywords compare
    case-insensitively.
    """

    keyword = keyword.lower()
    present = {tag.lower() for tag in tags}
    for level in LEVEL_RANGE:
        if f"{keyword}{level}" in present:
            return level
    if keyword in present:
        return 1
    return 0


def to_access_level(level: int) -> int:
    try:
        return ACCESS_LEVELS[int(level)]
    except (KeyError, TypeError, ValueError):
        return 0


def level_name(level: int) -> str:
    """Human label used by access indicators, e.g. ``Level 10 Access``."""

    access = to_access_level(level)
    if access:
        return f"Level {access} Access"
    return f"Level {level} Access"


def format_badges(hidden_level: int, locked_level: int) -> List[str]:
    """Short ``H``/``L`` markers for listings; the top level shows a bare letter."""

    badges: List[str] = []
    for prefix, level in (("H", hidden_level), ("L", locked_level)):
        if level <= 0:
            continue
        if level == MAX_LEVEL:
            badges.append(prefix)
        else:
            badges.append(f"{prefix}{to_access_level(level)}")
    return badges
