"""Inline tag grammar for descriptor labels.

A label looks like ``name:tag1:tag2,tag3``. Everything before the first colon
is the display name; the remainder is split on ``:`` and, inside each
segment, on ``,``. Tags keep their order and duplicates are preserved.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from .levels import resolve_level
from .types import FileEntry, FolderEntry

__all__ = [
    "FILE_FIELDS",
    "FOLDER_FIELDS",
    "THEME_NAMES",
    "RawEntry",
    "match_theme",
    "parse_file",
    "parse_folder",
    "parse_label",
    "parse_tags",
]

THEME_NAMES = frozenset(
    {"red", "red2", "red3", "orange", "yellow", "green", "cyan", "blue", "purple", "pink", "white"}
)

FOLDER_FIELDS: Tuple[str, ...] = ("label", "name")
FILE_FIELDS: Tuple[str, ...] = ("name", "label")


@dataclass(frozen=True, slots=True)
class RawEntry:
    """A descriptor item reduced to its label text."""

    text: str

    @classmethod
    def coerce(cls, value: Any, prefer: Sequence[str] = FILE_FIELDS) -> "RawEntry":
        if isinstance(value, RawEntry):
            return value
        if isinstance(value, str):
            return cls(value)
        if isinstance(value, Mapping):
            for key in prefer:
                candidate = value.get(key)
                if isinstance(candidate, str) and candidate:
                    return cls(candidate)
        return cls("")


def parse_tags(segment: Optional[str]) -> List[str]:
    tags: List[str] = []
    if not segment:
        return tags
    for part in segment.split(":"):
        part = part.strip()
        if not part:
            continue
        if "," in part:
            tags.extend(piece.strip() for piece in part.split(",") if piece.strip())
        else:
            tags.append(part)
    return tags


def parse_label(entry: Any, prefer: Sequence[str] = FILE_FIELDS) -> Tuple[str, List[str]]:
    """Return ``(name, tags)`` for a raw descriptor entry."""

    text = RawEntry.coerce(entry, prefer).text
    name, sep, segment = text.partition(":")
    if not sep:
        return text.strip(), []
    return name.strip(), parse_tags(segment)


def match_theme(tags: Sequence[str]) -> Optional[str]:
    for tag in tags:
        lowered = tag.lower()
        if lowered in THEME_NAMES:
            return lowered
    return None


def parse_folder(entry: Any) -> FolderEntry:
    raw = RawEntry.coerce(entry, FOLDER_FIELDS)
    name, tags = parse_label(raw)
    return FolderEntry(
        name=name,
        theme=match_theme(tags),
        hidden_level=resolve_level(tags, "hidden"),
        raw_label=raw.text,
    )


def parse_file(entry: Any) -> FileEntry:
    raw = RawEntry.coerce(entry, FILE_FIELDS)
    name, tags = parse_label(raw)
    return FileEntry(
        name=name,
        hidden_level=resolve_level(tags, "hidden"),
        locked_level=resolve_level(tags, "locked"),
        raw_label=raw.text,
    )
