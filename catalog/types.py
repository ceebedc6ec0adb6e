"""Common dataclasses shared across catalog modules."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .levels import MAX_LEVEL

TRACKED_EXTENSIONS: Tuple[str, ...] = ("txt", "md", "png", "mp3")


@dataclass(frozen=True, slots=True)
class FolderEntry:
    """A parsed ``folders.json`` item."""

    name: str
    theme: Optional[str] = None
    hidden_level: int = 0
    raw_label: str = ""


@dataclass(frozen=True, slots=True)
class FileEntry:
    """A parsed ``files.json`` item. Files never carry a theme."""

    name: str
    hidden_level: int = 0
    locked_level: int = 0
    raw_label: str = ""

    @property
    def extension(self) -> str:
        if "." not in self.name:
            return ""
        return self.name.rsplit(".", 1)[-1].lower()


@dataclass(slots=True)
class CatalogNode:
    """One folder of the catalog tree, owning its children."""

    name: str
    theme: Optional[str] = None
    hidden_level: int = 0
    folders: List["CatalogNode"] = field(default_factory=list)
    files: List[FileEntry] = field(default_factory=list)
    raw_label: Optional[str] = None

    @classmethod
    def from_entry(cls, entry: FolderEntry) -> "CatalogNode":
        return cls(name=entry.name, theme=entry.theme, hidden_level=entry.hidden_level, raw_label=entry.raw_label)

    def entry(self) -> FolderEntry:
        return FolderEntry(
            name=self.name,
            theme=self.theme,
            hidden_level=self.hidden_level,
            raw_label=self.raw_label or self.name,
        )

    def child(self, name: str) -> Optional["CatalogNode"]:
        for folder in self.folders:
            if folder.name == name:
                return folder
        return None

    def find(self, parts: Iterable[str]) -> Optional["CatalogNode"]:
        node: Optional[CatalogNode] = self
        for part in parts:
            if node is None:
                return None
            node = node.child(part)
        return node


@dataclass(slots=True)
class LevelHistogram:
    total: int = 0
    levels: List[int] = field(default_factory=lambda: [0] * (MAX_LEVEL + 1))

    def add(self, level: int) -> None:
        if level <= 0:
            return
        self.total += 1
        self.levels[level] += 1

    def merge(self, other: "LevelHistogram") -> None:
        self.total += other.total
        for index, count in enumerate(other.levels):
            self.levels[index] += count

    def to_dict(self) -> Dict[str, object]:
        return {"total": self.total, "levels": list(self.levels)}


@dataclass(slots=True)
class BuildStats:
    """Running totals for one manifest build."""

    total_folders: int = 0
    total_files: int = 0
    file_types: Dict[str, int] = field(default_factory=lambda: {ext: 0 for ext in TRACKED_EXTENSIONS})
    hidden_folders: LevelHistogram = field(default_factory=LevelHistogram)
    hidden_files: LevelHistogram = field(default_factory=LevelHistogram)
    locked_files: LevelHistogram = field(default_factory=LevelHistogram)

    def record_file(self, entry: FileEntry) -> None:
        self.total_files += 1
        ext = entry.extension
        if ext in self.file_types:
            self.file_types[ext] += 1
        self.hidden_files.add(entry.hidden_level)
        self.locked_files.add(entry.locked_level)

    def merge(self, other: "BuildStats") -> None:
        self.total_folders += other.total_folders
        self.total_files += other.total_files
        for ext, count in other.file_types.items():
            if ext in self.file_types:
                self.file_types[ext] += count
        self.hidden_folders.merge(other.hidden_folders)
        self.hidden_files.merge(other.hidden_files)
        self.locked_files.merge(other.locked_files)

    def to_dict(self) -> Dict[str, object]:
        return {
            "totalFolders": self.total_folders,
            "totalFiles": self.total_files,
            "fileTypes": dict(self.file_types),
            "hiddenFolders": self.hidden_folders.to_dict(),
            "hiddenFiles": self.hidden_files.to_dict(),
            "lockedFiles": self.locked_files.to_dict(),
        }


__all__ = [
    "BuildStats",
    "CatalogNode",
    "FileEntry",
    "FolderEntry",
    "LevelHistogram",
    "TRACKED_EXTENSIONS",
]
