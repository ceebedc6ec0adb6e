"""Session state for the catalog navigator."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from catalog.types import FileEntry, FolderEntry
from search_util import SearchIndexEntry

DEFAULT_THEME = "green"


class Mode(str, Enum):
    MENU = "menu"
    SEARCH = "search"
    FILE_VIEW = "file_view"


class ItemKind(str, Enum):
    RETURN = "return"
    FOLDER = "folder"
    SEARCH = "search"
    FILE = "file"
    RESULT = "result"


class ViewKind(str, Enum):
    FOLDERS = "folders"
    FILES = "files"
    SEARCH_RESULTS = "search_results"
    EMPTY = "empty"


def path_key(parts: List[str]) -> str:
    return "/".join(parts)


@dataclass(slots=True)
class MenuItem:
    label: str
    kind: ItemKind
    hidden_level: int = 0
    locked_level: int = 0
    badges: List[str] = field(default_factory=list)
    locked: bool = False
    folder: Optional[FolderEntry] = None
    file: Optional[FileEntry] = None
    result: Optional[SearchIndexEntry] = None


@dataclass(slots=True)
class MenuView:
    kind: ViewKind
    path: List[str]
    items: List[MenuItem]
    selected_index: int
    theme: str
    special_access_level: int = 0

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def selected(self) -> Optional[MenuItem]:
        if 0 <= self.selected_index < len(self.items):
            return self.items[self.selected_index]
        return None


@dataclass(slots=True)
class FileViewState:
    parts: List[str]
    entry: FileEntry
    return_mode: Mode


@dataclass(slots=True)
class NavigatorState:
    """Everything the navigator mutates. Only navigator commands write to it."""

    path_stack: List[str] = field(default_factory=list)
    selected_index: int = 0
    mode: Mode = Mode.MENU
    special_access_level: int = 0
    search_results: List[SearchIndexEntry] = field(default_factory=list)
    history: Dict[str, int] = field(default_factory=dict)
    theme: str = DEFAULT_THEME
    file_view: Optional[FileViewState] = None

    @property
    def current_key(self) -> str:
        return path_key(self.path_stack)

    @property
    def menu_mode(self) -> Mode:
        """The list mode shown behind an open file (or the current mode)."""

        if self.mode is Mode.FILE_VIEW and self.file_view is not None:
            return self.file_view.return_mode
        return self.mode

    def reset(self, theme: str = DEFAULT_THEME) -> None:
        """Back to the root menu; history and access level survive."""

        self.path_stack.clear()
        self.selected_index = 0
        self.mode = Mode.MENU
        self.search_results = []
        self.file_view = None
        self.theme = theme


__all__ = [
    "DEFAULT_THEME",
    "FileViewState",
    "ItemKind",
    "MenuItem",
    "MenuView",
    "Mode",
    "NavigatorState",
    "ViewKind",
    "path_key",
]
