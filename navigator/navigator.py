"""Stateful traversal over the catalog: menus, search results and file view."""
from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from functools import partial
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence

from catalog.access import is_unlocked, is_visible, parse_access_code
from catalog.errors import NavigationError
from catalog.levels import format_badges, level_name
from catalog.types import FileEntry, FolderEntry
from core.paths import get_db_root, get_manifest_path
from search_util import SearchIndex

from .sources import KIND_FILES, KIND_FOLDERS, DescriptorSource, FilesystemSource, HttpSource, ManifestSource, resolve_catalog
from .state import DEFAULT_THEME, FileViewState, ItemKind, MenuItem, MenuView, Mode, NavigatorState, ViewKind
from .viewer import FileContent, load_file_content

LOGGER = logging.getLogger("tagcatalog.navigator")

RETURN_LABEL = "RETURN"
SEARCH_LABEL = "SEARCH"
HIDDEN_THEME = "purple"


class SelectOutcome(str, Enum):
    NONE = "none"
    RETURN = "return"
    DESCEND = "descend"
    OPEN_FILE = "open_file"
    CLOSE_FILE = "close_file"
    PROMPT_SEARCH = "prompt_search"
    EXIT_SEARCH = "exit_search"


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def source_from_settings(settings: Mapping[str, Any], working_dir: Path) -> DescriptorSource:
    nav = settings.get("navigator") if isinstance(settings.get("navigator"), Mapping) else {}
    kind = str(nav.get("source") or "filesystem").lower()
    root = get_db_root(working_dir, settings)
    manifest_path = get_manifest_path(working_dir, settings)
    if kind == "http":
        base_url = nav.get("base_url")
        if not base_url:
            raise ValueError("navigator.base_url is required for the http source")
        return HttpSource(
            str(base_url),
            root_prefix=root.name,
            manifest_name=manifest_path.name,
            timeout=float(nav.get("timeout_s") or 10),
        )
    filesystem = FilesystemSource(root, manifest_path)
    if kind == "manifest":
        if manifest_path.is_file():
            return ManifestSource.from_file(manifest_path, content=filesystem)
        LOGGER.warning("Manifest %s not found; reading descriptors from disk", manifest_path)
    return filesystem


class Navigator:
    """Command handlers over :class:`NavigatorState`.

    Commands that need data await the source. Every state change bumps an
    epoch; a view computed across a change is thrown away and recomputed, so
    a late descriptor can never paint over newer state.
    """

    def __init__(
        self,
        source: DescriptorSource,
        *,
        index: Optional[SearchIndex] = None,
        state: Optional[NavigatorState] = None,
        default_theme: str = DEFAULT_THEME,
        hidden_theme: str = HIDDEN_THEME,
        prewarm_index: bool = True,
    ) -> None:
        self.source = source
        self.index = index or SearchIndex(partial(resolve_catalog, source))
        self.default_theme = default_theme
        self.hidden_theme = hidden_theme
        self.prewarm_index = prewarm_index
        self.state = state or NavigatorState(theme=default_theme)
        self._epoch = 0

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any], working_dir: Path) -> "Navigator":
        nav = settings.get("navigator") if isinstance(settings.get("navigator"), Mapping) else {}
        return cls(
            source_from_settings(settings, working_dir),
            default_theme=str(nav.get("default_theme") or DEFAULT_THEME),
            hidden_theme=str(nav.get("hidden_theme") or HIDDEN_THEME),
            prewarm_index=bool(nav.get("prewarm_index", True)),
        )

    # ------------------------------------------------------------------
    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def access_indicator(self) -> Optional[str]:
        level = self.state.special_access_level
        return level_name(level) if level > 0 else None

    def _touch(self) -> None:
        self._epoch += 1

    async def start(self) -> MenuView:
        """Render the initial menu, pre-warming the search index unless disabled."""

        if self.prewarm_index:
            self.index.prewarm()
        return await self.refresh()

    # ------------------------------------------------------------------
    def _folder_item(self, entry: FolderEntry) -> MenuItem:
        return MenuItem(
            label=f"{entry.name}/",
            kind=ItemKind.FOLDER,
            hidden_level=entry.hidden_level,
            badges=format_badges(entry.hidden_level, 0),
            folder=entry,
        )

    def _file_item(self, entry: FileEntry, kind: ItemKind = ItemKind.FILE) -> MenuItem:
        level = self.state.special_access_level
        return MenuItem(
            label=entry.name,
            kind=kind,
            hidden_level=entry.hidden_level,
            locked_level=entry.locked_level,
            badges=format_badges(entry.hidden_level, entry.locked_level),
            locked=not is_unlocked(entry.locked_level, level),
            file=entry,
        )

    def _search_items(self) -> List[MenuItem]:
        level = self.state.special_access_level
        items = [MenuItem(label=RETURN_LABEL, kind=ItemKind.RETURN)]
        for result in self.state.search_results:
            if not result.is_visible(level):
                continue
            item = self._file_item(result.parsed, ItemKind.RESULT)
            item.result = result
            items.append(item)
        return items

    async def _compute_view(self) -> MenuView:
        state = self.state
        path = list(state.path_stack)
        level = state.special_access_level
        if state.menu_mode is Mode.SEARCH:
            return MenuView(ViewKind.SEARCH_RESULTS, path, self._search_items(), state.selected_index, state.theme, level)

        descriptor = await self.source.load_descriptor(path)
        items: List[MenuItem] = []
        if descriptor.kind == KIND_FOLDERS:
            if path:
                items.append(MenuItem(label=RETURN_LABEL, kind=ItemKind.RETURN))
            items.extend(self._folder_item(entry) for entry in descriptor.folders if is_visible(entry.hidden_level, level))
            if not path:
                items.append(MenuItem(label=SEARCH_LABEL, kind=ItemKind.SEARCH))
            kind = ViewKind.FOLDERS
        elif descriptor.kind == KIND_FILES:
            items.extend(self._file_item(entry) for entry in descriptor.files if is_visible(entry.hidden_level, level))
            kind = ViewKind.FILES
        else:
            kind = ViewKind.EMPTY
        return MenuView(kind, path, items, state.selected_index, state.theme, level)

    async def refresh(self) -> MenuView:
        """Compute the list for the current state, discarding stale results."""

        while True:
            epoch = self._epoch
            view = await self._compute_view()
            if epoch == self._epoch:
                break
            LOGGER.debug("Discarding stale view for epoch %d (now %d)", epoch, self._epoch)
        upper = max(0, view.item_count - 1)
        if self.state.selected_index > upper:
            self.state.selected_index = upper
        return replace(view, selected_index=self.state.selected_index)

    # ------------------------------------------------------------------
    async def move(self, delta: int) -> MenuView:
        """Shift the selection by *delta*, clamped into the visible list."""

        view = await self.refresh()
        if self.state.mode is Mode.FILE_VIEW:
            return view
        target = _clamp(self.state.selected_index + delta, 0, max(0, view.item_count - 1))
        if target != self.state.selected_index:
            self.state.selected_index = target
            self._touch()
        return replace(view, selected_index=self.state.selected_index)

    async def select(self) -> SelectOutcome:
        if self.state.mode is Mode.FILE_VIEW:
            return SelectOutcome.NONE
        view = await self.refresh()
        item = view.selected
        if item is None:
            return SelectOutcome.NONE
        if item.kind is ItemKind.RETURN:
            if self.state.mode is Mode.SEARCH:
                self._exit_search()
                return SelectOutcome.EXIT_SEARCH
            self._ascend()
            return SelectOutcome.RETURN
        if item.kind is ItemKind.FOLDER and item.folder is not None:
            self._descend(item.folder)
            return SelectOutcome.DESCEND
        if item.kind is ItemKind.SEARCH:
            self.index.prewarm()
            return SelectOutcome.PROMPT_SEARCH
        if item.kind is ItemKind.FILE and item.file is not None:
            self.open_file(view.path, item.file)
            return SelectOutcome.OPEN_FILE
        if item.kind is ItemKind.RESULT and item.result is not None:
            self.open_file(item.result.folder_parts, item.result.parsed)
            return SelectOutcome.OPEN_FILE
        return SelectOutcome.NONE

    async def back(self) -> SelectOutcome:
        if self.state.mode is Mode.FILE_VIEW:
            self.close_file()
            return SelectOutcome.CLOSE_FILE
        if self.state.mode is Mode.SEARCH:
            self._exit_search()
            return SelectOutcome.EXIT_SEARCH
        if self._ascend():
            return SelectOutcome.RETURN
        return SelectOutcome.NONE

    def _descend(self, entry: FolderEntry) -> None:
        state = self.state
        state.history[state.current_key] = state.selected_index
        state.path_stack.append(entry.name)
        state.selected_index = state.history.get(state.current_key, 0)
        if entry.hidden_level > 0:
            state.theme = self.hidden_theme
        else:
            state.theme = entry.theme or self.default_theme
        self._touch()
        LOGGER.debug("Descended into %s", state.current_key)

    def _ascend(self) -> bool:
        state = self.state
        if not state.path_stack:
            return False
        state.history[state.current_key] = state.selected_index
        state.path_stack.pop()
        state.selected_index = state.history.get(state.current_key, 0)
        state.theme = self.default_theme
        self._touch()
        return True

    # ------------------------------------------------------------------
    async def search(self, query: str) -> MenuView:
        """Run an exact base-name search from the root menu."""

        state = self.state
        if state.mode is not Mode.MENU or state.path_stack:
            raise NavigationError("search is only available from the root menu")
        epoch = self._epoch
        results = await self.index.search(query)
        if epoch != self._epoch:
            LOGGER.debug("Discarding search results for %r: state changed", query)
            return await self.refresh()
        state.search_results = list(results)
        state.mode = Mode.SEARCH
        state.selected_index = 0
        self._touch()
        LOGGER.info("Search %r matched %d files", query, len(results))
        return await self.refresh()

    def _exit_search(self) -> None:
        self.state.reset(self.default_theme)
        self._touch()

    # ------------------------------------------------------------------
    def open_file(self, parts: Sequence[str], entry: FileEntry) -> None:
        state = self.state
        if state.mode is Mode.FILE_VIEW:
            raise NavigationError("a file is already open")
        state.file_view = FileViewState(parts=list(parts), entry=entry, return_mode=state.mode)
        state.mode = Mode.FILE_VIEW
        self._touch()

    def close_file(self) -> bool:
        state = self.state
        if state.mode is not Mode.FILE_VIEW or state.file_view is None:
            return False
        state.mode = state.file_view.return_mode
        state.file_view = None
        self._touch()
        return True

    async def load_file_content(self) -> Optional[FileContent]:
        """Content for the open file, or None if the viewer moved on meanwhile."""

        view = self.state.file_view
        if view is None:
            return None
        epoch = self._epoch
        content = await load_file_content(self.source, view.parts, view.entry, self.state.special_access_level)
        if epoch != self._epoch:
            LOGGER.debug("Discarding file content for %s: state changed", content.path)
            return None
        return content

    # ------------------------------------------------------------------
    def submit_code(self, text: str) -> bool:
        level = parse_access_code(text)
        if level is None:
            LOGGER.info("Rejected access code")
            return False
        self.state.special_access_level = level
        self._touch()
        LOGGER.info("Special access set to %s", level_name(level))
        return True

    def clear_access(self) -> None:
        if self.state.special_access_level == 0:
            return
        self.state.special_access_level = 0
        self._touch()
        LOGGER.info("Special access cleared")

    def toggle_access(self) -> bool:
        """Clear an active level; return True when a code prompt should open instead."""

        if self.state.special_access_level > 0:
            self.clear_access()
            return False
        return True

    def reset(self) -> None:
        self.state.reset(self.default_theme)
        self._touch()


__all__ = ["Navigator", "SelectOutcome", "source_from_settings"]
