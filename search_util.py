"""Flattened file index and exact base-name search over a catalog tree."""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

from catalog.access import is_visible
from catalog.types import CatalogNode, FileEntry

LOGGER = logging.getLogger("tagcatalog.search")

CatalogLoader = Callable[[], Awaitable[Optional[CatalogNode]]]


@dataclass(frozen=True, slots=True)
class SearchIndexEntry:
    path: str
    name: str
    base_name: str
    parsed: FileEntry
    folder_hidden_level: int = 0

    @property
    def folder_parts(self) -> List[str]:
        return [part for part in self.path.split("/")[:-1] if part]

    def is_visible(self, special_access_level: int) -> bool:
        return is_visible(self.parsed.hidden_level, special_access_level) and is_visible(
            self.folder_hidden_level, special_access_level
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "path": self.path,
            "name": self.name,
            "baseName": self.base_name,
            "hiddenLevel": self.parsed.hidden_level,
            "lockedLevel": self.parsed.locked_level,
            "folderHiddenLevel": self.folder_hidden_level,
        }


def sanitize_query(raw: Optional[str]) -> str:
    """Trim and case-fold a query; blank input yields an empty string."""

    if raw is None:
        return ""
    return str(raw).strip().casefold()


def split_base_name(name: str) -> str:
    """Drop the final extension: ``notes.v2.txt`` -> ``notes.v2``."""

    stem, dot, _ = name.rpartition(".")
    if not dot or not stem:
        return name
    return stem


def flatten_catalog(root: CatalogNode) -> List[SearchIndexEntry]:
    """Pre-order walk: a folder's files come before its sub-folders.

    Paths are relative to *root*, so the root's own name never appears.
    """

    entries: List[SearchIndexEntry] = []

    def _walk(node: CatalogNode, prefix: str, folder_level: int) -> None:
        for entry in node.files:
            entries.append(
                SearchIndexEntry(
                    path=f"{prefix}{entry.name}",
                    name=entry.name,
                    base_name=split_base_name(entry.name),
                    parsed=entry,
                    folder_hidden_level=folder_level,
                )
            )
        for child in node.folders:
            _walk(child, f"{prefix}{child.name}/", max(folder_level, child.hidden_level))

    _walk(root, "", 0)
    return entries


def lookup(entries: Sequence[SearchIndexEntry], query: Optional[str]) -> List[SearchIndexEntry]:
    """Exact, case-insensitive match on base name (no substring or prefix)."""

    term = sanitize_query(query)
    if not term:
        return []
    return [entry for entry in entries if entry.base_name.casefold() == term]


class SearchIndex:
    """Lazily built flat index shared by every caller of one session.

    The first caller starts the build; concurrent callers await the same task.
    A failed or empty load leaves the index empty and lets a later call retry.
    """

    def __init__(self, loader: CatalogLoader) -> None:
        self._loader = loader
        self._entries: List[SearchIndexEntry] = []
        self._built = False
        self._generation = 0
        self._task: Optional[asyncio.Task[List[SearchIndexEntry]]] = None

    @property
    def built(self) -> bool:
        return self._built

    @property
    def entries(self) -> List[SearchIndexEntry]:
        return list(self._entries)

    def prewarm(self) -> Optional[asyncio.Task[List[SearchIndexEntry]]]:
        """Schedule the build in the background on the running loop."""

        if self._built:
            return None
        return self._ensure_task()

    def _ensure_task(self) -> asyncio.Task[List[SearchIndexEntry]]:
        task = self._task
        # a finished task that did not build (failed prewarm) is replaced
        if task is None or (task.done() and not self._built):
            task = asyncio.get_running_loop().create_task(self._build(self._generation))
            self._task = task
        return task

    async def ensure_built(self) -> List[SearchIndexEntry]:
        if self._built:
            return self._entries
        task = self._ensure_task()
        try:
            return await asyncio.shield(task)
        finally:
            if task.done() and self._task is task and not self._built:
                self._task = None

    async def _build(self, generation: int) -> List[SearchIndexEntry]:
        start = time.perf_counter()
        try:
            root = await self._loader()
        except Exception:
            LOGGER.exception("Search index build failed")
            return []
        if root is None:
            LOGGER.warning("No catalog available; search index is empty")
            return []
        entries = flatten_catalog(root)
        if generation != self._generation:
            LOGGER.debug("Dropping search index from generation %d (now %d)", generation, self._generation)
            return entries
        self._entries = entries
        self._built = True
        LOGGER.info(
            "Search index ready: %d files (%.1f ms)",
            len(entries),
            (time.perf_counter() - start) * 1000,
        )
        return entries

    def invalidate(self) -> None:
        """Forget the current index so the next search rebuilds it.

        A build still in flight finishes but its result is not kept.
        """

        self._generation += 1
        self._entries = []
        self._built = False
        self._task = None

    async def search(self, query: Optional[str]) -> List[SearchIndexEntry]:
        if not sanitize_query(query):
            return []
        entries = await self.ensure_built()
        return lookup(entries, query)


__all__ = [
    "SearchIndex",
    "SearchIndexEntry",
    "flatten_catalog",
    "lookup",
    "sanitize_query",
    "split_base_name",
]
