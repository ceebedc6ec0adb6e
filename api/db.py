"""Read-only access layer over the content root for the catalog API."""
from __future__ import annotations

from functools import partial
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from catalog.access import is_unlocked, is_visible
from catalog.levels import format_badges
from catalog.types import CatalogNode
from core.paths import get_db_root, get_manifest_path, resolve_working_dir
from core.settings import load_settings
from navigator.sources import FilesystemSource, resolve_catalog
from search_util import SearchIndex

MAX_ACCESS_LEVEL = 6


def clamp_access(value: Optional[int]) -> int:
    try:
        level = int(value or 0)
    except (TypeError, ValueError):
        return 0
    return max(0, min(MAX_ACCESS_LEVEL, level))


class CatalogAccess:
    """Central access layer for descriptors, the manifest and search."""

    def __init__(
        self,
        *,
        working_dir: Optional[Path] = None,
        settings: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.working_dir = Path(working_dir or resolve_working_dir())
        settings = dict(settings or load_settings(self.working_dir))
        self.root = get_db_root(self.working_dir, settings)
        self.manifest_path = get_manifest_path(self.working_dir, settings)
        self.source = FilesystemSource(self.root, self.manifest_path)
        self.index = SearchIndex(partial(resolve_catalog, self.source))
        self._manifest_mtime = self._current_mtime()

    def _current_mtime(self) -> Optional[float]:
        try:
            return self.manifest_path.stat().st_mtime
        except OSError:
            return None

    def _check_manifest(self) -> None:
        """Drop the search index once the manifest has been rebuilt."""

        mtime = self._current_mtime()
        if mtime != self._manifest_mtime:
            self._manifest_mtime = mtime
            self.index.invalidate()

    # ------------------------------------------------------------------
    async def descriptor(self, parts: Sequence[str], access: int) -> Dict[str, Any]:
        descriptor = await self.source.load_descriptor(parts)
        folders = [
            {
                "name": entry.name,
                "theme": entry.theme,
                "hidden_level": entry.hidden_level,
                "badges": format_badges(entry.hidden_level, 0),
            }
            for entry in descriptor.folders
            if is_visible(entry.hidden_level, access)
        ]
        files = [
            {
                "name": entry.name,
                "hidden_level": entry.hidden_level,
                "locked_level": entry.locked_level,
                "locked": not is_unlocked(entry.locked_level, access),
                "badges": format_badges(entry.hidden_level, entry.locked_level),
            }
            for entry in descriptor.files
            if is_visible(entry.hidden_level, access)
        ]
        return {
            "path": "/".join(parts),
            "kind": descriptor.kind,
            "access": access,
            "folders": folders,
            "files": files,
        }

    async def catalog(self) -> Optional[CatalogNode]:
        return await resolve_catalog(self.source)

    async def search(self, query: str, access: int) -> List[Dict[str, Any]]:
        self._check_manifest()
        hits = await self.index.search(query)
        return [
            {
                "path": hit.path,
                "name": hit.name,
                "base_name": hit.base_name,
                "hidden_level": hit.parsed.hidden_level,
                "locked_level": hit.parsed.locked_level,
                "locked": not is_unlocked(hit.parsed.locked_level, access),
            }
            for hit in hits
            if hit.is_visible(access)
        ]


__all__ = ["CatalogAccess", "clamp_access"]
