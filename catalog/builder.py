"""Build the nested catalog from per-folder ``folders.json``/``files.json``."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .errors import BuildPreconditionError
from .exporter import write_manifest
from .tags import parse_file, parse_folder
from .types import TRACKED_EXTENSIONS, BuildStats, CatalogNode, FolderEntry

LOGGER = logging.getLogger("tagcatalog.builder")

FOLDERS_DESCRIPTOR = "folders.json"
FILES_DESCRIPTOR = "files.json"


def read_descriptor(path: Path) -> List[Any]:
    """Return the JSON array stored at *path*.

    A missing file is simply empty. Unreadable, blank, invalid or non-array
    content is logged and also treated as empty so one bad descriptor never
    stops the surrounding build.
    """

    try:
        content = path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return []
    except (OSError, UnicodeDecodeError) as exc:
        LOGGER.warning("Unreadable %s in %s, skipping (%s)", path.name, path.parent, exc)
        return []
    if not content:
        LOGGER.warning("Empty %s in %s, skipping", path.name, path.parent)
        return []
    try:
        payload = json.loads(content)
    except json.JSONDecodeError as exc:
        LOGGER.warning("Invalid %s in %s, skipping (%s)", path.name, path.parent, exc)
        return []
    if not isinstance(payload, list):
        LOGGER.warning("%s in %s is not a JSON array, skipping", path.name, path.parent)
        return []
    return payload


def is_direct_child_name(name: str) -> bool:
    if not name or name in {".", ".."}:
        return False
    return "/" not in name and "\\" not in name


def folder_sort_key(node: CatalogNode) -> Tuple[str, str]:
    return (node.name.casefold(), node.name)


@dataclass(slots=True)
class ManifestBuilder:
    """Recursive scanner producing ``(CatalogNode, BuildStats)``.

    Each directory step is self contained: it returns its own subtree and its
    own statistics and the caller merges them.
    """

    tracked_extensions: Sequence[str] = TRACKED_EXTENSIONS

    def new_stats(self) -> BuildStats:
        return BuildStats(file_types={str(ext).lower(): 0 for ext in self.tracked_extensions})

    def build(self, root: Path) -> Tuple[CatalogNode, BuildStats]:
        root = Path(root)
        if not root.is_dir():
            raise BuildPreconditionError(f"content root not found at {root}")
        LOGGER.info("Scanning %s", root)
        node, stats = self._scan(root, None)
        LOGGER.info(
            "Scanned %d folders and %d files under %s",
            stats.total_folders,
            stats.total_files,
            root,
        )
        return node, stats

    def _scan(self, directory: Path, entry: Optional[FolderEntry]) -> Tuple[CatalogNode, BuildStats]:
        stats = self.new_stats()
        stats.total_folders += 1
        if entry is None:
            node = CatalogNode(name=directory.name)
        else:
            node = CatalogNode.from_entry(entry)

        for child_entry in self._folder_entries(directory):
            subdir = directory / child_entry.name
            if not subdir.is_dir():
                continue
            child, child_stats = self._scan(subdir, child_entry)
            stats.hidden_folders.add(child_entry.hidden_level)
            stats.merge(child_stats)
            node.folders.append(child)
        node.folders.sort(key=folder_sort_key)

        for raw in read_descriptor(directory / FILES_DESCRIPTOR):
            file_entry = parse_file(raw)
            if not file_entry.name:
                LOGGER.warning("Dropping file entry without a name in %s: %r", directory, raw)
                continue
            stats.record_file(file_entry)
            node.files.append(file_entry)
        return node, stats

    def _folder_entries(self, directory: Path) -> Iterable[FolderEntry]:
        for raw in read_descriptor(directory / FOLDERS_DESCRIPTOR):
            entry = parse_folder(raw)
            if not is_direct_child_name(entry.name):
                LOGGER.warning("Dropping folder entry %r in %s: not a subdirectory name", raw, directory)
                continue
            yield entry


def build_manifest(
    root: Path,
    output: Path,
    *,
    tracked_extensions: Sequence[str] = TRACKED_EXTENSIONS,
) -> Tuple[CatalogNode, BuildStats]:
    """Scan *root* and write the manifest to *output*.

    Nothing is written when the root is missing.
    """

    builder = ManifestBuilder(tracked_extensions=tuple(tracked_extensions))
    node, stats = builder.build(root)
    write_manifest(node, output)
    LOGGER.info("Wrote %s", output)
    return node, stats


__all__ = [
    "FILES_DESCRIPTOR",
    "FOLDERS_DESCRIPTOR",
    "ManifestBuilder",
    "build_manifest",
    "is_direct_child_name",
    "read_descriptor",
]
