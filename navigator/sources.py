"""Where the navigator gets descriptors, the manifest and file bytes from.

Every source answers the same three questions: the listing for a folder
path, the whole catalog (manifest) and the raw bytes of one file. Failures
are reported as "no data" (empty listings, ``None``) and logged; they never
raise into the navigator.
"""
from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple
from urllib.parse import quote

import requests

from catalog.builder import FILES_DESCRIPTOR, FOLDERS_DESCRIPTOR, is_direct_child_name, read_descriptor
from catalog.errors import ManifestFormatError
from catalog.exporter import load_manifest, node_from_dict
from catalog.tags import parse_file, parse_folder
from catalog.types import CatalogNode, FileEntry, FolderEntry

LOGGER = logging.getLogger("tagcatalog.sources")

KIND_FOLDERS = "folders"
KIND_FILES = "files"
KIND_EMPTY = "empty"


@dataclass(slots=True)
class Descriptor:
    """What one folder path resolves to when navigated."""

    kind: str = KIND_EMPTY
    folders: List[FolderEntry] = field(default_factory=list)
    files: List[FileEntry] = field(default_factory=list)


def _parse_folders(items: Sequence[Any]) -> List[FolderEntry]:
    entries: List[FolderEntry] = []
    for raw in items:
        entry = parse_folder(raw)
        if is_direct_child_name(entry.name):
            entries.append(entry)
    return entries


def _parse_files(items: Sequence[Any]) -> List[FileEntry]:
    return [entry for entry in (parse_file(raw) for raw in items) if entry.name]


def _safe_parts(parts: Sequence[str]) -> Optional[List[str]]:
    cleaned = [str(part) for part in parts]
    if all(is_direct_child_name(part) for part in cleaned):
        return cleaned
    LOGGER.warning("Rejected catalog path %r", "/".join(cleaned))
    return None


class DescriptorSource:
    """Base class; subclasses implement ``load_listing``, ``load_catalog`` and ``read_file``."""

    root_name: str = "db"

    async def load_listing(self, parts: Sequence[str]) -> Tuple[List[FolderEntry], List[FileEntry]]:
        raise NotImplementedError

    async def load_catalog(self) -> Optional[CatalogNode]:
        raise NotImplementedError

    async def read_file(self, parts: Sequence[str], name: str) -> Optional[bytes]:
        raise NotImplementedError

    async def load_descriptor(self, parts: Sequence[str]) -> Descriptor:
        """Folders win when present; otherwise files; otherwise empty."""

        folders, files = await self.load_listing(parts)
        if folders:
            return Descriptor(kind=KIND_FOLDERS, folders=folders)
        if files:
            return Descriptor(kind=KIND_FILES, files=files)
        return Descriptor()


class FilesystemSource(DescriptorSource):
    """Reads descriptors straight from the content root on disk."""

    def __init__(self, root: Path, manifest_path: Optional[Path] = None) -> None:
        self.root = Path(root)
        self.root_name = self.root.name
        self.manifest_path = Path(manifest_path) if manifest_path else None

    def _directory(self, parts: Sequence[str]) -> Optional[Path]:
        safe = _safe_parts(parts)
        if safe is None:
            return None
        return self.root.joinpath(*safe)

    def _listing_sync(self, parts: Sequence[str]) -> Tuple[List[FolderEntry], List[FileEntry]]:
        directory = self._directory(parts)
        if directory is None or not directory.is_dir():
            return [], []
        folders = _parse_folders(read_descriptor(directory / FOLDERS_DESCRIPTOR))
        files = _parse_files(read_descriptor(directory / FILES_DESCRIPTOR))
        return folders, files

    async def load_listing(self, parts: Sequence[str]) -> Tuple[List[FolderEntry], List[FileEntry]]:
        return await asyncio.to_thread(self._listing_sync, list(parts))

    def _catalog_sync(self) -> Optional[CatalogNode]:
        if self.manifest_path is None or not self.manifest_path.is_file():
            return None
        try:
            return load_manifest(self.manifest_path)
        except (OSError, ManifestFormatError) as exc:
            LOGGER.warning("Could not load manifest %s (%s)", self.manifest_path, exc)
            return None

    async def load_catalog(self) -> Optional[CatalogNode]:
        return await asyncio.to_thread(self._catalog_sync)

    def _read_sync(self, parts: Sequence[str], name: str) -> Optional[bytes]:
        directory = self._directory(parts)
        if directory is None or not is_direct_child_name(name):
            return None
        try:
            return (directory / name).read_bytes()
        except OSError as exc:
            LOGGER.warning("Could not read %s/%s (%s)", "/".join(parts), name, exc)
            return None

    async def read_file(self, parts: Sequence[str], name: str) -> Optional[bytes]:
        return await asyncio.to_thread(self._read_sync, list(parts), name)


class HttpSource(DescriptorSource):
    """Fetches descriptors from a static host laid out like the content root."""

    def __init__(
        self,
        base_url: str,
        *,
        root_prefix: str = "db",
        manifest_name: str = "db-manifest.json",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.root_prefix = root_prefix.strip("/")
        self.root_name = self.root_prefix or "db"
        self.manifest_name = manifest_name
        self.timeout = timeout
        self.session = session or requests.Session()

    def url_for(self, parts: Sequence[str], name: str) -> str:
        segments = [self.root_prefix, *parts, name] if self.root_prefix else [*parts, name]
        return f"{self.base_url}/" + "/".join(quote(str(segment), safe="") for segment in segments)

    def _get_sync(self, url: str) -> Optional[bytes]:
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            LOGGER.warning("GET %s failed (%s)", url, exc)
            return None
        if resp.status_code != 200:
            LOGGER.debug("GET %s -> %s", url, resp.status_code)
            return None
        return resp.content

    async def _get(self, url: str) -> Optional[bytes]:
        return await asyncio.to_thread(self._get_sync, url)

    async def _get_json(self, url: str) -> Any:
        body = await self._get(url)
        if body is None:
            return None
        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            LOGGER.warning("Invalid JSON at %s (%s)", url, exc)
            return None

    async def load_listing(self, parts: Sequence[str]) -> Tuple[List[FolderEntry], List[FileEntry]]:
        safe = _safe_parts(parts)
        if safe is None:
            return [], []
        folders_payload = await self._get_json(self.url_for(safe, FOLDERS_DESCRIPTOR))
        folders = _parse_folders(folders_payload) if isinstance(folders_payload, list) else []
        if folders:
            # folders win, so files.json is only fetched for leaf folders
            return folders, []
        files_payload = await self._get_json(self.url_for(safe, FILES_DESCRIPTOR))
        files = _parse_files(files_payload) if isinstance(files_payload, list) else []
        return folders, files

    async def load_catalog(self) -> Optional[CatalogNode]:
        payload = await self._get_json(f"{self.base_url}/{quote(self.manifest_name)}")
        if payload is None:
            return None
        try:
            return node_from_dict(payload)
        except ManifestFormatError as exc:
            LOGGER.warning("Ignoring malformed manifest from %s (%s)", self.base_url, exc)
            return None

    async def read_file(self, parts: Sequence[str], name: str) -> Optional[bytes]:
        safe = _safe_parts(parts)
        if safe is None or not is_direct_child_name(name):
            return None
        return await self._get(self.url_for(safe, name))


class ManifestSource(DescriptorSource):
    """Serves descriptors from an already loaded catalog tree.

    File bytes are delegated to *content* when given; the manifest itself
    carries no file contents.
    """

    def __init__(self, catalog: CatalogNode, content: Optional[DescriptorSource] = None) -> None:
        self.catalog = catalog
        self.root_name = catalog.name
        self.content = content

    @classmethod
    def from_file(cls, manifest_path: Path, content: Optional[DescriptorSource] = None) -> "ManifestSource":
        return cls(load_manifest(manifest_path), content=content)

    async def load_listing(self, parts: Sequence[str]) -> Tuple[List[FolderEntry], List[FileEntry]]:
        node = self.catalog.find(parts)
        if node is None:
            return [], []
        return [child.entry() for child in node.folders], list(node.files)

    async def load_catalog(self) -> Optional[CatalogNode]:
        return self.catalog

    async def read_file(self, parts: Sequence[str], name: str) -> Optional[bytes]:
        if self.content is None:
            return None
        return await self.content.read_file(parts, name)


async def assemble_catalog(source: DescriptorSource, *, root_name: Optional[str] = None) -> CatalogNode:
    """Walk descriptors folder by folder to build a tree when no manifest exists.

    The root node is named after the source root unless *root_name* is given.
    """

    async def _walk(parts: List[str], node: CatalogNode) -> None:
        folders, files = await source.load_listing(parts)
        node.files = list(files)
        for entry in folders:
            child = CatalogNode.from_entry(entry)
            await _walk(parts + [entry.name], child)
            node.folders.append(child)

    root = CatalogNode(name=root_name or source.root_name)
    await _walk([], root)
    return root


async def resolve_catalog(source: DescriptorSource) -> Optional[CatalogNode]:
    """The manifest when available, otherwise a tree assembled from descriptors."""

    catalog = await source.load_catalog()
    if catalog is not None:
        return catalog
    LOGGER.warning("Manifest not found; assembling catalog from descriptors")
    return await assemble_catalog(source)


__all__ = [
    "Descriptor",
    "DescriptorSource",
    "FilesystemSource",
    "HttpSource",
    "KIND_EMPTY",
    "KIND_FILES",
    "KIND_FOLDERS",
    "ManifestSource",
    "assemble_catalog",
    "resolve_catalog",
]
