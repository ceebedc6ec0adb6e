"""Manifest serialization for the catalog tree."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .errors import ManifestFormatError
from .tags import parse_file, parse_folder
from .types import CatalogNode, FileEntry


def _file_json(entry: FileEntry) -> Dict[str, object]:
    return {
        "name": entry.name,
        "hiddenLevel": entry.hidden_level,
        "lockedLevel": entry.locked_level,
        "rawLabel": entry.raw_label,
    }


def node_to_dict(node: CatalogNode) -> Dict[str, object]:
    return {
        "name": node.name,
        "theme": node.theme,
        "hiddenLevel": node.hidden_level,
        "rawLabel": node.raw_label,
        "folders": [node_to_dict(child) for child in node.folders],
        "files": [_file_json(entry) for entry in node.files],
    }


def _int_field(payload: Mapping[str, Any], key: str) -> int:
    value = payload.get(key)
    try:
        level = int(value)
    except (TypeError, ValueError):
        return 0
    return level if 0 <= level <= 6 else 0


def _file_from_payload(item: Any) -> Optional[FileEntry]:
    if isinstance(item, str):
        return parse_file(item)
    if not isinstance(item, Mapping):
        return None
    if "original" in item:
        # {"original": <raw entry>, "parsed": {...}}
        return parse_file(item["original"])
    if isinstance(item.get("parsed"), Mapping):
        parsed = item["parsed"]
        return FileEntry(
            name=str(parsed.get("name") or ""),
            hidden_level=_int_field(parsed, "hiddenLevel"),
            locked_level=_int_field(parsed, "lockedLevel"),
            raw_label=str(parsed.get("name") or ""),
        )
    if "rawLabel" in item and isinstance(item["rawLabel"], str):
        return FileEntry(
            name=str(item.get("name") or ""),
            hidden_level=_int_field(item, "hiddenLevel"),
            locked_level=_int_field(item, "lockedLevel"),
            raw_label=item["rawLabel"],
        )
    return parse_file(item)


def node_from_dict(payload: Any) -> CatalogNode:
    """Rebuild a :class:`CatalogNode` from any supported manifest shape."""

    if not isinstance(payload, Mapping):
        raise ManifestFormatError("manifest node must be a JSON object")
    if "sub" in payload:
        # {"original": <raw entry>, "parsed": {...}, "sub": {...}}
        parsed = parse_folder(payload.get("original", payload.get("parsed") or {}))
        child = node_from_dict(payload["sub"])
        child.name = parsed.name
        child.theme = parsed.theme
        child.hidden_level = parsed.hidden_level
        child.raw_label = parsed.raw_label
        return child

    name = payload.get("name")
    if not isinstance(name, str):
        raise ManifestFormatError("manifest node is missing a name")
    raw_label = payload.get("rawLabel")
    if "hiddenLevel" in payload or "theme" in payload:
        theme = payload.get("theme")
        node = CatalogNode(
            name=name,
            theme=str(theme).lower() if theme else None,
            hidden_level=_int_field(payload, "hiddenLevel"),
            raw_label=raw_label if isinstance(raw_label, str) else None,
        )
    elif isinstance(raw_label, str):
        node = CatalogNode.from_entry(parse_folder(raw_label))
    else:
        node = CatalogNode(name=name)

    folders: List[CatalogNode] = []
    for item in payload.get("folders") or []:
        if isinstance(item, str):
            folders.append(CatalogNode.from_entry(parse_folder(item)))
        else:
            folders.append(node_from_dict(item))
    files: List[FileEntry] = []
    for item in payload.get("files") or []:
        entry = _file_from_payload(item)
        if entry is not None:
            files.append(entry)
    node.folders = folders
    node.files = files
    return node


def write_manifest(node: CatalogNode, path: Path) -> Path:
    """Write the manifest atomically so readers never see a partial file."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as handle:
        json.dump(node_to_dict(node), handle, ensure_ascii=False, indent=2)
    os.replace(tmp_path, path)
    return path


def load_manifest(path: Path) -> CatalogNode:
    with Path(path).open("r", encoding="utf-8") as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ManifestFormatError(f"invalid manifest JSON in {path}: {exc}") from exc
    return node_from_dict(payload)


__all__ = ["load_manifest", "node_from_dict", "node_to_dict", "write_manifest"]
