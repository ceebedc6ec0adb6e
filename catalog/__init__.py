"""Tagged content catalog: label grammar, levels, manifest building."""
from __future__ import annotations

from .access import is_unlocked, is_visible, parse_access_code
from .builder import ManifestBuilder, build_manifest, read_descriptor
from .errors import BuildPreconditionError, CatalogError, ManifestFormatError, NavigationError
from .exporter import load_manifest, node_from_dict, node_to_dict, write_manifest
from .levels import format_badges, level_name, resolve_level, to_access_level
from .report import format_report
from .tags import RawEntry, parse_file, parse_folder, parse_label, parse_tags
from .types import BuildStats, CatalogNode, FileEntry, FolderEntry, LevelHistogram

__all__ = [
    "BuildPreconditionError",
    "BuildStats",
    "CatalogError",
    "CatalogNode",
    "FileEntry",
    "FolderEntry",
    "LevelHistogram",
    "ManifestBuilder",
    "ManifestFormatError",
    "NavigationError",
    "RawEntry",
    "build_manifest",
    "format_badges",
    "format_report",
    "is_unlocked",
    "is_visible",
    "level_name",
    "load_manifest",
    "node_from_dict",
    "node_to_dict",
    "parse_access_code",
    "parse_file",
    "parse_folder",
    "parse_label",
    "parse_tags",
    "read_descriptor",
    "resolve_level",
    "to_access_level",
    "write_manifest",
]
