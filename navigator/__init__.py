"""Runtime traversal of the catalog: sources, state machine and file view."""
from __future__ import annotations

from .navigator import Navigator, SelectOutcome, source_from_settings
from .sources import (
    Descriptor,
    DescriptorSource,
    FilesystemSource,
    HttpSource,
    ManifestSource,
    assemble_catalog,
    resolve_catalog,
)
from .state import FileViewState, ItemKind, MenuItem, MenuView, Mode, NavigatorState, ViewKind
from .viewer import FileContent, file_type, load_file_content

__all__ = [
    "Descriptor",
    "DescriptorSource",
    "FileContent",
    "FileViewState",
    "FilesystemSource",
    "HttpSource",
    "ItemKind",
    "ManifestSource",
    "MenuItem",
    "MenuView",
    "Mode",
    "Navigator",
    "NavigatorState",
    "SelectOutcome",
    "ViewKind",
    "assemble_catalog",
    "file_type",
    "load_file_content",
    "resolve_catalog",
    "source_from_settings",
]
