"""Error hierarchy for catalog operations."""
from __future__ import annotations


class CatalogError(RuntimeError):
    """Base exception for catalog related failures."""


class BuildPreconditionError(CatalogError):
    """Raised when the manifest build cannot start (missing content root)."""


class ManifestFormatError(CatalogError):
    """Raised when a serialized manifest does not describe a catalog tree."""


class NavigationError(CatalogError):
    """Raised when a navigator command is issued in a state that cannot honour it."""


__all__ = ["BuildPreconditionError", "CatalogError", "ManifestFormatError", "NavigationError"]
