from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

__all__ = [
    "DEFAULT_MANIFEST_NAME",
    "DEFAULT_ROOT_DIR",
    "get_db_root",
    "get_default_settings_paths",
    "get_logs_dir",
    "get_manifest_path",
    "resolve_working_dir",
    "split_catalog_path",
]

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_ROOT_DIR = "db"
DEFAULT_MANIFEST_NAME = "db-manifest.json"


def _expand_path(value: str) -> Path:
    expanded = os.path.expandvars(os.path.expanduser(value))
    return Path(expanded).resolve()


def resolve_working_dir() -> Path:
    """Resolve the catalog working directory.

    ``TAGCATALOG_HOME`` wins when it names an existing directory; otherwise the
    current directory is used, which is where the ``db`` folder normally lives.
    """

    env_home = os.environ.get("TAGCATALOG_HOME")
    if env_home:
        try:
            env_path = _expand_path(env_home)
        except (OSError, RuntimeError):
            env_path = None
        if env_path is not None and env_path.is_dir():
            return env_path
    return Path.cwd().resolve()


def _catalog_section(settings: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    if not settings:
        return {}
    section = settings.get("catalog")
    return dict(section) if isinstance(section, Mapping) else {}


def get_db_root(working_dir: Path, settings: Optional[Mapping[str, Any]] = None) -> Path:
    value = _catalog_section(settings).get("root_dir") or DEFAULT_ROOT_DIR
    candidate = Path(str(value))
    if not candidate.is_absolute():
        candidate = working_dir / candidate
    return candidate


def get_manifest_path(working_dir: Path, settings: Optional[Mapping[str, Any]] = None) -> Path:
    """The manifest sits next to the content root, never inside it."""

    name = _catalog_section(settings).get("manifest_name") or DEFAULT_MANIFEST_NAME
    return get_db_root(working_dir, settings).parent / str(name)


def get_logs_dir(working_dir: Path) -> Path:
    return working_dir / "logs"


def split_catalog_path(value: Optional[str]) -> List[str]:
    """Split a ``/`` joined catalog path into its non-empty segments."""

    if not value:
        return []
    return [part for part in str(value).replace("\\", "/").split("/") if part]


def get_default_settings_paths(working_dir: Path) -> list[Path]:
    """Return the search order for settings.json files."""

    paths = [working_dir / "settings.json"]
    project_settings = _PROJECT_ROOT / "settings.json"
    if project_settings not in paths:
        paths.append(project_settings)
    return paths
