"""Scan the content root and write ``db-manifest.json`` with a statistics report."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from catalog.builder import build_manifest
from catalog.errors import BuildPreconditionError
from catalog.report import format_report
from catalog.types import TRACKED_EXTENSIONS
from core.logging_utils import configure_json_logging
from core.paths import get_db_root, get_manifest_path, resolve_working_dir
from core.settings import load_settings


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build db-manifest.json from the folders.json/files.json descriptors under the content root.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    parse_args(argv)
    working_dir = resolve_working_dir()
    settings = load_settings(working_dir)
    root = get_db_root(working_dir, settings)
    output = get_manifest_path(working_dir, settings)
    try:
        configure_json_logging(working_dir=working_dir)
    except OSError as exc:
        logging.warning("JSON log file unavailable: %s", exc)

    if not root.is_dir():
        logging.error("db folder not found at %s", root)
        return 1

    tracked = settings.get("catalog", {}).get("tracked_extensions") or TRACKED_EXTENSIONS
    print(f"Scanning {root.name} folder...", flush=True)
    try:
        _, stats = build_manifest(root, output, tracked_extensions=tracked)
    except BuildPreconditionError as exc:
        logging.error("%s", exc)
        return 1
    print(f"Wrote {output}", flush=True)
    print(format_report(stats), flush=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
