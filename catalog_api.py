"""CLI entry-point to launch the read-only tag catalog HTTP API."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import uvicorn

from api import __version__ as API_VERSION
from api.db import CatalogAccess
from api.server import APIServerConfig, create_app
from core.logging_utils import configure_json_logging
from core.paths import resolve_working_dir
from core.settings import load_settings

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8757
DEFAULT_CORS = ["http://localhost", "http://127.0.0.1"]


def _resolve_bind_host(candidate: Optional[str]) -> str:
    host = (candidate or DEFAULT_HOST).strip()
    if not host:
        host = DEFAULT_HOST
    norm = host.lower()
    if norm == "localhost":
        return "127.0.0.1"
    if norm.startswith("::ffff:"):
        norm = norm.split("::ffff:")[-1]
    if norm == "::1":
        return "127.0.0.1"
    if norm.startswith("127."):
        return norm
    raise ValueError(f"Refusing to bind API server to non-loopback host '{candidate}'.")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Start the local tag catalog API service.")
    parser.add_argument("--host", default=None, help="Bind host (default from settings.json)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default from settings.json)")
    parser.add_argument(
        "--cors",
        action="append",
        dest="cors",
        default=None,
        help="Additional allowed CORS origin (repeatable).",
    )
    return parser.parse_args(argv)


def resolve_api_settings(
    args: argparse.Namespace,
) -> tuple[str, int, List[str], CatalogAccess, bool]:
    working_dir = resolve_working_dir()
    settings = load_settings(working_dir)
    api_settings = settings.get("api") if isinstance(settings.get("api"), dict) else {}

    lan_only = bool(api_settings.get("lan_only", True))
    host_candidate = args.host or api_settings.get("host") or DEFAULT_HOST
    host = _resolve_bind_host(host_candidate) if lan_only else str(host_candidate)
    port = args.port or api_settings.get("port") or DEFAULT_PORT
    try:
        port = int(port)
    except (TypeError, ValueError):
        port = DEFAULT_PORT

    if args.cors:
        cors = list(args.cors)
    else:
        cors = list(api_settings.get("cors_origins") or DEFAULT_CORS)

    data_access = CatalogAccess(working_dir=Path(working_dir), settings=settings)
    return host, port, cors, data_access, lan_only


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    args = parse_args(argv)
    try:
        host, port, cors, data_access, lan_only = resolve_api_settings(args)
    except ValueError as exc:
        logging.error("%s", exc)
        return 2

    try:
        configure_json_logging(working_dir=data_access.working_dir)
    except OSError as exc:
        logging.warning("JSON log file unavailable: %s", exc)

    if not data_access.manifest_path.is_file():
        logging.warning("Manifest %s not found; descriptors are read from disk", data_access.manifest_path)

    config = APIServerConfig(
        data_access=data_access,
        cors_origins=cors,
        app_version=API_VERSION,
        lan_only=lan_only,
    )
    app = create_app(config)

    print(f"API listening on http://{host}:{port}", flush=True)

    uvicorn_config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level="info",
        access_log=False,
    )
    server = uvicorn.Server(uvicorn_config)
    server.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
