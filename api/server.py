"""FastAPI application exposing the catalog's runtime query surface."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from fastapi import FastAPI, HTTPException, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from catalog.exporter import node_to_dict
from core.paths import split_catalog_path

from .db import CatalogAccess, clamp_access
from .models import DescriptorResponse, HealthResponse, SearchResponse

LOGGER = logging.getLogger("tagcatalog.api")


@dataclass(slots=True)
class APIServerConfig:
    """Runtime configuration for the FastAPI application."""

    data_access: CatalogAccess
    cors_origins: Sequence[str]
    app_version: str = "dev"
    lan_only: bool = True


_LOCAL_CLIENT_SENTINELS = {
    "127.0.0.1",
    "::1",
    "localhost",
    "testclient",
}


def _normalise_remote_host(host: Optional[str]) -> Optional[str]:
    if host is None:
        return None
    value = host.strip().lower()
    if not value:
        return None
    if value.startswith("::ffff:"):
        value = value.split("::ffff:")[-1]
    if value.startswith("[") and value.endswith("]"):
        value = value[1:-1]
    if "%" in value:  # strip IPv6 scope id
        value = value.split("%", 1)[0]
    return value


def _is_loopback_host(host: Optional[str]) -> bool:
    value = _normalise_remote_host(host)
    if value is None:
        return True
    if value in _LOCAL_CLIENT_SENTINELS:
        return True
    return value.startswith("127.")


def create_app(config: APIServerConfig) -> FastAPI:
    """Create a FastAPI application bound to the given configuration."""

    app = FastAPI(
        title="Tag Catalog API",
        version=config.app_version,
        docs_url="/docs",
        openapi_url="/openapi.json",
    )

    allowed_origins: List[str] = [origin for origin in config.cors_origins if origin]
    if allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_methods=["GET"],
            allow_headers=["*"],
        )

    data = config.data_access
    lan_only = bool(config.lan_only)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):  # type: ignore[override]
        start = time.perf_counter()
        response: Optional[Response] = None
        client_host = request.client.host if request.client else None
        try:
            if lan_only and not _is_loopback_host(client_host):
                LOGGER.warning("Rejected non-local HTTP request from %s", client_host or "<unknown>")
                response = JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"error": "LAN access disabled"})
            else:
                response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            status_code = response.status_code if response is not None else 500
            LOGGER.info(
                "%s %s -> %s (%.1f ms) ip=%s",
                request.method,
                request.url.path,
                status_code,
                duration_ms,
                client_host or "-",
            )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(_request: Request, exc: HTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"error": detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "invalid parameters", "details": exc.errors()},
        )

    @app.get("/v1/health", response_model=HealthResponse)
    def health_check() -> HealthResponse:
        return HealthResponse(
            ok=True,
            version=config.app_version,
            time_utc=datetime.now(timezone.utc).isoformat(),
            root_present=data.root.is_dir(),
            manifest_present=data.manifest_path.is_file(),
        )

    @app.get("/v1/descriptor", response_model=DescriptorResponse)
    async def descriptor(
        path: str = Query("", description="Slash separated folder path."),
        access: int = Query(0, ge=0, le=6, description="Special access level to filter with."),
    ) -> DescriptorResponse:
        payload = await data.descriptor(split_catalog_path(path), clamp_access(access))
        return DescriptorResponse(**payload)

    @app.get("/v1/catalog")
    async def catalog_tree() -> JSONResponse:
        node = await data.catalog()
        if node is None:
            raise HTTPException(status_code=404, detail="catalog unavailable")
        return JSONResponse(content=node_to_dict(node))

    @app.get("/v1/search", response_model=SearchResponse)
    async def search(
        q: str = Query("", description="Exact file name without extension."),
        access: int = Query(0, ge=0, le=6),
    ) -> SearchResponse:
        results = await data.search(q, clamp_access(access))
        return SearchResponse(query=q, access=access, count=len(results), results=results)

    @app.get(f"/{data.manifest_path.name}")
    def manifest_file() -> FileResponse:
        if not data.manifest_path.is_file():
            raise HTTPException(status_code=404, detail="manifest not built")
        return FileResponse(data.manifest_path, media_type="application/json")

    if data.root.is_dir():
        app.mount(f"/{data.root.name}", StaticFiles(directory=data.root), name="content-root")
    else:
        LOGGER.warning("Content root %s missing; static file serving disabled", data.root)

    return app


__all__ = [
    "APIServerConfig",
    "create_app",
]
