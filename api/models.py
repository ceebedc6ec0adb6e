"""Pydantic schemas for the catalog HTTP API."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health response summarising server readiness."""

    ok: bool = Field(True, description="Indicates the API server is reachable.")
    version: str = Field(..., description="Application version string.")
    time_utc: str = Field(..., description="Current UTC timestamp in ISO8601 format.")
    root_present: bool = Field(..., description="True when the content root directory exists.")
    manifest_present: bool = Field(..., description="True when db-manifest.json has been built.")


class FolderItem(BaseModel):
    name: str
    theme: Optional[str] = Field(None, description="Presentation theme parsed from the folder tags.")
    hidden_level: int = Field(0, ge=0, le=6)
    badges: List[str] = Field(default_factory=list, description="Short H/L markers, e.g. H9.")


class FileItem(BaseModel):
    name: str
    hidden_level: int = Field(0, ge=0, le=6)
    locked_level: int = Field(0, ge=0, le=6)
    locked: bool = Field(False, description="True when the requested access level cannot view the content.")
    badges: List[str] = Field(default_factory=list)


class DescriptorResponse(BaseModel):
    """Listing of one folder path after access filtering."""

    path: str = Field(..., description="Slash separated folder path relative to the content root.")
    kind: str = Field(..., description="folders, files or empty.")
    access: int = Field(0, ge=0, le=6, description="Special access level applied to the listing.")
    folders: List[FolderItem] = Field(default_factory=list)
    files: List[FileItem] = Field(default_factory=list)


class SearchHit(BaseModel):
    path: str
    name: str
    base_name: str
    hidden_level: int = Field(0, ge=0, le=6)
    locked_level: int = Field(0, ge=0, le=6)
    locked: bool = False


class SearchResponse(BaseModel):
    query: str
    access: int = Field(0, ge=0, le=6)
    count: int = Field(..., ge=0)
    results: List[SearchHit] = Field(default_factory=list)


__all__ = [
    "DescriptorResponse",
    "FileItem",
    "FolderItem",
    "HealthResponse",
    "SearchHit",
    "SearchResponse",
]
