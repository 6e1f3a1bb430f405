"""HTTP response models.

Run, status, cache and record endpoints return flat camelCase payloads
consumed by the browser console. Health endpoints use the generic
``ApiResponse`` envelope { success, data, error, meta }.
"""

from __future__ import annotations

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from checker_console.models.records import ProxyStats

T = TypeVar("T")

_CAMEL = {"alias_generator": to_camel, "populate_by_name": True}


class ApiResponse(BaseModel, Generic[T]):
    """JSON envelope for health and error responses."""

    success: bool
    data: T | None = None
    error: str | None = None
    meta: dict | None = None


class RunResponse(BaseModel):
    """Outcome of a synchronous run plus a preview of the fresh results."""

    success: bool
    message: str
    proxies: list[dict] = []
    stats: ProxyStats = ProxyStats()
    total_proxies: int = 0

    model_config = _CAMEL


class StatusResponse(BaseModel):
    has_data: bool
    stats: ProxyStats
    last_updated: str | None = None
    output_dir: str
    running: bool = False

    model_config = _CAMEL


class ProxyListResponse(BaseModel):
    success: bool = True
    count: int
    proxies: list[dict]

    model_config = _CAMEL


class CacheClearResult(BaseModel):
    """Per-file deletion outcome; success only when no file failed."""

    success: bool
    message: str
    files_deleted: list[str] = []
    errors: list[str] = []

    model_config = _CAMEL


class CacheFileStatus(BaseModel):
    file: str
    exists: bool
    size: int = 0
    modified: datetime | None = None

    model_config = _CAMEL


class CacheStatus(BaseModel):
    has_cached_data: bool
    total_size: int
    total_size_formatted: str
    files: list[CacheFileStatus]
    cache_dir: str

    model_config = _CAMEL
