"""Data models: canonical records, stream events, and HTTP responses."""

from checker_console.models.events import EventType, StreamEvent
from checker_console.models.records import (
    NOT_AVAILABLE,
    ProxyProtocol,
    ProxyRecord,
    ProxyStats,
    ProxyStatus,
)
from checker_console.models.responses import (
    ApiResponse,
    CacheClearResult,
    CacheFileStatus,
    CacheStatus,
    ProxyListResponse,
    RunResponse,
    StatusResponse,
)

__all__ = [
    "NOT_AVAILABLE",
    "ApiResponse",
    "CacheClearResult",
    "CacheFileStatus",
    "CacheStatus",
    "EventType",
    "ProxyListResponse",
    "ProxyProtocol",
    "ProxyRecord",
    "ProxyStats",
    "ProxyStatus",
    "RunResponse",
    "StatusResponse",
    "StreamEvent",
]
