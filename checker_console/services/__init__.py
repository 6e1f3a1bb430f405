"""Services: result parsing, cache management, stats, and live streaming."""

from checker_console.services.cache_manager import CacheManager
from checker_console.services.results import ResultParser
from checker_console.services.stats import compute_stats
from checker_console.services.stream_session import (
    RunSession,
    SessionState,
    StreamingSession,
)

__all__ = [
    "CacheManager",
    "ResultParser",
    "RunSession",
    "SessionState",
    "StreamingSession",
    "compute_stats",
]
