"""HTTP routers: each built by a factory with injected dependencies."""

from checker_console.routers.cache import create_cache_router
from checker_console.routers.health import create_health_router
from checker_console.routers.results import create_results_router
from checker_console.routers.run import create_run_router

__all__ = [
    "create_cache_router",
    "create_health_router",
    "create_results_router",
    "create_run_router",
]
