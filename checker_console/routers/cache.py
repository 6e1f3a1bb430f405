"""Cache endpoints.

- POST /clear-cache: delete cached ASN / geolocation databases
- GET  /cache-status: existence, size and mtime of the cached databases
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter

if TYPE_CHECKING:
    from checker_console.services.cache_manager import CacheManager

logger = logging.getLogger(__name__)


def create_cache_router(*, cache_manager: CacheManager) -> APIRouter:
    """Factory that creates the cache router with injected dependencies."""

    cache_router = APIRouter(tags=["cache"])

    @cache_router.post("/clear-cache")
    async def clear_cache() -> dict[str, Any]:
        logger.info("Clearing cache files")
        return cache_manager.clear().model_dump(mode="json", by_alias=True)

    @cache_router.get("/cache-status")
    async def cache_status() -> dict[str, Any]:
        return cache_manager.status().model_dump(mode="json", by_alias=True)

    return cache_router
