"""Health and readiness endpoints.

- GET /health: service status, located binary, active output directory
- GET /readiness: 200 only when the checker binary can be located
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Response

from checker_console.models.responses import ApiResponse

if TYPE_CHECKING:
    from checker_console.discovery.binary import BinaryLocator
    from checker_console.discovery.output_dir import OutputDirResolver
    from checker_console.process.lock import RunLock


def create_health_router(
    *,
    locator: BinaryLocator,
    resolver: OutputDirResolver,
    run_lock: RunLock,
) -> APIRouter:
    """Factory that creates the health router with injected dependencies."""

    health_router = APIRouter(tags=["health"])

    @health_router.get("/health")
    async def health() -> dict[str, Any]:
        """Service health with the currently resolved locations."""
        binary = locator.locate()
        return ApiResponse(
            success=True,
            data={
                "status": "healthy",
                "binary_path": str(binary) if binary else None,
                "output_dir": str(resolver.resolve()),
                "run_in_progress": run_lock.locked,
            },
        ).model_dump()

    @health_router.get("/readiness")
    async def readiness(response: Response) -> dict[str, Any]:
        """Readiness probe: 200 iff the checker binary is locatable."""
        binary = locator.locate()
        is_ready = binary is not None

        if not is_ready:
            response.status_code = 503

        return ApiResponse(
            success=is_ready,
            data={
                "ready": is_ready,
                "binary_path": str(binary) if binary else None,
            },
            error=None if is_ready else "Proxy checker binary not found",
        ).model_dump()

    return health_router
