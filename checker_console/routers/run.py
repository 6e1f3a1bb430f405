"""Run trigger endpoints.

- POST /run: run the checker to completion, return results preview
- GET  /run-stream: run the checker with live output over Server-Sent Events
"""

from __future__ import annotations

import logging
from contextlib import aclosing
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from fastapi import APIRouter, Query
from fastapi.responses import StreamingResponse

from checker_console.models.responses import RunResponse
from checker_console.services.stats import compute_stats
from checker_console.services.stream_session import StreamingSession

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from checker_console.discovery.binary import BinaryLocator
    from checker_console.discovery.output_dir import OutputDirResolver
    from checker_console.process.lock import RunLock
    from checker_console.process.runner import ProcessRunner
    from checker_console.services.cache_manager import CacheManager
    from checker_console.services.results import ResultParser

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # disable proxy buffering (nginx)
}


def create_run_router(
    *,
    locator: BinaryLocator,
    runner: ProcessRunner,
    resolver: OutputDirResolver,
    parser: ResultParser,
    cache_manager: CacheManager,
    run_lock: RunLock,
    preview_limit: int = 100,
) -> APIRouter:
    """Factory that creates the run router with injected dependencies.

    Parameters
    ----------
    preview_limit:
        Maximum number of records returned by ``POST /run``.
    """
    run_router = APIRouter(tags=["run"])

    @run_router.post("/run")
    async def run_checker() -> dict[str, Any]:
        """Run the checker and return the refreshed results.

        Raises ``RunInProgressError`` (409) when another run holds the lock.
        """
        logger.info("Manual proxy check triggered")
        async with run_lock.hold(f"http:{uuid4()}"):
            result = await runner.run()

        output_dir = resolver.resolve()
        records = parser.parse(output_dir)
        logger.info(
            "Refreshed output directory: %s (%d proxies)",
            output_dir,
            len(records),
            extra={"output_dir": str(output_dir)},
        )

        return RunResponse(
            success=result.success,
            message=result.message,
            proxies=[record.to_json() for record in records[:preview_limit]],
            stats=compute_stats(records),
            total_proxies=len(records),
        ).model_dump(mode="json", by_alias=True)

    @run_router.get("/run-stream")
    async def run_stream(
        no_cache: bool = Query(False, alias="noCache"),
    ) -> StreamingResponse:
        """Stream the checker's output as SSE frames until the run completes."""
        logger.info("Starting proxy checker with real-time streaming (noCache: %s)", no_cache)
        session = StreamingSession(
            locator=locator,
            runner=runner,
            resolver=resolver,
            parser=parser,
            cache_manager=cache_manager,
            run_lock=run_lock,
            clear_cache=no_cache,
        )

        async def frames() -> AsyncIterator[str]:
            async with aclosing(session.events()) as stream:
                async for event in stream:
                    yield event.to_sse()

        return StreamingResponse(
            frames(),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    return run_router
