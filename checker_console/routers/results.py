"""Result endpoints.

- GET /status: whether results exist, stats, last update, output directory
- GET /api/proxies: canonical records, optionally filtered by protocol
- GET /download: raw ``proxies.json`` (format=json) or ``all.txt``
- GET /download/{protocol}: raw per-protocol text artifact

The output directory is resolved again on every request.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Query
from fastapi.responses import FileResponse

from checker_console.discovery.artifacts import TEXT_PROTOCOLS, json_path, text_path
from checker_console.middleware.error_handler import ArtifactNotFoundError, InvalidProtocolError
from checker_console.models.responses import ProxyListResponse, StatusResponse
from checker_console.services.stats import compute_stats

if TYPE_CHECKING:
    from checker_console.discovery.output_dir import OutputDirResolver
    from checker_console.process.lock import RunLock
    from checker_console.services.results import ResultParser

logger = logging.getLogger(__name__)


def create_results_router(
    *,
    resolver: OutputDirResolver,
    parser: ResultParser,
    run_lock: RunLock,
) -> APIRouter:
    """Factory that creates the results router with injected dependencies."""

    results_router = APIRouter(tags=["results"])

    @results_router.get("/status")
    async def status() -> dict[str, Any]:
        output_dir = resolver.resolve()
        has_data = parser.has_results(output_dir)
        records = parser.parse(output_dir) if has_data else []
        logger.info(
            "Output dir: %s, hasData: %s, proxies: %d",
            output_dir,
            has_data,
            len(records),
            extra={"output_dir": str(output_dir)},
        )

        return StatusResponse(
            has_data=has_data,
            stats=compute_stats(records),
            last_updated=parser.last_updated(output_dir) if has_data else None,
            output_dir=str(output_dir),
            running=run_lock.locked,
        ).model_dump(mode="json", by_alias=True)

    @results_router.get("/api/proxies")
    async def list_proxies(protocol: str | None = None) -> dict[str, Any]:
        records = parser.parse(resolver.resolve())
        if protocol:
            wanted = protocol.lower()
            records = [r for r in records if r.protocol.value.lower() == wanted]

        return ProxyListResponse(
            count=len(records),
            proxies=[record.to_json() for record in records],
        ).model_dump(mode="json", by_alias=True)

    @results_router.get("/download")
    async def download(fmt: str = Query("txt", alias="format")) -> FileResponse:
        output_dir = resolver.resolve()
        if fmt == "json":
            path, filename, media_type = json_path(output_dir), "proxies.json", "application/json"
        else:
            path, filename, media_type = text_path(output_dir), "proxies.txt", "text/plain"

        if not path.is_file():
            raise ArtifactNotFoundError()
        return FileResponse(path, filename=filename, media_type=media_type)

    @results_router.get("/download/{protocol}")
    async def download_protocol(protocol: str) -> FileResponse:
        selector = protocol.lower()
        if selector not in TEXT_PROTOCOLS:
            raise InvalidProtocolError(protocol=protocol, allowed=list(TEXT_PROTOCOLS))

        path = text_path(resolver.resolve(), selector)
        if not path.is_file():
            raise ArtifactNotFoundError(f"No {selector.upper()} proxies available")
        return FileResponse(path, filename=f"{selector}.txt", media_type="text/plain")

    return results_router
