"""FastAPI application entry point with lifespan management.

Components are built eagerly in ``create_app`` so routers can be mounted
with their dependencies; the lifespan configures logging, reports the
effective configuration and, when enabled, launches the startup check.

Startup: configure logging, log configuration, make sure an output
directory exists, optionally start the initial proxy check.
Shutdown: terminate a still-running initial check.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from checker_console.config.settings import ConsoleSettings
from checker_console.discovery.binary import BinaryLocator
from checker_console.discovery.output_dir import OutputDirResolver
from checker_console.logging_config import configure_logging
from checker_console.middleware.error_handler import RunInProgressError, register_error_handlers
from checker_console.middleware.request_log import RequestLogMiddleware
from checker_console.process.lock import RunLock
from checker_console.process.runner import ProcessRunner
from checker_console.routers.cache import create_cache_router
from checker_console.routers.health import create_health_router
from checker_console.routers.results import create_results_router
from checker_console.routers.run import create_run_router
from checker_console.services.cache_manager import CacheManager
from checker_console.services.results import ResultParser

logger = logging.getLogger(__name__)


async def run_initial_check(runner: ProcessRunner, run_lock: RunLock) -> None:
    """Run the checker once at startup, like the container entrypoint did."""
    logger.info("Running initial proxy check...")
    try:
        async with run_lock.hold("startup"):
            result = await runner.run()
    except RunInProgressError:
        logger.warning("Initial proxy check skipped: a run is already in progress")
        return
    if result.success:
        logger.info("Initial proxy check completed", extra={"exit_code": result.exit_code})
    else:
        logger.warning("Initial proxy check failed: %s", result.message, extra={"exit_code": result.exit_code})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown logic."""
    settings: ConsoleSettings = app.state.settings
    configure_logging(settings.log_level)
    logger.info("Starting checker console on %s:%d", settings.host, settings.port)

    binary = app.state.locator.locate()
    output_dir = app.state.resolver.resolve()
    logger.info(
        "Configuration: binary=%s (exists: %s), output_dir=%s, config=%s, cache_dir=%s",
        binary,
        binary is not None,
        output_dir,
        settings.config_path,
        app.state.cache_manager.cache_dir,
        extra={"output_dir": str(output_dir)},
    )

    initial_check: asyncio.Task[None] | None = None
    if settings.run_initial_check:
        initial_check = asyncio.create_task(
            run_initial_check(app.state.runner, app.state.run_lock),
            name="initial-proxy-check",
        )

    logger.info("Checker console started successfully")

    yield

    # --- Shutdown ---
    logger.info("Shutting down checker console")

    if initial_check is not None and not initial_check.done():
        initial_check.cancel()
        try:
            await initial_check
        except asyncio.CancelledError:
            pass

    logger.info("Checker console shut down")


def create_app(settings: ConsoleSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    settings:
        Explicit settings (tests); loaded from the environment when omitted.
    """
    settings = settings or ConsoleSettings()

    locator = BinaryLocator(settings.binary_candidates)
    resolver = OutputDirResolver(settings.output_candidates, settings.default_output_dir)
    runner = ProcessRunner(
        locator=locator,
        config_path=settings.config_path,
        tool_log_level=settings.tool_log_level,
        chunk_size=settings.chunk_size,
    )
    parser = ResultParser()
    cache_manager = CacheManager(settings.cache_dir)
    run_lock = RunLock(enforced=settings.enforce_single_run)

    app = FastAPI(
        title="Proxy Checker Console",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.locator = locator
    app.state.resolver = resolver
    app.state.runner = runner
    app.state.cache_manager = cache_manager
    app.state.run_lock = run_lock

    register_error_handlers(app)
    app.add_middleware(RequestLogMiddleware)

    app.include_router(
        create_health_router(locator=locator, resolver=resolver, run_lock=run_lock)
    )
    app.include_router(
        create_run_router(
            locator=locator,
            runner=runner,
            resolver=resolver,
            parser=parser,
            cache_manager=cache_manager,
            run_lock=run_lock,
            preview_limit=settings.proxies_preview_limit,
        )
    )
    app.include_router(
        create_results_router(resolver=resolver, parser=parser, run_lock=run_lock)
    )
    app.include_router(create_cache_router(cache_manager=cache_manager))

    return app


app = create_app()
