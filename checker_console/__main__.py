"""Command-line entry point.

Modes:
    web   (default) serve the console; honours RUN_INITIAL_CHECK
    check run the proxy checker once and exit with its status
    both  run the checker once, then serve the console
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import uvicorn

from checker_console.config.settings import ConsoleSettings
from checker_console.discovery.binary import BinaryLocator
from checker_console.logging_config import configure_logging
from checker_console.process.runner import ProcessRunner, RunResult

logger = logging.getLogger(__name__)


def _check_once(settings: ConsoleSettings) -> RunResult:
    runner = ProcessRunner(
        locator=BinaryLocator(settings.binary_candidates),
        config_path=settings.config_path,
        tool_log_level=settings.tool_log_level,
        chunk_size=settings.chunk_size,
    )
    result = asyncio.run(runner.run())
    logger.info("Proxy checker finished: %s", result.message, extra={"exit_code": result.exit_code})
    return result


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="checker_console", description=__doc__,
                                     formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("mode", nargs="?", choices=("web", "check", "both"), default="web")
    args = parser.parse_args(argv)

    settings = ConsoleSettings()
    configure_logging(settings.log_level)

    if args.mode in ("check", "both"):
        result = _check_once(settings)
        if args.mode == "check":
            return 0 if result.success else 1

    uvicorn.run(
        "checker_console.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
