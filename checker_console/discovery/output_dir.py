"""Resolve which output directory holds the checker's freshest results.

Several plausible output roots can coexist (a mounted volume, the user's
data directory, a development ``./out``). A directory that merely exists
must not shadow a sibling that actually holds results, so resolution is:

1. the first candidate containing ``proxies.json`` or ``proxies/all.txt``;
2. otherwise the first candidate that exists as a directory;
3. otherwise the fixed default, created on demand.

Resolution runs per request; callers keep the returned path local instead
of storing it in shared state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from checker_console.discovery.artifacts import has_artifacts

logger = logging.getLogger(__name__)


class OutputDirResolver:
    """Pick the active result directory from a prioritized candidate list."""

    def __init__(
        self,
        candidates: Iterable[str] | Callable[[], Iterable[str]],
        default: str | Callable[[], str],
    ) -> None:
        self._candidates = candidates
        self._default = default

    def candidates(self) -> list[Path]:
        raw = self._candidates() if callable(self._candidates) else self._candidates
        return [Path(p).expanduser() for p in raw if p]

    def default(self) -> Path:
        raw = self._default() if callable(self._default) else self._default
        return Path(raw).expanduser()

    def resolve(self) -> Path:
        """Return the active output directory. Never raises."""
        candidates = self.candidates()

        for directory in candidates:
            try:
                if has_artifacts(directory):
                    logger.info(
                        "Found output directory with data: %s",
                        directory,
                        extra={"output_dir": str(directory)},
                    )
                    return directory
            except OSError as exc:
                logger.warning("Cannot inspect output candidate %s: %s", directory, exc)

        for directory in candidates:
            try:
                if directory.is_dir():
                    logger.debug("Using existing (empty) output directory %s", directory)
                    return directory
            except OSError as exc:
                logger.warning("Cannot inspect output candidate %s: %s", directory, exc)

        fallback = self.default()
        try:
            fallback.mkdir(parents=True, exist_ok=True)
            logger.info("Created output directory: %s", fallback, extra={"output_dir": str(fallback)})
        except OSError as exc:
            logger.warning("Could not create output directory %s: %s", fallback, exc)
        return fallback
