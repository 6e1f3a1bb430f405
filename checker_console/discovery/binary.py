"""Locate the proxy checker executable.

The executable may live in several places depending on how the console is
deployed: an explicit path from the environment, the container image's
``/usr/local/bin``, next to the app, or in a local ``cargo build`` output.
Lookup is repeated on every call because a build step can drop the binary
in place after the console has started.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path

logger = logging.getLogger(__name__)


class BinaryLocator:
    """Resolve the first existing path from a prioritized candidate list.

    Only existence is checked; permission or format problems surface later
    as spawn failures in :class:`~checker_console.process.runner.ProcessRunner`.

    Parameters
    ----------
    candidates:
        Either a fixed iterable of paths or a zero-argument callable that
        returns one (so the list can follow live settings).
    """

    def __init__(self, candidates: Iterable[str] | Callable[[], Iterable[str]]) -> None:
        self._candidates = candidates

    def candidates(self) -> list[Path]:
        raw = self._candidates() if callable(self._candidates) else self._candidates
        return [Path(p).expanduser() for p in raw if p]

    def locate(self) -> Path | None:
        """Return the first candidate that exists, or ``None``."""
        candidates = self.candidates()
        for path in candidates:
            logger.debug("Checking for proxy checker binary at %s", path)
            if path.exists():
                logger.info("Found proxy checker binary at %s", path, extra={"binary_path": str(path)})
                return path

        logger.error(
            "Proxy checker binary not found in any of: %s",
            ", ".join(str(p) for p in candidates),
        )
        return None
