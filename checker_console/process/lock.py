"""Single-slot run lock.

Concurrent checker runs would race on the shared output and cache
directories. The layer that starts runs (HTTP trigger, streaming session,
startup check) takes this lock first; a second trigger is rejected with
:class:`RunInProgressError` instead of queuing.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from checker_console.middleware.error_handler import RunInProgressError

logger = logging.getLogger(__name__)

RUN_IDENTITY = "proxy-check"


class RunLock:
    """Single-slot lock keyed by a fixed run identity.

    Parameters
    ----------
    identity:
        Name of the guarded resource (one checker, one output tree).
    enforced:
        When ``False`` every acquisition succeeds and holders are only
        tracked for status reporting.
    """

    def __init__(self, identity: str = RUN_IDENTITY, *, enforced: bool = True) -> None:
        self.identity = identity
        self.enforced = enforced
        self._holders: list[str] = []

    @property
    def locked(self) -> bool:
        return bool(self._holders)

    @property
    def holder(self) -> str | None:
        return self._holders[0] if self._holders else None

    def acquire(self, owner: str) -> None:
        """Take the slot for *owner* or raise ``RunInProgressError``."""
        if self.enforced and self._holders:
            logger.warning(
                "Rejected %s: %s is already held by %s",
                owner,
                self.identity,
                self._holders[0],
            )
            raise RunInProgressError(holder=self._holders[0])
        self._holders.append(owner)
        logger.debug("%s acquired by %s", self.identity, owner)

    def release(self, owner: str) -> None:
        if owner in self._holders:
            self._holders.remove(owner)
            logger.debug("%s released by %s", self.identity, owner)

    @asynccontextmanager
    async def hold(self, owner: str) -> AsyncIterator[None]:
        self.acquire(owner)
        try:
            yield
        finally:
            self.release(owner)
