"""Live-log streaming session for one browser connection.

A session walks ``CONNECTED → [CLEARING_CACHE] → RUNNING → COMPLETED|FAILED``
and exposes the run as an async iterator of :class:`StreamEvent`:

- an acknowledgement as soon as the client connects;
- a terminal shortcut (``error`` + ``complete``) when the binary is missing
  or another run holds the run lock;
- optional cache cleanup with one event per deleted file;
- one event per output line while the checker runs, in arrival order;
- a single ``complete`` event carrying stats for the freshly parsed results.

Output is split into lines per received chunk. A line that straddles two
chunks is delivered as two events; this only affects display text.

Closing the iterator early (client disconnect) sends SIGTERM to the checker.
The run lock stays held until the checker has exited. There is no run
timeout and no kill escalation.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from uuid import uuid4

from checker_console.discovery.binary import BinaryLocator
from checker_console.discovery.output_dir import OutputDirResolver
from checker_console.middleware.error_handler import RunInProgressError
from checker_console.models import events
from checker_console.models.events import EventType, StreamEvent
from checker_console.process.lock import RunLock
from checker_console.process.runner import STDERR, ProcessRunner, RunResult
from checker_console.services.cache_manager import CacheManager
from checker_console.services.results import ResultParser
from checker_console.services.severity import classify_line
from checker_console.services.stats import compute_stats

logger = logging.getLogger(__name__)

BINARY_NOT_FOUND = "Proxy checker binary not found"

# Keeps runner tasks alive after their session's iterator is closed
_background_tasks: set[asyncio.Task] = set()

# Queue marker: the runner task has finished
_DONE = object()


class SessionState(str, Enum):
    CONNECTED = "connected"
    CLEARING_CACHE = "clearing_cache"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


_TRANSITIONS: dict[SessionState, frozenset[SessionState]] = {
    SessionState.CONNECTED: frozenset(
        {SessionState.CLEARING_CACHE, SessionState.RUNNING, SessionState.FAILED}
    ),
    SessionState.CLEARING_CACHE: frozenset({SessionState.RUNNING, SessionState.FAILED}),
    SessionState.RUNNING: frozenset({SessionState.COMPLETED, SessionState.FAILED}),
    SessionState.COMPLETED: frozenset(),
    SessionState.FAILED: frozenset(),
}


class SessionStateError(RuntimeError):
    """Illegal state transition (e.g. leaving a terminal state)."""


@dataclass
class RunSession:
    """Observable state of one streaming run."""

    id: str = field(default_factory=lambda: str(uuid4()))
    state: SessionState = SessionState.CONNECTED
    process: asyncio.subprocess.Process | None = None
    cache_files_removed: list[str] = field(default_factory=list)
    exit_code: int | None = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_terminal(self) -> bool:
        return not _TRANSITIONS[self.state]

    def transition(self, new_state: SessionState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise SessionStateError(
                f"Cannot move session {self.id} from {self.state.value} to {new_state.value}"
            )
        logger.debug(
            "Session %s: %s -> %s",
            self.id,
            self.state.value,
            new_state.value,
            extra={"session_id": self.id},
        )
        self.state = new_state


class StreamingSession:
    """Drives one checker run for one streaming client.

    Parameters
    ----------
    locator:
        Verifies the checker binary before anything is started.
    runner:
        Spawns the checker and forwards its output chunks.
    resolver:
        Re-resolves the output directory once the run has finished.
    parser:
        Reads the fresh artifacts for the terminal event.
    cache_manager:
        Used when ``clear_cache`` is requested.
    run_lock:
        Single-slot lock shared with the other run triggers.
    clear_cache:
        Delete cached databases before starting the run.
    """

    def __init__(
        self,
        *,
        locator: BinaryLocator,
        runner: ProcessRunner,
        resolver: OutputDirResolver,
        parser: ResultParser,
        cache_manager: CacheManager,
        run_lock: RunLock,
        clear_cache: bool = False,
    ) -> None:
        self._locator = locator
        self._runner = runner
        self._resolver = resolver
        self._parser = parser
        self._cache_manager = cache_manager
        self._run_lock = run_lock
        self._clear_cache = clear_cache

        self.session = RunSession()
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._run_task: asyncio.Task[RunResult] | None = None
        self._closed = False

    @property
    def _owner(self) -> str:
        return f"stream:{self.session.id}"

    async def events(self) -> AsyncIterator[StreamEvent]:
        """Yield the session's events until the terminal ``complete``."""
        session = self.session
        extra = {"session_id": session.id}
        acquired = False

        try:
            yield events.status("Connected to log stream")

            binary = self._locator.locate()
            if binary is None:
                session.transition(SessionState.FAILED)
                yield events.error(BINARY_NOT_FOUND)
                yield events.complete(False, BINARY_NOT_FOUND)
                return

            try:
                self._run_lock.acquire(self._owner)
            except RunInProgressError as exc:
                session.transition(SessionState.FAILED)
                yield events.error(exc.message)
                yield events.complete(False, exc.message)
                return
            acquired = True

            if self._clear_cache:
                session.transition(SessionState.CLEARING_CACHE)
                yield events.info("Clearing cached databases...")
                cache_result = self._cache_manager.clear()
                session.cache_files_removed = list(cache_result.files_deleted)
                yield events.info(cache_result.message)
                for name in cache_result.files_deleted:
                    yield events.log(f"  Deleted: {name}")
                yield events.info("Fresh databases will be downloaded...")

            session.transition(SessionState.RUNNING)
            yield events.status("Starting proxy scraper and checker...")
            logger.info("Streaming run started", extra=extra)

            self._run_task = asyncio.create_task(self._drive(binary))
            _background_tasks.add(self._run_task)
            self._run_task.add_done_callback(_background_tasks.discard)

            while True:
                item = await self._queue.get()
                if item is _DONE:
                    break
                yield item  # type: ignore[misc]

            result = await self._run_task
            if not result.started:
                session.transition(SessionState.FAILED)
                yield events.error(result.message)
                yield events.complete(False, result.message)
                return

            session.exit_code = result.exit_code
            output_dir = self._resolver.resolve()
            records = self._parser.parse(output_dir)
            stats = compute_stats(records)
            if result.success:
                message = "Proxy check completed successfully!"
            else:
                message = f"Process exited with code {result.exit_code}"

            session.transition(
                SessionState.COMPLETED if result.success else SessionState.FAILED
            )
            logger.info(
                "Streaming run finished: %d proxies in %s",
                len(records),
                output_dir,
                extra={**extra, "exit_code": result.exit_code, "output_dir": str(output_dir)},
            )
            yield events.complete(result.success, message, stats, len(records))
        finally:
            self._closed = True
            self._terminate_process()
            if acquired and self._run_task is None:
                # a started run task holds the lock until the checker exits
                self._run_lock.release(self._owner)

    # ------------------------------------------------------------------
    # Runner plumbing
    # ------------------------------------------------------------------

    async def _drive(self, binary: Path) -> RunResult:
        try:
            return await self._runner.run(
                self._on_output, binary=binary, on_spawn=self._attach
            )
        finally:
            self._run_lock.release(self._owner)
            self._queue.put_nowait(_DONE)

    def _attach(self, process: asyncio.subprocess.Process) -> None:
        self.session.process = process
        if self._closed:
            self._terminate_process()

    def _on_output(self, stream: str, text: str) -> None:
        """Split one chunk into line events and queue them in order."""
        for line in text.split("\n"):
            if not line.strip():
                continue
            if stream == STDERR:
                event_type = classify_line(line)
            else:
                event_type = EventType.LOG
            self._queue.put_nowait(StreamEvent(type=event_type, message=line.rstrip()))

    def _terminate_process(self) -> None:
        """SIGTERM the checker if it is still running (client went away)."""
        process = self.session.process
        if process is None or process.returncode is not None:
            return
        logger.info(
            "Client disconnected from log stream, terminating proxy checker (pid %d)",
            process.pid,
            extra={"session_id": self.session.id},
        )
        try:
            process.terminate()
        except ProcessLookupError:
            pass
        if not self.session.is_terminal:
            self.session.transition(SessionState.FAILED)
