"""Spawn the proxy checker and relay its output as it arrives.

The checker is run with no arguments from the directory that holds its
``config.toml``. Standard output and standard error are read concurrently in
fixed-size chunks; every chunk is handed to the caller's sink right away so
that a streaming client sees output while the run is still going.

Every outcome (missing binary, spawn failure, non-zero exit, success) is
returned as a :class:`RunResult`. Only cancellation propagates.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from checker_console.discovery.binary import BinaryLocator

logger = logging.getLogger(__name__)

STDOUT = "stdout"
STDERR = "stderr"

# sink(stream_name, decoded_chunk)
OutputSink = Callable[[str, str], None]
SpawnHook = Callable[[asyncio.subprocess.Process], None]


@dataclass(frozen=True)
class RunResult:
    """Terminal outcome of one checker invocation.

    ``exit_code`` is ``None`` when the process never started.
    """

    success: bool
    message: str
    exit_code: int | None = None

    @property
    def started(self) -> bool:
        return self.exit_code is not None


class ProcessRunner:
    """Runs the external checker binary.

    Parameters
    ----------
    locator:
        Resolves the executable when the caller does not pass one.
    config_path:
        Path of the checker's ``config.toml``; its directory is the working
        directory of the child process.
    tool_log_level:
        Forwarded to the child as ``RUST_LOG``.
    chunk_size:
        Maximum bytes read from a pipe per chunk.
    """

    def __init__(
        self,
        *,
        locator: BinaryLocator,
        config_path: str,
        tool_log_level: str = "info",
        chunk_size: int = 4096,
    ) -> None:
        self._locator = locator
        self._config_path = config_path
        self._tool_log_level = tool_log_level
        self._chunk_size = chunk_size

    @property
    def working_dir(self) -> Path:
        return Path(self._config_path).expanduser().parent

    def build_env(self) -> dict[str, str]:
        """Host environment with terminal coloring disabled."""
        env = dict(os.environ)
        env["NO_COLOR"] = "1"
        env["RUST_LOG"] = self._tool_log_level
        return env

    async def run(
        self,
        sink: OutputSink | None = None,
        *,
        binary: Path | None = None,
        on_spawn: SpawnHook | None = None,
    ) -> RunResult:
        """Run the checker to completion.

        Parameters
        ----------
        sink:
            Receives ``(stream, text)`` for every output chunk, in arrival order.
        binary:
            Executable to run; located via the locator when omitted.
        on_spawn:
            Receives the process handle right after a successful spawn.
        """
        if binary is None:
            binary = self._locator.locate()
        if binary is None:
            return RunResult(False, "Proxy checker binary not found")

        logger.info("Starting proxy checker: %s", binary, extra={"binary_path": str(binary)})
        try:
            process = await asyncio.create_subprocess_exec(
                str(binary),
                cwd=str(self.working_dir),
                env=self.build_env(),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            logger.error("Failed to start proxy checker: %s", exc, extra={"binary_path": str(binary)})
            return RunResult(False, f"Failed to start proxy checker: {exc}")

        if on_spawn is not None:
            on_spawn(process)

        try:
            await asyncio.gather(
                self._pump(process.stdout, STDOUT, sink),
                self._pump(process.stderr, STDERR, sink),
            )
            code = await process.wait()
        except asyncio.CancelledError:
            if process.returncode is None:
                logger.info("Run cancelled, terminating proxy checker (pid %d)", process.pid)
                try:
                    process.terminate()
                except ProcessLookupError:
                    pass
            raise

        if code == 0:
            logger.info("Proxy checker completed successfully", extra={"exit_code": code})
            return RunResult(True, "Proxy check completed successfully", code)

        logger.error("Proxy checker exited with code %d", code, extra={"exit_code": code})
        return RunResult(False, f"Proxy checker failed with exit code {code}", code)

    async def _pump(
        self,
        stream: asyncio.StreamReader | None,
        name: str,
        sink: OutputSink | None,
    ) -> None:
        """Forward chunks from one pipe until EOF."""
        if stream is None:
            return
        while True:
            chunk = await stream.read(self._chunk_size)
            if not chunk:
                break
            text = chunk.decode("utf-8", errors="replace")
            logger.info("[checker] %s", text.strip(), extra={"stream": name})
            if sink is None:
                continue
            try:
                sink(name, text)
            except Exception:
                logger.exception("Output sink error on %s", name)
