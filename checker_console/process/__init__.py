"""Process package: run the external checker and serialize runs."""

from checker_console.process.lock import RUN_IDENTITY, RunLock
from checker_console.process.runner import STDERR, STDOUT, ProcessRunner, RunResult

__all__ = ["RUN_IDENTITY", "STDERR", "STDOUT", "ProcessRunner", "RunLock", "RunResult"]
