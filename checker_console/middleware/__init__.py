"""Middleware package: error hierarchy and request logging."""

from checker_console.middleware.error_handler import (
    ArtifactNotFoundError,
    ConsoleError,
    InvalidProtocolError,
    RunInProgressError,
    register_error_handlers,
)
from checker_console.middleware.request_log import RequestLogMiddleware

__all__ = [
    "ArtifactNotFoundError",
    "ConsoleError",
    "InvalidProtocolError",
    "RequestLogMiddleware",
    "RunInProgressError",
    "register_error_handlers",
]
