"""Request logging middleware.

Assigns (or propagates) an ``X-Request-ID`` for every incoming request,
publishes it to the logging context so relayed tool output and run
lifecycle entries carry it, and logs one ``METHOD path`` line per request.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from checker_console.logging_config import request_id_var

logger = logging.getLogger(__name__)


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Starlette middleware that tags and logs each request.

    If the incoming request already carries an ``X-Request-ID`` header the
    provided value is reused; otherwise a new UUID4 is generated. The ID is
    stored in ``request.state.request_id`` and returned in the
    ``X-Request-ID`` response header.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            logger.info("%s %s", request.method, request.url.path)
            response: Response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers["X-Request-ID"] = request_id
        return response
