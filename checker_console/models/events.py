"""Live-log stream events.

Each event is serialized as one Server-Sent Events frame:
``data: {"type": "...", "message": "..."}\\n\\n``. The terminal ``complete``
event additionally carries ``success``, ``stats`` and ``totalProxies``.
"""

from __future__ import annotations

import json
from enum import Enum

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from checker_console.models.records import ProxyStats


class EventType(str, Enum):
    """Event tags understood by the browser console."""

    STATUS = "status"
    INFO = "info"
    LOG = "log"
    WARNING = "warning"
    ERROR = "error"
    COMPLETE = "complete"


class StreamEvent(BaseModel):
    """One event pushed to a streaming client."""

    type: EventType
    message: str | None = None
    success: bool | None = None
    stats: ProxyStats | None = None
    total_proxies: int | None = None

    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    @property
    def is_terminal(self) -> bool:
        return self.type is EventType.COMPLETE

    def to_sse(self) -> str:
        payload = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        return f"data: {json.dumps(payload)}\n\n"


def status(message: str) -> StreamEvent:
    return StreamEvent(type=EventType.STATUS, message=message)


def info(message: str) -> StreamEvent:
    return StreamEvent(type=EventType.INFO, message=message)


def log(message: str) -> StreamEvent:
    return StreamEvent(type=EventType.LOG, message=message)


def error(message: str) -> StreamEvent:
    return StreamEvent(type=EventType.ERROR, message=message)


def complete(
    success: bool,
    message: str,
    stats: ProxyStats | None = None,
    total_proxies: int | None = None,
) -> StreamEvent:
    return StreamEvent(
        type=EventType.COMPLETE,
        success=success,
        message=message,
        stats=stats,
        total_proxies=total_proxies,
    )
