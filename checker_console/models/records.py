"""Canonical proxy record and aggregate statistics models.

Records are rebuilt from the tool's artifacts on every read; nothing here is
cached. JSON output uses camelCase field names (``displayString``,
``timeoutSeconds``, ...).
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

NOT_AVAILABLE = "N/A"


class ProxyProtocol(str, Enum):
    """Proxy protocols reported by the checker."""

    HTTP = "HTTP"
    HTTPS = "HTTPS"
    SOCKS4 = "SOCKS4"
    SOCKS5 = "SOCKS5"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: object) -> ProxyProtocol:
        """Map a raw protocol value to a member, UNKNOWN when unrecognized."""
        if not isinstance(value, str) or not value:
            return cls.UNKNOWN
        try:
            return cls(value.upper())
        except ValueError:
            return cls.UNKNOWN


class ProxyStatus(str, Enum):
    """Derived proxy status.

    ``Working`` means the structured artifact carried a timeout measurement,
    ``Listed`` means the proxy only appeared in a text artifact.
    """

    WORKING = "Working"
    UNKNOWN = "Unknown"
    LISTED = "Listed"


class ProxyRecord(BaseModel):
    """Format-independent view of one proxy from the checker's output.

    Fields the artifact does not provide (or provides in an unusable form)
    hold ``"N/A"``.
    """

    display_string: str = Field(..., min_length=1)
    protocol: ProxyProtocol = ProxyProtocol.UNKNOWN
    host: str = NOT_AVAILABLE
    port: int | str = NOT_AVAILABLE
    timeout_seconds: float | str = NOT_AVAILABLE
    exit_ip: str = NOT_AVAILABLE
    status: ProxyStatus = ProxyStatus.UNKNOWN
    asn_organization: str = NOT_AVAILABLE
    country_name: str = NOT_AVAILABLE

    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ProxyStats(BaseModel):
    """Summary counts over a record set (HTTP and HTTPS are merged)."""

    total: int = 0
    working: int = 0
    http: int = 0
    socks4: int = 0
    socks5: int = 0
