"""Result parsing and normalization.

Turns the checker's artifacts into canonical :class:`ProxyRecord` objects:

- ``proxies.json`` (preferred): an array of objects with protocol, host,
  port, optional credentials, timeout, exit IP and ASN / geolocation
  enrichment.
- ``proxies/all.txt`` (fallback): one proxy URL per line, no metadata.

The structured file wins whenever it parses; the text file is only read when
the JSON is missing or unreadable. No artifact at all is an empty result,
not an error.
"""

from __future__ import annotations

import json
import logging
import math
import re
from datetime import datetime, timezone
from pathlib import Path

from checker_console.discovery.artifacts import has_artifacts, json_path, text_path
from checker_console.models.records import (
    NOT_AVAILABLE,
    ProxyProtocol,
    ProxyRecord,
    ProxyStatus,
)

logger = logging.getLogger(__name__)

# Scheme prefix at the start of a text-artifact line
_PROTOCOL_PREFIX_RE = re.compile(r"^(https?|socks[45]):", re.IGNORECASE)


def _nested(data: dict, *keys: str) -> object | None:
    """Walk nested dicts, returning ``None`` as soon as a level is missing."""
    current: object = data
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def format_proxy_string(raw: dict) -> str:
    """Render ``[protocol://][user:pass@]host:port`` from a structured entry.

    Credentials are included only when both username and password are set.
    """
    text = ""
    protocol = raw.get("protocol")
    if protocol:
        text += f"{str(protocol).lower()}://"
    username = raw.get("username")
    password = raw.get("password")
    if username and password:
        text += f"{username}:{password}@"
    host = raw.get("host")
    port = raw.get("port")
    text += f"{'' if host is None else host}:{'' if port is None else port}"
    return text


def extract_protocol(line: str) -> ProxyProtocol:
    """Protocol from a ``scheme://`` prefix, UNKNOWN when there is none."""
    match = _PROTOCOL_PREFIX_RE.match(line.strip())
    return ProxyProtocol(match.group(1).upper()) if match else ProxyProtocol.UNKNOWN


def _port_value(value: object) -> int | str:
    """Integer port, ``"N/A"`` when missing or not an integer."""
    if isinstance(value, bool):
        return NOT_AVAILABLE
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return NOT_AVAILABLE


def _timeout_value(value: object) -> float | str:
    """Timeout in seconds, ``"N/A"`` when missing, zero or not a number."""
    if not value or isinstance(value, bool):
        return NOT_AVAILABLE
    try:
        seconds = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return NOT_AVAILABLE
    return seconds if math.isfinite(seconds) else NOT_AVAILABLE


def record_from_json(raw: dict) -> ProxyRecord:
    """Build a record from one element of ``proxies.json``.

    A truthy ``timeout`` means the checker measured the proxy, which is
    reported as ``Working``; the console does no liveness check of its own.
    Fields with values of an unexpected type degrade to ``"N/A"`` so the
    element is still counted.
    """
    timeout = raw.get("timeout")
    host = raw.get("host")
    exit_ip = raw.get("exit_ip")
    asn = _nested(raw, "asn", "autonomous_system_organization")
    country = _nested(raw, "geolocation", "country", "names", "en")
    return ProxyRecord(
        display_string=format_proxy_string(raw),
        protocol=ProxyProtocol.parse(raw.get("protocol")),
        host=NOT_AVAILABLE if host is None else str(host),
        port=_port_value(raw.get("port")),
        timeout_seconds=_timeout_value(timeout),
        exit_ip=str(exit_ip) if exit_ip else NOT_AVAILABLE,
        status=ProxyStatus.WORKING if timeout else ProxyStatus.UNKNOWN,
        asn_organization=str(asn) if asn else NOT_AVAILABLE,
        country_name=str(country) if country else NOT_AVAILABLE,
    )


def record_from_line(line: str) -> ProxyRecord:
    """Build a record from one line of a text artifact."""
    text = line.strip()
    return ProxyRecord(
        display_string=text,
        protocol=extract_protocol(text),
        status=ProxyStatus.LISTED,
    )


class ResultParser:
    """Reads whatever artifacts exist in an output directory."""

    def parse(self, output_dir: Path) -> list[ProxyRecord]:
        """Return canonical records for *output_dir* (JSON first, then text)."""
        records = self._parse_json(json_path(output_dir))
        if records is not None:
            return records

        records = self._parse_text(text_path(output_dir))
        if records is not None:
            return records

        return []

    def has_results(self, output_dir: Path) -> bool:
        return has_artifacts(output_dir)

    def last_updated(self, output_dir: Path) -> str | None:
        """ISO-8601 mtime of the JSON artifact, else the text artifact."""
        for path in (json_path(output_dir), text_path(output_dir)):
            try:
                if path.is_file():
                    mtime = path.stat().st_mtime
                    return datetime.fromtimestamp(mtime, tz=timezone.utc).isoformat()
            except OSError:
                return None
        return None

    # ------------------------------------------------------------------
    # Artifact readers: ``None`` means "not usable, try the next format"
    # ------------------------------------------------------------------

    def _parse_json(self, path: Path) -> list[ProxyRecord] | None:
        if not path.is_file():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("Failed to parse JSON results %s: %s", path, exc)
            return None

        if not isinstance(data, list):
            logger.error("JSON results %s are not an array (%s)", path, type(data).__name__)
            return None

        records: list[ProxyRecord] = []
        for index, entry in enumerate(data):
            if not isinstance(entry, dict):
                logger.warning("Skipping non-object entry %d in %s", index, path)
                continue
            records.append(record_from_json(entry))
        return records

    def _parse_text(self, path: Path) -> list[ProxyRecord] | None:
        if not path.is_file():
            return None
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.error("Failed to read text results %s: %s", path, exc)
            return None
        return [record_from_line(line) for line in content.split("\n") if line.strip()]
