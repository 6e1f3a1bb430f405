"""Summary counts over a normalized record set."""

from __future__ import annotations

from collections.abc import Iterable

from checker_console.models.records import ProxyProtocol, ProxyRecord, ProxyStats, ProxyStatus

_HTTP_FAMILY = frozenset({ProxyProtocol.HTTP, ProxyProtocol.HTTPS})


def compute_stats(records: Iterable[ProxyRecord]) -> ProxyStats:
    total = working = http = socks4 = socks5 = 0
    for record in records:
        total += 1
        if record.status is ProxyStatus.WORKING:
            working += 1
        if record.protocol in _HTTP_FAMILY:
            http += 1
        elif record.protocol is ProxyProtocol.SOCKS4:
            socks4 += 1
        elif record.protocol is ProxyProtocol.SOCKS5:
            socks5 += 1
    return ProxyStats(total=total, working=working, http=http, socks4=socks4, socks5=socks5)
