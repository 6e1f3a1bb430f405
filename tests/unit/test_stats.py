"""Unit tests for summary statistics."""

from checker_console.models.records import ProxyProtocol, ProxyRecord, ProxyStatus
from checker_console.services.stats import compute_stats


def _record(protocol: ProxyProtocol, status: ProxyStatus = ProxyStatus.UNKNOWN) -> ProxyRecord:
    return ProxyRecord(display_string="x:1", protocol=protocol, status=status)


def test_empty_set_has_zero_counts():
    stats = compute_stats([])
    assert stats.model_dump() == {"total": 0, "working": 0, "http": 0, "socks4": 0, "socks5": 0}


def test_http_and_https_are_merged():
    records = (
        [_record(ProxyProtocol.HTTP)] * 3
        + [_record(ProxyProtocol.HTTPS)] * 2
        + [_record(ProxyProtocol.SOCKS4)] * 2
        + [_record(ProxyProtocol.SOCKS5)] * 3
    )
    stats = compute_stats(records)
    assert stats.total == 10
    assert stats.http == 5
    assert stats.socks4 == 2
    assert stats.socks5 == 3


def test_working_counts_only_measured_records():
    records = [
        _record(ProxyProtocol.HTTP, ProxyStatus.WORKING),
        _record(ProxyProtocol.SOCKS5, ProxyStatus.WORKING),
        _record(ProxyProtocol.SOCKS5, ProxyStatus.LISTED),
        _record(ProxyProtocol.UNKNOWN),
    ]
    stats = compute_stats(records)
    assert stats.total == 4
    assert stats.working == 2
    assert stats.http + stats.socks4 + stats.socks5 == 3
