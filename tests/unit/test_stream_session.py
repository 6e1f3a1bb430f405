"""Unit tests for the live-log streaming session."""

import asyncio
import signal
from pathlib import Path

import pytest

from checker_console.models.events import EventType, StreamEvent
from checker_console.services.cache_manager import CACHE_FILES
from checker_console.services.stream_session import (
    RunSession,
    SessionState,
    SessionStateError,
    StreamingSession,
)


async def _collect(session: StreamingSession) -> list[StreamEvent]:
    return [event async for event in session.events()]


@pytest.fixture
def checker(workspace: Path, make_script):
    """Install a fake checker running the given shell body."""
    return lambda body: make_script(workspace / "bin", body)


class TestShortcuts:
    @pytest.mark.asyncio
    async def test_missing_binary(self, make_session, run_lock):
        session = make_session()
        events = await _collect(session)

        assert events[0].type is EventType.STATUS
        assert events[0].message == "Connected to log stream"
        assert [(e.type, e.message) for e in events[1:]] == [
            (EventType.ERROR, "Proxy checker binary not found"),
            (EventType.COMPLETE, "Proxy checker binary not found"),
        ]
        assert events[-1].success is False
        assert session.session.state is SessionState.FAILED
        assert run_lock.locked is False

    @pytest.mark.asyncio
    async def test_busy_lock(self, workspace, checker, make_session, run_lock):
        checker("exit 0\n")
        run_lock.acquire("other")

        events = await _collect(make_session())

        assert [e.type for e in events] == [EventType.STATUS, EventType.ERROR, EventType.COMPLETE]
        assert events[1].message == "A proxy check is already running"
        assert events[-1].success is False
        assert run_lock.holder == "other"

    @pytest.mark.asyncio
    async def test_spawn_failure(self, workspace, make_session, run_lock):
        binary = workspace / "bin" / "proxy-scraper-checker"
        binary.write_text("#!/bin/sh\nexit 0\n")
        binary.chmod(0o644)

        events = await _collect(make_session())

        assert [e.type for e in events] == [
            EventType.STATUS,
            EventType.STATUS,
            EventType.ERROR,
            EventType.COMPLETE,
        ]
        assert events[2].message.startswith("Failed to start proxy checker:")
        assert events[-1].success is False
        assert run_lock.locked is False


class TestFullRun:
    @pytest.mark.asyncio
    async def test_output_is_classified_and_stats_reported(self, results_script, make_session, run_lock):
        results_script(
            preamble='echo "scraping sources"\n'
            'echo "2024 INFO checking proxies" >&2\n'
            'echo "2024  WARN slow source" >&2\n'
            'echo "2024 ERROR source failed" >&2\n'
            'echo "plain stderr" >&2\n'
        )
        session = make_session()

        events = await _collect(session)

        assert events[0].message == "Connected to log stream"
        assert events[1].type is EventType.STATUS
        assert events[1].message == "Starting proxy scraper and checker..."

        output = {e.message: e.type for e in events[2:-1]}
        assert output == {
            "scraping sources": EventType.LOG,
            "2024 INFO checking proxies": EventType.INFO,
            "2024  WARN slow source": EventType.WARNING,
            "2024 ERROR source failed": EventType.ERROR,
            "plain stderr": EventType.LOG,
        }

        final = events[-1]
        assert final.type is EventType.COMPLETE
        assert final.success is True
        assert final.message == "Proxy check completed successfully!"
        assert final.total_proxies == 2
        assert final.stats.total == 2
        assert final.stats.working == 1
        assert final.stats.http == 1
        assert final.stats.socks5 == 1

        assert session.session.state is SessionState.COMPLETED
        assert session.session.exit_code == 0
        assert run_lock.locked is False

    @pytest.mark.asyncio
    async def test_stdout_warning_text_is_not_classified(self, workspace, checker, make_session):
        checker('echo "ERROR in stdout"\n')

        events = await _collect(make_session())

        relayed = [e for e in events if e.message == "ERROR in stdout"]
        assert [e.type for e in relayed] == [EventType.LOG]

    @pytest.mark.asyncio
    async def test_non_zero_exit(self, workspace, checker, make_session):
        checker('echo "partial"\nexit 2\n')
        session = make_session()

        events = await _collect(session)

        final = events[-1]
        assert final.success is False
        assert final.message == "Process exited with code 2"
        assert final.total_proxies == 0
        assert session.session.state is SessionState.FAILED
        assert session.session.exit_code == 2

    @pytest.mark.asyncio
    async def test_exactly_one_terminal_event(self, workspace, checker, make_session):
        checker('echo "a"\necho "b" >&2\n')

        events = await _collect(make_session())

        assert [e.is_terminal for e in events].count(True) == 1
        assert events[-1].is_terminal


class TestCacheClearing:
    @pytest.mark.asyncio
    async def test_cache_events_precede_start(self, workspace, checker, make_session):
        checker("exit 0\n")
        cache = workspace / "cache"
        (cache / "asn_database.mmdb").write_bytes(b"a")
        (cache / "geolocation_database.mmdb").write_bytes(b"g")
        session = make_session(clear_cache=True)

        events = await _collect(session)

        assert [(e.type, e.message) for e in events[1:7]] == [
            (EventType.INFO, "Clearing cached databases..."),
            (EventType.INFO, "Cleared 2 cache files"),
            (EventType.LOG, "  Deleted: asn_database.mmdb"),
            (EventType.LOG, "  Deleted: geolocation_database.mmdb"),
            (EventType.INFO, "Fresh databases will be downloaded..."),
            (EventType.STATUS, "Starting proxy scraper and checker..."),
        ]
        assert session.session.cache_files_removed == [
            "asn_database.mmdb",
            "geolocation_database.mmdb",
        ]
        assert not any((cache / name).exists() for name in CACHE_FILES)

    @pytest.mark.asyncio
    async def test_cache_untouched_without_flag(self, workspace, checker, make_session):
        checker("exit 0\n")
        (workspace / "cache" / "asn_database.mmdb").write_bytes(b"a")

        events = await _collect(make_session())

        assert (workspace / "cache" / "asn_database.mmdb").exists()
        assert all(e.message != "Clearing cached databases..." for e in events)


class TestDisconnect:
    @pytest.mark.asyncio
    async def test_closing_stream_terminates_checker(self, workspace, checker, make_session, run_lock):
        checker('echo "started"\nexec sleep 30\n')
        session = make_session()
        stream = session.events()

        async for event in stream:
            if event.message == "started":
                break
        await stream.aclose()

        process = session.session.process
        assert process is not None
        returncode = await asyncio.wait_for(process.wait(), timeout=10)
        assert returncode == -signal.SIGTERM

        result = await asyncio.wait_for(session._run_task, timeout=10)
        assert result.success is False
        assert session.session.state is SessionState.FAILED
        assert run_lock.locked is False

    @pytest.mark.asyncio
    async def test_lock_held_until_terminated_checker_exits(self, checker, make_session, run_lock):
        checker('echo "started"\nexec sleep 30\n')
        session = make_session()
        stream = session.events()

        async for event in stream:
            if event.message == "started":
                break
        await stream.aclose()

        assert run_lock.holder == f"stream:{session.session.id}"
        rejected = await _collect(make_session())
        assert [e.type for e in rejected] == [EventType.STATUS, EventType.ERROR, EventType.COMPLETE]
        assert rejected[1].message == "A proxy check is already running"

        await asyncio.wait_for(session._run_task, timeout=10)
        assert run_lock.locked is False


class TestRunSession:
    def test_legal_transitions(self):
        run = RunSession()
        run.transition(SessionState.CLEARING_CACHE)
        run.transition(SessionState.RUNNING)
        run.transition(SessionState.COMPLETED)
        assert run.is_terminal is True

    def test_terminal_state_cannot_be_left(self):
        run = RunSession()
        run.transition(SessionState.FAILED)
        with pytest.raises(SessionStateError):
            run.transition(SessionState.RUNNING)

    def test_cannot_complete_before_running(self):
        with pytest.raises(SessionStateError):
            RunSession().transition(SessionState.COMPLETED)
