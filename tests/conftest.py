"""Shared test fixtures for the console test suite."""

from __future__ import annotations

import json
import stat
from pathlib import Path

import pytest

from checker_console.config.settings import ConsoleSettings
from checker_console.discovery.binary import BinaryLocator
from checker_console.discovery.output_dir import OutputDirResolver
from checker_console.process.lock import RunLock
from checker_console.process.runner import ProcessRunner
from checker_console.services.cache_manager import CacheManager
from checker_console.services.results import ResultParser
from checker_console.services.stream_session import StreamingSession


# ---------------------------------------------------------------------------
# Keep host deployment variables out of the settings under test
# ---------------------------------------------------------------------------

_DEPLOYMENT_ENV = (
    "RUST_BINARY_PATH",
    "OUTPUT_DIR",
    "CONFIG_PATH",
    "CACHE_DIR",
    "PORT",
    "RUN_INITIAL_CHECK",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _DEPLOYMENT_ENV:
        monkeypatch.delenv(key, raising=False)


# ---------------------------------------------------------------------------
# Fake checker binaries and result artifacts
# ---------------------------------------------------------------------------


@pytest.fixture
def make_script():
    """Factory writing an executable /bin/sh script that stands in for the checker."""

    def _make(directory: Path, body: str, name: str = "proxy-scraper-checker") -> Path:
        path = directory / name
        path.write_text("#!/bin/sh\n" + body)
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _make


@pytest.fixture
def sample_entries() -> list[dict]:
    """Two ``proxies.json`` elements: one measured and enriched, one bare."""
    return [
        {
            "protocol": "http",
            "host": "1.2.3.4",
            "port": 8080,
            "timeout": 1.25,
            "exit_ip": "1.2.3.4",
            "asn": {"autonomous_system_organization": "Example Net"},
            "geolocation": {"country": {"names": {"en": "Germany"}}},
        },
        {
            "protocol": "socks5",
            "host": "9.8.7.6",
            "port": 1080,
            "username": "user",
            "password": "secret",
        },
    ]


@pytest.fixture
def write_results():
    """Factory writing ``proxies.json`` into an output directory."""

    def _write(output_dir: Path, entries: list) -> Path:
        output_dir.mkdir(parents=True, exist_ok=True)
        path = output_dir / "proxies.json"
        path.write_text(json.dumps(entries))
        return path

    return _write


@pytest.fixture
def write_text_results():
    """Factory writing ``proxies/<protocol>.txt`` into an output directory."""

    def _write(output_dir: Path, lines: list[str], protocol: str = "all") -> Path:
        text_dir = output_dir / "proxies"
        text_dir.mkdir(parents=True, exist_ok=True)
        path = text_dir / f"{protocol}.txt"
        path.write_text("\n".join(lines) + "\n")
        return path

    return _write


@pytest.fixture
def results_script(workspace: Path, make_script, sample_entries):
    """Factory for a checker that logs, writes ``sample_entries`` to out/ and exits."""

    def _make(exit_code: int = 0, preamble: str = "") -> Path:
        target = workspace / "out" / "proxies.json"
        return make_script(
            workspace / "bin",
            preamble
            + f'mkdir -p "{target.parent}"\n'
            + f"cat > \"{target}\" <<'EOF'\n{json.dumps(sample_entries)}\nEOF\n"
            + f"exit {exit_code}\n",
        )

    return _make


# ---------------------------------------------------------------------------
# Settings and component fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Deployment-like tree: bin/, out/, cache/, config.toml."""
    (tmp_path / "bin").mkdir()
    (tmp_path / "cache").mkdir()
    (tmp_path / "config.toml").write_text("# checker config\n")
    return tmp_path


@pytest.fixture
def settings(workspace: Path) -> ConsoleSettings:
    """Test settings pointing every location into the workspace."""
    return ConsoleSettings(
        binary_path=str(workspace / "bin" / "proxy-scraper-checker"),
        binary_search_paths=[],
        output_dir=str(workspace / "out"),
        output_search_paths=[],
        config_path=str(workspace / "config.toml"),
        cache_dir=str(workspace / "cache"),
    )


@pytest.fixture
def locator(settings: ConsoleSettings) -> BinaryLocator:
    return BinaryLocator(settings.binary_candidates)


@pytest.fixture
def resolver(settings: ConsoleSettings) -> OutputDirResolver:
    return OutputDirResolver(settings.output_candidates, settings.default_output_dir)


@pytest.fixture
def runner(settings: ConsoleSettings, locator: BinaryLocator) -> ProcessRunner:
    return ProcessRunner(locator=locator, config_path=settings.config_path)


@pytest.fixture
def cache_manager(settings: ConsoleSettings) -> CacheManager:
    return CacheManager(settings.cache_dir)


@pytest.fixture
def run_lock() -> RunLock:
    return RunLock()


@pytest.fixture
def make_session(locator, runner, resolver, cache_manager, run_lock):
    """Factory for streaming sessions wired to the workspace fixtures."""

    def _make(clear_cache: bool = False) -> StreamingSession:
        return StreamingSession(
            locator=locator,
            runner=runner,
            resolver=resolver,
            parser=ResultParser(),
            cache_manager=cache_manager,
            run_lock=run_lock,
            clear_cache=clear_cache,
        )

    return _make
