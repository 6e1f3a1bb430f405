"""Pydantic Settings for the checker console.

Environment variables use the CHECKER_ prefix (e.g. CHECKER_PORT=8080).
The variables baked into the container image (RUST_BINARY_PATH, OUTPUT_DIR,
CONFIG_PATH, CACHE_DIR, PORT, RUN_INITIAL_CHECK) are accepted as aliases.
"""

from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

DEFAULT_OUTPUT_DIR = "/app/out"


class ConsoleSettings(BaseSettings):
    """Checker console configuration validated from environment variables."""

    # Service
    host: str = "0.0.0.0"
    port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("CHECKER_PORT", "PORT", "port"),
    )
    log_level: str = "INFO"

    # External tool
    binary_path: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CHECKER_BINARY_PATH", "RUST_BINARY_PATH", "binary_path"),
    )
    binary_search_paths: list[str] = [
        "/usr/local/bin/proxy-scraper-checker",
        "/app/proxy-scraper-checker",
        "./proxy-scraper-checker",
        "./target/release/proxy-scraper-checker",
    ]
    config_path: str = Field(
        default="/app/config.toml",
        validation_alias=AliasChoices("CHECKER_CONFIG_PATH", "CONFIG_PATH", "config_path"),
    )
    tool_log_level: str = "info"  # forwarded as RUST_LOG
    chunk_size: int = Field(default=4096, ge=64)

    # Result artifacts
    output_dir: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CHECKER_OUTPUT_DIR", "OUTPUT_DIR", "output_dir"),
    )
    output_search_paths: list[str] = [
        DEFAULT_OUTPUT_DIR,
        "~/.local/share/proxy_scraper_checker",
        "./out",
    ]
    proxies_preview_limit: int = Field(default=100, ge=0)

    # Downloaded enrichment databases
    cache_dir: str = Field(
        default="~/.cache/proxy_scraper_checker",
        validation_alias=AliasChoices("CHECKER_CACHE_DIR", "CACHE_DIR", "cache_dir"),
    )

    # Run control
    enforce_single_run: bool = True
    run_initial_check: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "CHECKER_RUN_INITIAL_CHECK", "RUN_INITIAL_CHECK", "run_initial_check"
        ),
    )

    model_config = {"env_prefix": "CHECKER_", "populate_by_name": True}

    def binary_candidates(self) -> list[str]:
        """Executable candidates in priority order (explicit path first)."""
        candidates = [self.binary_path] if self.binary_path else []
        return candidates + [p for p in self.binary_search_paths if p]

    def output_candidates(self) -> list[str]:
        """Output directory candidates in priority order (explicit dir first)."""
        candidates = [self.output_dir] if self.output_dir else []
        return candidates + [p for p in self.output_search_paths if p]

    @property
    def default_output_dir(self) -> str:
        return self.output_dir or DEFAULT_OUTPUT_DIR
