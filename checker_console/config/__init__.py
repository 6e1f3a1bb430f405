"""Configuration module: environment-driven settings."""

from checker_console.config.settings import DEFAULT_OUTPUT_DIR, ConsoleSettings

__all__ = ["DEFAULT_OUTPUT_DIR", "ConsoleSettings"]
