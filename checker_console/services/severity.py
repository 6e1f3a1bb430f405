"""Severity classification for the checker's standard-error lines.

The checker logs through ``tracing`` on stderr, so each line carries its
level as plain text. Rules are checked in order and the first substring hit
wins; a line matching none of them is a plain ``log`` event. Standard-output
lines are never classified.
"""

from __future__ import annotations

from checker_console.models.events import EventType

SEVERITY_RULES: tuple[tuple[str, EventType], ...] = (
    ("ERROR", EventType.ERROR),
    ("WARN", EventType.WARNING),
    ("INFO", EventType.INFO),
)


def classify_line(
    line: str,
    rules: tuple[tuple[str, EventType], ...] = SEVERITY_RULES,
    default: EventType = EventType.LOG,
) -> EventType:
    """Return the event type of the first rule whose pattern occurs in *line*."""
    for pattern, event_type in rules:
        if pattern in line:
            return event_type
    return default
