"""Data models for audit logging."""

from dataclasses import dataclass, field
from typing import Any

__all__ = ["LogEvent", "LOG_LEVELS"]

LOG_LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARN", "ERROR"})


@dataclass
class LogEvent:
    """Structured log event for JSONL logging.

    Attributes
    ----------
    ts : str
        ISO8601 timestamp with microseconds.
    run_id : str
        Run identifier the event belongs to.
    level : str
        Log level (DEBUG, INFO, WARN, ERROR).
    event : str
        Event type identifier (e.g., "cluster_refined").
    stage : str | None
        Component or stage that emitted the event.
    rid : str | None
        Record identifier if the event concerns a single record.
    data : dict[str, Any]
        Event-specific payload.
    """

    ts: str
    run_id: str
    level: str
    event: str
    stage: str | None = None
    rid: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
