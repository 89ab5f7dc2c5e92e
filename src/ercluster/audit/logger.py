"""Structured audit logger for JSONL event logging.

Provides append-only structured event logging to JSONL files with
a persistent file handle for efficient I/O.
"""

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

from ercluster.audit.models import LOG_LEVELS, LogEvent
from ercluster.utils import get_iso_timestamp

__all__ = ["AuditLogger"]


class AuditLogger:
    """JSONL audit logger with persistent file handle.

    Writes structured log events to a JSONL file (one JSON object per line).
    Events are append-only and flushed after each write for durability.

    Attributes
    ----------
    run_id : str
        Unique run identifier.
    log_path : Path
        Path to JSONL log file.
    current_stage : str | None
        Current stage name for context.
    """

    def __init__(self, run_id: str, log_path: Path) -> None:
        """Initialize audit logger and open file handle.

        Parameters
        ----------
        run_id : str
            Unique run identifier.
        log_path : Path
            Path to JSONL log file.
        """
        self.run_id = run_id
        self.log_path = Path(log_path)
        self.current_stage: str | None = None

        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self.log_path.open("a", encoding="utf-8")

    def __enter__(self) -> "AuditLogger":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager and close file."""
        self.close()

    def close(self) -> None:
        """Flush and close the log file handle."""
        if not self._file.closed:
            self._file.flush()
            self._file.close()

    def set_stage(self, stage: str | None) -> None:
        """Set current stage context.

        Parameters
        ----------
        stage : str | None
            Stage name or None to clear.
        """
        self.current_stage = stage

    def event(
        self,
        event_type: str,
        data: dict[str, Any] | None = None,
        level: str = "INFO",
        stage: str | None = None,
        rid: str | None = None,
    ) -> None:
        """Write structured event to log.

        Parameters
        ----------
        event_type : str
            Event type identifier (e.g., "cluster_refined").
        data : dict[str, Any] | None, optional
            Event-specific data payload.
        level : str, optional
            Log level ("DEBUG", "INFO", "WARN", "ERROR").
        stage : str | None, optional
            Stage identifier, uses current_stage if not provided.
        rid : str | None, optional
            Record identifier if event is record-specific.

        Raises
        ------
        ValueError
            If level is not a known log level.
        """
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {level}")

        if data is None:
            data = {}

        if stage is None:
            stage = self.current_stage

        log_event = LogEvent(
            ts=get_iso_timestamp(),
            run_id=self.run_id,
            level=level,
            event=event_type,
            stage=stage,
            rid=rid,
            data=data,
        )

        self._write_event(log_event)

    def _write_event(self, event: LogEvent) -> None:
        """Write event to JSONL file and flush."""
        json.dump(
            asdict(event),
            self._file,
            ensure_ascii=False,
            separators=(",", ":"),
            default=str,
        )
        self._file.write("\n")
        self._file.flush()

    def run_started(self, command: list[str], parameters: dict[str, Any]) -> None:
        """Log run_started event.

        Parameters
        ----------
        command : list[str]
            Command-line arguments.
        parameters : dict[str, Any]
            Configuration parameters.
        """
        self.event(
            "run_started",
            data={"command": command, "parameters": parameters},
        )

    def run_finished(
        self,
        status: str,
        duration_seconds: float,
        clusters_emitted: int | None = None,
    ) -> None:
        """Log run_finished event.

        Parameters
        ----------
        status : str
            Run status ("success", "failed").
        duration_seconds : float
            Total execution time in seconds.
        clusters_emitted : int | None, optional
            Total clusters written.
        """
        data: dict[str, Any] = {
            "status": status,
            "duration_seconds": duration_seconds,
        }
        if clusters_emitted is not None:
            data["clusters_emitted"] = clusters_emitted

        self.event("run_finished", data=data)

    def error(
        self,
        exception_class: str,
        message: str,
        stage: str | None = None,
        rid: str | None = None,
    ) -> None:
        """Log error event.

        Parameters
        ----------
        exception_class : str
            Exception class name.
        message : str
            Error message.
        stage : str | None, optional
            Stage where error occurred.
        rid : str | None, optional
            Record identifier if error is record-specific.
        """
        data: dict[str, Any] = {
            "exception_class": exception_class,
            "message": message,
        }
        self.event("error", data=data, stage=stage, level="ERROR", rid=rid)
