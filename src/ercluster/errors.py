"""Error types and exception collection for clustering.

Two classes of failures exist:

- Invariant violations (``InvariantError``) signal a broken precondition inside
  the engine and abort the current operation.
- Collaborator failures (``ClassificationError``) come from the injected
  classifier. The engine propagates them; callers decide between
  collect-and-continue and fail-fast with an ``ExceptionContext``.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

__all__ = [
    "ClusteringError",
    "InvariantError",
    "ClassificationError",
    "ExceptionContext",
]

R = TypeVar("R")


class ClusteringError(Exception):
    """Base class for all errors raised by ercluster."""


class InvariantError(ClusteringError):
    """Raised when an internal invariant of the engine does not hold."""


class ClassificationError(ClusteringError):
    """Raised when a classifier fails on a candidate."""

    def __init__(self, message: str, candidate: Any | None = None) -> None:
        """Initialize classification error.

        Parameters
        ----------
        message : str
            Error message.
        candidate : Any | None, optional
            Candidate that could not be classified.
        """
        super().__init__(message)
        self.candidate = candidate


@dataclass
class ExceptionContext:
    """Collects exceptions raised by fallible collaborators.

    Attributes
    ----------
    fail_fast : bool
        Re-raise the first exception instead of collecting it, by default False.
    exceptions : list[Exception]
        Exceptions captured so far (collect mode only).
    """

    fail_fast: bool = False
    exceptions: list[Exception] = field(default_factory=list)

    def safe_execute(self, function: Callable[[], R]) -> R | None:
        """Execute ``function`` under the configured policy.

        Parameters
        ----------
        function : Callable[[], R]
            Zero-argument callable to run.

        Returns
        -------
        R | None
            Return value of ``function``, or None if it raised and the
            exception was collected.
        """
        try:
            return function()
        except Exception as exc:
            if self.fail_fast:
                raise
            self.exceptions.append(exc)
            return None

    def has_errors(self) -> bool:
        """Return True if any exception was collected."""
        return bool(self.exceptions)

    def clear(self) -> None:
        """Forget all collected exceptions."""
        self.exceptions.clear()
