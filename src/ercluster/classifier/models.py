"""Data models for candidate pairs and their classification.

Records are opaque to the engine: any type works as long as an id extractor
can map it to a hashable, comparable identifier.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Generic, TypeVar

__all__ = [
    "Classification",
    "ClassificationResult",
    "Candidate",
    "ClassifiedCandidate",
]

T = TypeVar("T")


class Classification(StrEnum):
    """Outcome of a pairwise classification.

    Attributes
    ----------
    DUPLICATE : str
        Both records describe the same entity.
    NON_DUPLICATE : str
        The records describe different entities.
    UNKNOWN : str
        Not enough information to decide either way.
    """

    DUPLICATE = "duplicate"
    NON_DUPLICATE = "non_duplicate"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ClassificationResult:
    """Classification plus confidence.

    Attributes
    ----------
    classification : Classification
        The verdict.
    confidence : float
        Confidence in [0, 1]. Not a calibrated probability.
    explanation : str
        Human-readable hint, e.g. the rule that fired.
    """

    classification: Classification
    confidence: float
    explanation: str = ""

    def __post_init__(self) -> None:
        """Validate confidence range."""
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0, 1], got {self.confidence}")

    @staticmethod
    def duplicate(confidence: float = 1.0, explanation: str = "") -> "ClassificationResult":
        """Build a DUPLICATE result."""
        return ClassificationResult(Classification.DUPLICATE, confidence, explanation)

    @staticmethod
    def non_duplicate(confidence: float = 1.0, explanation: str = "") -> "ClassificationResult":
        """Build a NON_DUPLICATE result."""
        return ClassificationResult(Classification.NON_DUPLICATE, confidence, explanation)

    @staticmethod
    def unknown(explanation: str = "") -> "ClassificationResult":
        """Build an UNKNOWN result with zero confidence."""
        return ClassificationResult(Classification.UNKNOWN, 0.0, explanation)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary.

        Returns
        -------
        dict[str, Any]
            Dictionary representation.
        """
        return {
            "classification": self.classification.value,
            "confidence": self.confidence,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class Candidate(Generic[T]):
    """Ordered pair of records under comparison.

    ``Candidate(a, b)`` and ``Candidate(b, a)`` are distinct candidates.

    Attributes
    ----------
    record1 : T
        First record (the newer one in online settings).
    record2 : T
        Second record.
    """

    record1: T
    record2: T


@dataclass(frozen=True)
class ClassifiedCandidate(Generic[T]):
    """Candidate together with its classification.

    Attributes
    ----------
    candidate : Candidate[T]
        The compared pair.
    classification_result : ClassificationResult
        Verdict for the pair.
    """

    candidate: Candidate[T]
    classification_result: ClassificationResult

    @property
    def classification(self) -> Classification:
        """Shortcut for ``classification_result.classification``."""
        return self.classification_result.classification

    @property
    def is_duplicate(self) -> bool:
        """True if the pair was classified as duplicate."""
        return self.classification == Classification.DUPLICATE
