"""Shared record types and builders for tests."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from ercluster.classifier import (
    Candidate,
    ClassificationResult,
    ClassifiedCandidate,
)
from ercluster.clustering import Cluster


@dataclass(frozen=True)
class Person:
    """Minimal record: an id plus the field the test classifier compares."""

    id: int
    name: str


def person_id(person: Person) -> int:
    """Id extractor for ``Person`` records."""
    return person.id


class NameClassifier:
    """Duplicate iff names are equal, always with confidence 1.

    Counts its calls so tests can check that known pairs are not re-classified.
    """

    def __init__(self) -> None:
        self.calls = 0

    def classify(self, record1: Person, record2: Person) -> ClassificationResult:
        self.calls += 1
        if record1.name == record2.name:
            return ClassificationResult.duplicate(1.0, "same name")
        return ClassificationResult.non_duplicate(1.0, "different name")


def duplicate(record1: Any, record2: Any, confidence: float = 1.0) -> ClassifiedCandidate[Any]:
    """Build a DUPLICATE classified candidate."""
    return ClassifiedCandidate(Candidate(record1, record2), ClassificationResult.duplicate(confidence))


def non_duplicate(record1: Any, record2: Any, confidence: float = 1.0) -> ClassifiedCandidate[Any]:
    """Build a NON_DUPLICATE classified candidate."""
    return ClassifiedCandidate(Candidate(record1, record2), ClassificationResult.non_duplicate(confidence))


def member_sets(clusters: Sequence[Cluster[Any, Person]]) -> set[frozenset[int]]:
    """Clusters as a set of member id sets, ignoring ids and order."""
    return {cluster.member_ids(person_id) for cluster in clusters}
