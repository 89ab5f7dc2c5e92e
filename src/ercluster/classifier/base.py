"""Classifier protocol consumed by the clustering engine."""

from typing import Protocol, TypeVar

from ercluster.classifier.models import Candidate, ClassificationResult, ClassifiedCandidate

__all__ = ["Classifier", "classify_candidate"]

T = TypeVar("T")
T_contra = TypeVar("T_contra", contravariant=True)


class Classifier(Protocol[T_contra]):
    """Pairwise classifier.

    Implementations must be pure with respect to their two inputs: refinement
    caches results and only calls the classifier for pairs it has not seen.
    """

    def classify(self, record1: T_contra, record2: T_contra) -> ClassificationResult:
        """Classify a pair of records."""
        ...


def classify_candidate(classifier: Classifier[T], candidate: Candidate[T]) -> ClassifiedCandidate[T]:
    """Classify a candidate and keep the result next to it.

    Parameters
    ----------
    classifier : Classifier[T]
        Classifier to call.
    candidate : Candidate[T]
        Pair to classify.

    Returns
    -------
    ClassifiedCandidate[T]
        The candidate with its classification result.
    """
    result = classifier.classify(candidate.record1, candidate.record2)
    return ClassifiedCandidate(candidate, result)
