"""Classifiers backed by known answers instead of similarity computation."""

from collections.abc import Callable, Hashable, Iterable
from typing import Generic, TypeVar

from ercluster.classifier.models import Candidate, ClassificationResult, ClassifiedCandidate

__all__ = ["OracleClassifier", "LookupClassifier"]

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

_DUPLICATE = ClassificationResult.duplicate(1.0, "gold duplicate")
_NON_DUPLICATE = ClassificationResult.non_duplicate(1.0, "not a gold duplicate")


class OracleClassifier(Generic[T, K]):
    """Classifier that answers from a gold standard of duplicate pairs.

    Every gold pair is a duplicate in both directions; every other pair is a
    non-duplicate. Useful to evaluate clustering in isolation from
    classification errors.

    Attributes
    ----------
    id_extractor : Callable[[T], K]
        Maps a record to its identifier.
    """

    def __init__(
        self,
        gold_duplicates: Iterable[Candidate[T]],
        id_extractor: Callable[[T], K],
    ) -> None:
        """Initialize oracle from gold duplicate pairs.

        Parameters
        ----------
        gold_duplicates : Iterable[Candidate[T]]
            Known duplicate pairs.
        id_extractor : Callable[[T], K]
            Maps a record to its identifier.
        """
        self.id_extractor = id_extractor
        self._pairs: set[tuple[K, K]] = set()
        for duplicate in gold_duplicates:
            left = id_extractor(duplicate.record1)
            right = id_extractor(duplicate.record2)
            self._pairs.add((left, right))
            self._pairs.add((right, left))

    def classify(self, record1: T, record2: T) -> ClassificationResult:
        """Look the pair up in the gold standard."""
        key = (self.id_extractor(record1), self.id_extractor(record2))
        return _DUPLICATE if key in self._pairs else _NON_DUPLICATE


class LookupClassifier(Generic[T, K]):
    """Classifier that remembers classifications it has been shown.

    Lookups are symmetric. Pairs never observed are answered with
    ``Unknown(0)``, which contributes no weight during refinement.
    """

    def __init__(
        self,
        id_extractor: Callable[[T], K],
        known: Iterable[ClassifiedCandidate[T]] = (),
    ) -> None:
        """Initialize with optional known classifications.

        Parameters
        ----------
        id_extractor : Callable[[T], K]
            Maps a record to its identifier.
        known : Iterable[ClassifiedCandidate[T]], optional
            Classifications to remember upfront.
        """
        self.id_extractor = id_extractor
        self._results: dict[tuple[K, K], ClassificationResult] = {}
        self.update(known)

    def update(self, classified_candidates: Iterable[ClassifiedCandidate[T]]) -> None:
        """Remember classifications; later ones overwrite earlier ones.

        Parameters
        ----------
        classified_candidates : Iterable[ClassifiedCandidate[T]]
            Classifications to remember.
        """
        for classified in classified_candidates:
            left = self.id_extractor(classified.candidate.record1)
            right = self.id_extractor(classified.candidate.record2)
            self._results[(left, right)] = classified.classification_result
            self._results[(right, left)] = classified.classification_result

    def classify(self, record1: T, record2: T) -> ClassificationResult:
        """Return the remembered result or ``Unknown(0)``."""
        key = (self.id_extractor(record1), self.id_extractor(record2))
        return self._results.get(key, ClassificationResult.unknown("not observed"))
