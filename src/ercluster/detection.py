"""Online, pair-based duplicate detection.

For each new record: select candidates, classify them, and hand the
classified pairs to a clustering.
"""

from collections.abc import Callable, Iterable
from typing import Generic, TypeVar

from ercluster.audit import AuditLogger
from ercluster.classifier.base import Classifier, classify_candidate
from ercluster.classifier.models import Candidate, ClassifiedCandidate
from ercluster.clustering.base import Clustering
from ercluster.clustering.models import Cluster
from ercluster.errors import ClassificationError, ExceptionContext

__all__ = ["OnlineDuplicateDetection", "CandidateSelection"]

C = TypeVar("C")
T = TypeVar("T")

CandidateSelection = Callable[[T], Iterable[Candidate[T]]]
"""Returns the candidate pairs of a new record, the new record first."""


class OnlineDuplicateDetection(Generic[C, T]):
    """Detect duplicates of records arriving one at a time.

    Classifier failures are wrapped in ``ClassificationError`` and routed
    through an ``ExceptionContext``: in collect mode the failing candidate is
    dropped and logged, in fail-fast mode the error propagates.

    Collected failures accumulate in ``exception_context.exceptions`` across
    calls so callers can inspect them; a long-running caller owns that list
    and should call ``exception_context.clear()`` once it has handled them.

    Attributes
    ----------
    candidate_selection : CandidateSelection
        Candidate pairs for a new record.
    classifier : Classifier[T]
        Pairwise classifier.
    clustering : Clustering[C, T]
        Clustering fed with the classified pairs.
    exception_context : ExceptionContext
        Failure policy for classifier calls.
    logger : AuditLogger | None
        Receives an ``error`` event per collected failure.
    """

    def __init__(
        self,
        candidate_selection: "CandidateSelection[T]",
        classifier: Classifier[T],
        clustering: Clustering[C, T],
        exception_context: ExceptionContext | None = None,
        logger: AuditLogger | None = None,
    ) -> None:
        self.candidate_selection = candidate_selection
        self.classifier = classifier
        self.clustering = clustering
        self.exception_context = exception_context or ExceptionContext()
        self.logger = logger

    def detect_duplicates(self, new_record: T) -> list[Cluster[C, T]]:
        """Cluster a new record with its duplicates.

        Parameters
        ----------
        new_record : T
            Record to deduplicate.

        Returns
        -------
        list[Cluster[C, T]]
            Clusters changed by this record.

        Raises
        ------
        ClassificationError
            If classification fails and the exception context is fail-fast.
        """
        classified: list[ClassifiedCandidate[T]] = []
        for candidate in self.candidate_selection(new_record):
            result = self.exception_context.safe_execute(lambda candidate=candidate: self._classify(candidate))
            if result is None:
                self._log_failure(self.exception_context.exceptions[-1])
                continue
            classified.append(result)

        return self.clustering.cluster(classified)

    def _classify(self, candidate: Candidate[T]) -> ClassifiedCandidate[T]:
        try:
            return classify_candidate(self.classifier, candidate)
        except Exception as exc:
            raise ClassificationError(f"Classifier failed: {exc}", candidate=candidate) from exc

    def _log_failure(self, exc: Exception) -> None:
        if self.logger:
            self.logger.error(type(exc).__name__, str(exc), stage="classification")
