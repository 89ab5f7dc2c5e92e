"""Incremental transitive closure over duplicate pairs.

Clusters live in an arena keyed by integer handles and every record id points
to the handle of its cluster. Two records are in the same cluster iff their
handles are equal, so cluster values can stay immutable: adding a record or
merging replaces the value stored under a handle.
"""

import itertools
from collections.abc import Callable, Hashable, Iterable
from typing import Generic, TypeVar

from ercluster.audit import AuditLogger
from ercluster.classifier.models import Candidate, ClassifiedCandidate
from ercluster.clustering.models import Cluster, ClusterIdGenerator

__all__ = ["TransitiveClosure"]

C = TypeVar("C")
T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


class TransitiveClosure(Generic[C, T, K]):
    """Online clustering that treats "duplicate" as an equivalence relation.

    State accumulates across calls: a record that was clustered once stays
    in its cluster until the cluster is removed with ``remove_cluster``.

    Attributes
    ----------
    id_extractor : Callable[[T], K]
        Maps a record to its identifier.
    cluster_id_generator : ClusterIdGenerator
        Mints ids for new and merged clusters.
    logger : AuditLogger | None
        Receives a ``transitive_closure_applied`` event per call.
    """

    def __init__(
        self,
        id_extractor: Callable[[T], K],
        cluster_id_generator: ClusterIdGenerator,
        *,
        logger: AuditLogger | None = None,
    ) -> None:
        """Initialize with an empty cluster index.

        Parameters
        ----------
        id_extractor : Callable[[T], K]
            Maps a record to its identifier.
        cluster_id_generator : ClusterIdGenerator
            Generator for cluster ids.
        logger : AuditLogger | None, optional
            Audit logger.
        """
        self.id_extractor = id_extractor
        self.cluster_id_generator = cluster_id_generator
        self.logger = logger
        self._clusters: dict[int, Cluster[C, T]] = {}
        self._handles: dict[K, int] = {}
        self._next_handle = itertools.count()

    def __len__(self) -> int:
        """Number of live clusters."""
        return len(self._clusters)

    def get_cluster(self, record_id: K) -> Cluster[C, T] | None:
        """Current cluster of a record, or None if the record is unclustered."""
        handle = self._handles.get(record_id)
        return None if handle is None else self._clusters[handle]

    def clusters(self) -> list[Cluster[C, T]]:
        """All live clusters in creation order."""
        return list(self._clusters.values())

    def cluster(self, classified_candidates: Iterable[ClassifiedCandidate[T]]) -> list[Cluster[C, T]]:
        """Cluster the duplicates among classified candidates.

        Non-duplicate and unknown candidates are ignored.

        Parameters
        ----------
        classified_candidates : Iterable[ClassifiedCandidate[T]]
            Classified pairs.

        Returns
        -------
        list[Cluster[C, T]]
            Current value of every cluster touched by a duplicate pair.
        """
        duplicates = [classified.candidate for classified in classified_candidates if classified.is_duplicate]
        return self.cluster_duplicates(duplicates)

    def cluster_duplicates(self, duplicates: Iterable[Candidate[T]]) -> list[Cluster[C, T]]:
        """Fold duplicate pairs into the cluster index.

        Parameters
        ----------
        duplicates : Iterable[Candidate[T]]
            Pairs known to be duplicates. A pair whose records share an id
            creates a singleton cluster if the record is unclustered.

        Returns
        -------
        list[Cluster[C, T]]
            Touched clusters in first-touch order, each once and in its final
            state after all pairs were applied. Clusters absorbed by a later
            merge are not returned.
        """
        touched: dict[int, None] = {}
        candidates = merges = created = 0

        for candidate in duplicates:
            candidates += 1
            left_id = self.id_extractor(candidate.record1)
            right_id = self.id_extractor(candidate.record2)
            left = self._handles.get(left_id)
            right = self._handles.get(right_id)

            if left_id == right_id:
                if left is None:
                    left = self._create((candidate.record1,))
                    created += 1
                handle = left
            elif left is None and right is None:
                handle = self._create((candidate.record1, candidate.record2))
                created += 1
            elif left == right:
                # already known duplicate, still reported as touched
                handle = left
            elif left is None:
                handle = self._add(right, candidate.record1, left_id)
            elif right is None:
                handle = self._add(left, candidate.record2, right_id)
            else:
                handle = self._merge(left, right)
                merges += 1
            touched[handle] = None

        result = [self._clusters[handle] for handle in touched if handle in self._clusters]

        if self.logger:
            self.logger.event(
                "transitive_closure_applied",
                data={
                    "candidates": candidates,
                    "touched": len(result),
                    "merges": merges,
                    "created": created,
                },
                stage="transitive_closure",
            )
        return result

    def remove_cluster(self, cluster: Cluster[C, T]) -> None:
        """Forget a cluster and release its records.

        Released records are treated as unseen by subsequent calls.

        Parameters
        ----------
        cluster : Cluster[C, T]
            Current value of a live cluster.

        Raises
        ------
        ValueError
            If the cluster is not the current value of exactly one live
            cluster, e.g. because it was superseded by a merge.
        """
        record_ids = [self.id_extractor(e) for e in cluster]
        handles = {self._handles.get(record_id) for record_id in record_ids}
        if len(handles) != 1:
            raise ValueError(f"Provided cluster is not known: {cluster.id!r}")

        (handle,) = handles
        if handle is None or self._clusters[handle] != cluster:
            raise ValueError(f"Provided cluster is not known: {cluster.id!r}")

        for record_id in record_ids:
            del self._handles[record_id]
        del self._clusters[handle]

    def _create(self, elements: tuple[T, ...]) -> int:
        handle = next(self._next_handle)
        ids = [self.id_extractor(e) for e in elements]
        self._clusters[handle] = Cluster(self.cluster_id_generator(ids), elements)
        for record_id in ids:
            self._handles[record_id] = handle
        return handle

    def _add(self, handle: int, record: T, record_id: K) -> int:
        self._clusters[handle] = self._clusters[handle].with_element(record)
        self._handles[record_id] = handle
        return handle

    def _merge(self, kept: int, absorbed: int) -> int:
        absorbed_cluster = self._clusters.pop(absorbed)
        self._clusters[kept] = self._clusters[kept].merge(
            absorbed_cluster, self.cluster_id_generator, self.id_extractor
        )
        for element in absorbed_cluster:
            self._handles[self.id_extractor(element)] = kept
        return kept
