"""Transitive closure followed by refinement, reporting only changed clusters."""

from collections.abc import Callable, Hashable, Iterable
from typing import Generic, TypeVar

from ercluster.audit import AuditLogger
from ercluster.classifier.models import ClassifiedCandidate
from ercluster.clustering.base import ClusterSplitHandler, ignore_splits
from ercluster.clustering.models import Cluster, ClusterIdGenerator
from ercluster.clustering.refine import RefineCluster
from ercluster.clustering.transitive_closure import TransitiveClosure

__all__ = ["RefinedTransitiveClosure"]

C = TypeVar("C")
T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


class RefinedTransitiveClosure(Generic[C, T, K]):
    """Refine the output of a transitive closure and emit what changed.

    The transitive closure keeps growing over time; refinement is applied to
    every touched cluster on each call. A record's refined cluster counts as
    changed if the record was never emitted before, or if its cluster id or
    member set differs from the last emitted one.

    Attributes
    ----------
    refine_cluster : RefineCluster
        Refinement step.
    id_extractor : Callable[[T], K]
        Maps a record to its identifier.
    closure : TransitiveClosure
        Underlying transitive closure, created from the refiner's id
        generator unless supplied.
    split_handler : ClusterSplitHandler
        Notified when refinement splits a previously emitted cluster.
    logger : AuditLogger | None
        Receives ``clusters_changed`` and ``cluster_split_vetoed`` events.
    """

    def __init__(
        self,
        refine_cluster: RefineCluster[C, T, K],
        id_extractor: Callable[[T], K],
        *,
        closure: TransitiveClosure[C, T, K] | None = None,
        split_handler: ClusterSplitHandler | None = None,
        logger: AuditLogger | None = None,
    ) -> None:
        """Initialize refined transitive closure.

        Parameters
        ----------
        refine_cluster : RefineCluster[C, T, K]
            Refinement step.
        id_extractor : Callable[[T], K]
            Maps a record to its identifier.
        closure : TransitiveClosure[C, T, K] | None, optional
            Transitive closure to refine.
        split_handler : ClusterSplitHandler | None, optional
            Split callback, defaults to accepting every split.
        logger : AuditLogger | None, optional
            Audit logger.
        """
        self.refine_cluster = refine_cluster
        self.id_extractor = id_extractor
        self.closure: TransitiveClosure[C, T, K] = closure or TransitiveClosure(
            id_extractor, refine_cluster.cluster_id_generator, logger=logger
        )
        self.split_handler = split_handler or ignore_splits()
        self.logger = logger
        self._emitted: dict[K, tuple[Cluster[C, T], frozenset[K]]] = {}

    @property
    def cluster_id_generator(self) -> ClusterIdGenerator:
        """Id generator of the underlying transitive closure."""
        return self.closure.cluster_id_generator

    def get_cluster(self, record_id: K) -> Cluster[C, T] | None:
        """Last emitted refined cluster of a record, or None."""
        entry = self._emitted.get(record_id)
        return None if entry is None else entry[0]

    def cluster(self, classified_candidates: Iterable[ClassifiedCandidate[T]]) -> list[Cluster[C, T]]:
        """Cluster, refine and diff against previously emitted clusters.

        Parameters
        ----------
        classified_candidates : Iterable[ClassifiedCandidate[T]]
            Classified pairs. They also serve as known classifications for
            refinement.

        Returns
        -------
        list[Cluster[C, T]]
            Changed refined clusters, each once, in refinement order.
        """
        materialized = list(classified_candidates)
        transitive = self.closure.cluster(materialized)
        refined = self.refine_cluster.refine(transitive, materialized)

        changed: dict[object, Cluster[C, T]] = {}
        # id(previous cluster) -> (previous cluster, {id(part): part})
        split_parts: dict[int, tuple[Cluster[C, T], dict[int, Cluster[C, T]]]] = {}
        for refined_cluster in refined:
            member_ids = refined_cluster.member_ids(self.id_extractor)
            for element in refined_cluster:
                record_id = self.id_extractor(element)
                previous = self._emitted.get(record_id)
                self._emitted[record_id] = (refined_cluster, member_ids)

                if previous is None:
                    changed.setdefault(refined_cluster.id, refined_cluster)
                    continue

                old_cluster, old_member_ids = previous
                if old_cluster.id != refined_cluster.id or old_member_ids != member_ids:
                    changed.setdefault(refined_cluster.id, refined_cluster)
                _, parts = split_parts.setdefault(id(old_cluster), (old_cluster, {}))
                parts[id(refined_cluster)] = refined_cluster

        for old_cluster, parts in split_parts.values():
            if len(parts) > 1:
                self._notify_split(old_cluster, list(parts.values()))

        result = list(changed.values())
        if self.logger:
            self.logger.event(
                "clusters_changed",
                data={"refined": len(refined), "changed": len(result)},
                stage="refine",
            )
        return result

    def _notify_split(self, old_cluster: Cluster[C, T], parts: list[Cluster[C, T]]) -> None:
        if self.split_handler.cluster_split(old_cluster, parts):
            return
        if self.logger:
            self.logger.event(
                "cluster_split_vetoed",
                data={"cluster_id": old_cluster.id, "parts": [part.id for part in parts]},
                level="WARN",
                stage="refine",
            )
