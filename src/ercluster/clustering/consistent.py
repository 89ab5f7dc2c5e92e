"""Keep cluster assignments stable for downstream consumers."""

from collections.abc import Callable, Hashable, Iterable
from typing import Generic, TypeVar

from ercluster.audit import AuditLogger
from ercluster.classifier.models import Candidate, ClassifiedCandidate
from ercluster.clustering.base import Clustering
from ercluster.clustering.models import Cluster, ClusterIdGenerator
from ercluster.clustering.transitive_closure import TransitiveClosure
from ercluster.errors import InvariantError

__all__ = ["ConsistentClustering"]

C = TypeVar("C")
T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


class ConsistentClustering(Generic[C, T, K]):
    """Wrap a clustering so that split clusters are presented re-merged.

    Downstream systems that already saw a cluster must not see it fall
    apart. Whenever the wrapped clustering returns several clusters, or a
    cluster with records seen before, all of them are merged through an
    internal transitive closure and a single cluster is returned. Once the
    wrapped clustering agrees with the merged view again, the internal
    cluster is released.

    Attributes
    ----------
    clustering : Clustering
        Wrapped clustering.
    id_extractor : Callable[[T], K]
        Maps a record to its identifier.
    logger : AuditLogger | None
        Receives a ``consistency_remerged`` event per re-merge.
    """

    def __init__(
        self,
        clustering: Clustering[C, T],
        id_extractor: Callable[[T], K],
        *,
        logger: AuditLogger | None = None,
    ) -> None:
        """Initialize consistent clustering.

        Parameters
        ----------
        clustering : Clustering[C, T]
            Wrapped clustering; its id generator is reused internally.
        id_extractor : Callable[[T], K]
            Maps a record to its identifier.
        logger : AuditLogger | None, optional
            Audit logger.
        """
        self.clustering = clustering
        self.id_extractor = id_extractor
        self.logger = logger
        self._internal_closure: TransitiveClosure[C, T, K] = TransitiveClosure(
            id_extractor, clustering.cluster_id_generator
        )

    @property
    def cluster_id_generator(self) -> ClusterIdGenerator:
        """Id generator of the wrapped clustering."""
        return self.clustering.cluster_id_generator

    def cluster(self, classified_candidates: Iterable[ClassifiedCandidate[T]]) -> list[Cluster[C, T]]:
        """Cluster with the wrapped clustering and re-merge its output.

        Parameters
        ----------
        classified_candidates : Iterable[ClassifiedCandidate[T]]
            Classified pairs.

        Returns
        -------
        list[Cluster[C, T]]
            Empty, or exactly one cluster.

        Raises
        ------
        InvariantError
            If the internal closure does not yield exactly one cluster.
        """
        clusters = list(self.clustering.cluster(classified_candidates))
        if not clusters:
            return clusters
        if len(clusters) == 1 and self._no_record_in_index(clusters[0]):
            return clusters

        first_element = clusters[0][0]
        candidates = [Candidate(first_element, record) for cluster in clusters for record in cluster]
        transitive = self._internal_closure.cluster_duplicates(candidates)
        if len(transitive) != 1:
            raise InvariantError(f"Expected exactly one transitive cluster, got {len(transitive)}")

        merged = transitive[0]
        released = len(clusters) == 1 and clusters[0].member_ids(self.id_extractor) == merged.member_ids(
            self.id_extractor
        )
        if released:
            # the wrapped clustering re-merged the split itself
            self._internal_closure.remove_cluster(merged)

        if self.logger:
            self.logger.event(
                "consistency_remerged",
                data={"input_clusters": len(clusters), "cluster_id": merged.id, "released": released},
                stage="consistency",
            )
        return transitive

    def _no_record_in_index(self, cluster: Cluster[C, T]) -> bool:
        return all(self._internal_closure.get_cluster(self.id_extractor(record)) is None for record in cluster)
