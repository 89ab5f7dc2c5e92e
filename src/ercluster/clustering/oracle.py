"""Clustering backed by a gold standard, for evaluation."""

from collections.abc import Callable, Hashable, Iterable, Sequence
from typing import Generic, TypeVar

from ercluster.classifier.models import ClassifiedCandidate
from ercluster.clustering.models import Cluster

__all__ = ["OracleClustering"]

C = TypeVar("C")
T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


class OracleClustering(Generic[C, T, K]):
    """Clustering that answers with gold clusters.

    Every pair inside a gold cluster is a duplicate and every pair across
    gold clusters is not. Used to evaluate candidate selection or
    classification without clustering errors.

    Attributes
    ----------
    gold_clusters : list[Cluster[C, T]]
        The gold clustering.
    id_extractor : Callable[[T], K]
        Maps a record to its identifier.
    """

    def __init__(self, gold_clusters: Iterable[Cluster[C, T]], id_extractor: Callable[[T], K]) -> None:
        self.gold_clusters = list(gold_clusters)
        self.id_extractor = id_extractor
        self._cluster_by_record: dict[K, Cluster[C, T]] = {}
        self._id_by_members: dict[frozenset[K], C] = {}
        for cluster in self.gold_clusters:
            member_ids = cluster.member_ids(id_extractor)
            self._id_by_members[member_ids] = cluster.id
            for record_id in member_ids:
                self._cluster_by_record[record_id] = cluster

    def cluster(self, classified_candidates: Iterable[ClassifiedCandidate[T]]) -> list[Cluster[C, T]]:
        """Return the gold cluster of every candidate's second record, each once.

        Records outside the gold standard are skipped. Classifications are
        ignored.
        """
        result: dict[int, Cluster[C, T]] = {}
        for classified in classified_candidates:
            cluster = self._cluster_by_record.get(self.id_extractor(classified.candidate.record2))
            if cluster is not None:
                result.setdefault(id(cluster), cluster)
        return list(result.values())

    def cluster_id_generator(self, member_ids: Sequence[K]) -> C:
        """Look up the gold id of a member set.

        Raises
        ------
        KeyError
            If no gold cluster has exactly these members.
        """
        return self._id_by_members[frozenset(member_ids)]
