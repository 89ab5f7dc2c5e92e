"""Protocols shared by clustering implementations."""

from collections.abc import Iterable, Sequence
from typing import Protocol, TypeVar

from ercluster.classifier.models import ClassifiedCandidate
from ercluster.clustering.models import Cluster, ClusterIdGenerator

__all__ = [
    "Clustering",
    "ClusterSplitHandler",
    "ignore_splits",
    "get_containing_cluster",
    "check_split",
]

C = TypeVar("C")
T = TypeVar("T")


class Clustering(Protocol[C, T]):
    """Turns classified candidate pairs into clusters.

    Implementations may keep state across calls (online clustering) and
    return only the clusters affected by the latest call.
    """

    cluster_id_generator: ClusterIdGenerator

    def cluster(self, classified_candidates: Iterable[ClassifiedCandidate[T]]) -> list[Cluster[C, T]]:
        """Cluster a batch of classified candidates."""
        ...


class ClusterSplitHandler(Protocol):
    """Callback for an existing cluster being split up."""

    def cluster_split(self, main_cluster: Cluster, split_parts: list[Cluster]) -> bool:
        """Handle a split.

        Parameters
        ----------
        main_cluster : Cluster
            Part that keeps the record triggering the clustering, or the
            previously emitted cluster.
        split_parts : list[Cluster]
            The other parts.

        Returns
        -------
        bool
            False to veto the split. Clusterings may ignore vetoes.
        """
        ...


class _IgnoreSplits:
    def cluster_split(self, main_cluster: Cluster, split_parts: list[Cluster]) -> bool:
        return True


def ignore_splits() -> ClusterSplitHandler:
    """Return a split handler that accepts every split."""
    return _IgnoreSplits()


def get_containing_cluster(clusters: Iterable[Cluster[C, T]], record: T) -> Cluster[C, T]:
    """Find the single cluster that contains ``record``.

    Raises
    ------
    ValueError
        If no cluster or more than one cluster contains the record.
    """
    containing = [cluster for cluster in clusters if record in cluster]
    if len(containing) != 1:
        raise ValueError(f"Expected exactly one cluster containing the record, found {len(containing)}")
    return containing[0]


def check_split(
    handler: ClusterSplitHandler,
    clusters: Sequence[Cluster[C, T]],
    new_record: T,
) -> bool:
    """Notify ``handler`` if a clustering result contains more than one cluster.

    Parameters
    ----------
    handler : ClusterSplitHandler
        Handler to notify.
    clusters : Sequence[Cluster[C, T]]
        Clusters produced for ``new_record``.
    new_record : T
        Record that triggered the clustering.

    Returns
    -------
    bool
        The handler's verdict, or True when nothing was split.
    """
    if len(clusters) <= 1:
        return True
    main_cluster = get_containing_cluster(clusters, new_record)
    split_parts = [cluster for cluster in clusters if cluster is not main_cluster]
    return handler.cluster_split(main_cluster, split_parts)
