"""Refinement of transitive clusters into tighter groups.

Transitive closure chains duplicates: A~B and B~C put A and C together even
when A and C are clearly different. Refinement re-partitions each cluster so
the pairwise weights agree with the grouping as well as possible.

Clusters up to ``max_small_cluster_size`` are solved exactly by enumerating
all partitions. Larger clusters are solved greedily on a sampled edge set.
"""

import random
from collections.abc import Callable, Hashable, Iterable, Sequence
from typing import Any, Generic, TypeVar

from ercluster.audit import AuditLogger
from ercluster.classifier.base import Classifier
from ercluster.classifier.models import Classification, ClassificationResult, ClassifiedCandidate
from ercluster.clustering.edges import (
    WeightedEdge,
    WeightMatrix,
    close_triangles,
    get_random_edges,
    triangular_number,
)
from ercluster.clustering.greedy import greedy_cluster
from ercluster.clustering.models import Cluster, ClusterIdGenerator, RefineConfig
from ercluster.clustering.partitions import best_partition
from ercluster.clustering.union_find import count_components
from ercluster.errors import InvariantError

__all__ = ["RefineCluster", "get_weight"]

C = TypeVar("C")
T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


def get_weight(result: ClassificationResult) -> float:
    """Map a classification to a pair weight in [-1, 1].

    Duplicates weigh ``+confidence``, non-duplicates ``-confidence`` and
    unknown pairs ``-0.0``.
    """
    if result.classification == Classification.DUPLICATE:
        return result.confidence
    if result.classification == Classification.NON_DUPLICATE:
        return -result.confidence
    return -0.0


class RefineCluster(Generic[C, T, K]):
    """Split clusters whose members are not all mutual duplicates.

    Attributes
    ----------
    classifier : Classifier[T]
        Scores pairs whose weight is not known upfront.
    cluster_id_generator : ClusterIdGenerator
        Mints ids for split-off sub-clusters.
    id_extractor : Callable[[T], K]
        Maps a record to its identifier.
    config : RefineConfig
        Size threshold and random seed.
    logger : AuditLogger | None
        Receives one ``cluster_refined`` event per refined cluster.
    """

    def __init__(
        self,
        classifier: Classifier[T],
        cluster_id_generator: ClusterIdGenerator,
        id_extractor: Callable[[T], K],
        config: RefineConfig | None = None,
        *,
        logger: AuditLogger | None = None,
    ) -> None:
        """Initialize refiner.

        Parameters
        ----------
        classifier : Classifier[T]
            Classifier for pairs without a known classification.
        cluster_id_generator : ClusterIdGenerator
            Generator for sub-cluster ids.
        id_extractor : Callable[[T], K]
            Maps a record to its identifier.
        config : RefineConfig | None, optional
            Refinement settings, defaults to ``RefineConfig()``.
        logger : AuditLogger | None, optional
            Audit logger.
        """
        self.classifier = classifier
        self.cluster_id_generator = cluster_id_generator
        self.id_extractor = id_extractor
        self.config = config or RefineConfig()
        self.logger = logger
        self._rng = random.Random(self.config.seed)
        self._classifier_calls = 0

    def refine(
        self,
        clusters: Iterable[Cluster[C, T]],
        known_classifications: Iterable[ClassifiedCandidate[T]] = (),
    ) -> list[Cluster[C, T]]:
        """Refine each cluster independently.

        Parameters
        ----------
        clusters : Iterable[Cluster[C, T]]
            Clusters to refine.
        known_classifications : Iterable[ClassifiedCandidate[T]], optional
            Classifications already computed; pairs covered here are never
            sent to the classifier again.

        Returns
        -------
        list[Cluster[C, T]]
            Refined clusters. A cluster that stays in one piece is returned
            unchanged, including its id.
        """
        by_first_id: dict[K, list[ClassifiedCandidate[T]]] = {}
        for classified in known_classifications:
            first_id = self.id_extractor(classified.candidate.record1)
            by_first_id.setdefault(first_id, []).append(classified)

        refined: list[Cluster[C, T]] = []
        for cluster in clusters:
            member_ids = cluster.member_ids(self.id_extractor)
            relevant = [
                classified
                for element in cluster
                for classified in by_first_id.get(self.id_extractor(element), ())
                if self.id_extractor(classified.candidate.record2) in member_ids
            ]
            refined.extend(self.refine_cluster(cluster, relevant))
        return refined

    def refine_cluster(
        self,
        cluster: Cluster[C, T],
        known_classifications: Iterable[ClassifiedCandidate[T]] = (),
    ) -> list[Cluster[C, T]]:
        """Refine a single cluster.

        Parameters
        ----------
        cluster : Cluster[C, T]
            Cluster to refine.
        known_classifications : Iterable[ClassifiedCandidate[T]], optional
            Classifications between members of this cluster.

        Returns
        -------
        list[Cluster[C, T]]
            One or more clusters partitioning the input's elements.
        """
        if len(cluster) <= 2:
            return [cluster]

        matrix = self._known_weights(cluster, known_classifications)
        calls_before = self._classifier_calls
        if len(cluster) > self.config.max_small_cluster_size:
            mode = "heuristic"
            assignment: Sequence[int] = self._refine_big_cluster(cluster, matrix)
        else:
            mode = "exact"
            assignment = self._refine_small_cluster(cluster, matrix)

        parts = self._sub_clusters(cluster, assignment)
        if self.logger:
            self.logger.event(
                "cluster_refined",
                data={
                    "cluster_id": cluster.id,
                    "size": len(cluster),
                    "mode": mode,
                    "parts": len(parts),
                    "classifier_calls": self._classifier_calls - calls_before,
                },
                stage="refine",
            )
        return parts

    def _known_weights(
        self,
        cluster: Cluster[C, T],
        known_classifications: Iterable[ClassifiedCandidate[T]],
    ) -> WeightMatrix:
        positions = {self.id_extractor(e): i for i, e in enumerate(cluster)}
        matrix = WeightMatrix(len(cluster))
        for classified in known_classifications:
            left = positions.get(self.id_extractor(classified.candidate.record1))
            right = positions.get(self.id_extractor(classified.candidate.record2))
            if left is None or right is None or left == right:
                continue
            matrix.set(left, right, get_weight(classified.classification_result))
        return matrix

    def _classify(self, cluster: Cluster[C, T], left: int, right: int) -> float:
        self._classifier_calls += 1
        return get_weight(self.classifier.classify(cluster[left], cluster[right]))

    def _refine_small_cluster(self, cluster: Cluster[C, T], matrix: WeightMatrix) -> tuple[int, ...]:
        def weight(left: int, right: int) -> float:
            value = matrix.get(left, right)
            if value is None:
                value = self._classify(cluster, left, right)
                matrix.set(left, right, value)
            return value

        return best_partition(len(cluster), weight)

    def _refine_big_cluster(self, cluster: Cluster[C, T], matrix: WeightMatrix) -> list[int]:
        desired = triangular_number(self.config.max_small_cluster_size)
        edges = self._sample_edges(len(cluster), matrix.edges(), desired)

        weighted: list[WeightedEdge] = []
        for edge in edges:
            weight = edge.weight
            if weight is None:
                weight = matrix.get(edge.left, edge.right)
            if weight is None:
                weight = self._classify(cluster, edge.left, edge.right)
                matrix.set(edge.left, edge.right, weight)
            weighted.append(edge.with_weight(weight))

        return greedy_cluster(len(cluster), weighted)

    def _sample_edges(
        self,
        size: int,
        known_edges: list[WeightedEdge],
        desired: int,
    ) -> list[WeightedEdge]:
        """Pick the edges scored by the greedy pass.

        Known edges are always used. Without any, edges are drawn uniformly.
        Otherwise triangles are closed around the known edges first and
        random edges fill up whatever the closure cannot reach.
        """
        potential = triangular_number(size)
        if not known_edges:
            return get_random_edges(potential, desired, self._rng)

        edges = list(known_edges)
        self._rng.shuffle(edges)
        edges.extend(close_triangles(edges, desired, self._rng))
        if len(edges) >= desired:
            return edges

        if count_components(range(size), (edge.key for edge in known_edges)) == 1:
            raise InvariantError(
                f"Triangle closure of a connected graph on {size} nodes stopped at "
                f"{len(edges)} of {desired} edges"
            )

        present = {edge.key for edge in edges}
        edges.extend(get_random_edges(potential, desired - len(edges), self._rng, exclude=present))
        return edges

    def _sub_clusters(self, cluster: Cluster[C, T], assignment: Sequence[int]) -> list[Cluster[C, T]]:
        groups: dict[int, list[T]] = {}
        for label, element in zip(assignment, cluster.elements, strict=True):
            groups.setdefault(label, []).append(element)

        if len(groups) == 1:
            return [cluster]

        parts: list[Cluster[C, T]] = []
        for members in groups.values():
            cluster_id: Any = self.cluster_id_generator([self.id_extractor(e) for e in members])
            parts.append(Cluster(cluster_id, tuple(members)))
        return parts
