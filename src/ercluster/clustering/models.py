"""Data models for clusters and refinement configuration."""

from collections.abc import Callable, Hashable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

__all__ = ["Cluster", "RefineConfig", "ClusterIdGenerator"]

C = TypeVar("C")
T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

ClusterIdGenerator = Callable[[Sequence[Any]], Any]
"""Maps the member ids of a new cluster to its cluster id."""


@dataclass(frozen=True)
class Cluster(Generic[C, T]):
    """Group of records believed to be mutual duplicates.

    Clusters are immutable values. Transitive closure replaces a cluster
    whenever its membership changes; the id is regenerated on merges and
    refinement splits.

    Attributes
    ----------
    id : C
        Opaque cluster identifier (integer, string, ...).
    elements : tuple[T, ...]
        Member records in insertion order.
    """

    id: C
    elements: tuple[T, ...] = ()

    def __post_init__(self) -> None:
        """Normalize elements to a tuple."""
        if not isinstance(self.elements, tuple):
            object.__setattr__(self, "elements", tuple(self.elements))

    def __len__(self) -> int:
        return len(self.elements)

    def __getitem__(self, index: int) -> T:
        return self.elements[index]

    def __iter__(self) -> Iterator[T]:
        return iter(self.elements)

    def __contains__(self, record: object) -> bool:
        return record in self.elements

    def size(self) -> int:
        """Number of member records."""
        return len(self.elements)

    def with_element(self, record: T) -> "Cluster[C, T]":
        """Return a copy with ``record`` appended, keeping the id."""
        return Cluster(self.id, (*self.elements, record))

    def merge(
        self,
        other: "Cluster[C, T]",
        id_generator: ClusterIdGenerator,
        id_extractor: Callable[[T], Any],
    ) -> "Cluster[C, T]":
        """Merge two clusters into a new cluster with a fresh id.

        Parameters
        ----------
        other : Cluster[C, T]
            Cluster whose elements are appended after this cluster's.
        id_generator : ClusterIdGenerator
            Generates the id of the merged cluster from its member ids.
        id_extractor : Callable[[T], Any]
            Maps a record to its identifier.

        Returns
        -------
        Cluster[C, T]
            The merged cluster, or this cluster if ``other is self``.
        """
        if other is self:
            return self
        elements = (*self.elements, *other.elements)
        return Cluster(id_generator([id_extractor(e) for e in elements]), elements)

    def member_ids(self, id_extractor: Callable[[T], K]) -> frozenset[K]:
        """Set of member record ids.

        Two clusters describe the same logical group iff their member id sets
        are equal, regardless of cluster id or element order.
        """
        return frozenset(id_extractor(e) for e in self.elements)

    def to_dict(self, id_extractor: Callable[[T], Any] | None = None) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        Parameters
        ----------
        id_extractor : Callable[[T], Any] | None, optional
            If given, elements are written as their ids.

        Returns
        -------
        dict[str, Any]
            Dictionary representation.
        """
        elements = list(self.elements) if id_extractor is None else [id_extractor(e) for e in self]
        return {"cluster_id": self.id, "elements": elements}


@dataclass(frozen=True)
class RefineConfig:
    """Configuration for cluster refinement.

    Attributes
    ----------
    max_small_cluster_size : int
        Largest cluster (inclusive) refined by exhaustive partition search,
        by default 10. Larger clusters use the greedy heuristic, which samples
        ``max_small_cluster_size * (max_small_cluster_size + 1) / 2`` edges.
    seed : int | None
        Seed for edge shuffling and sampling. None uses fresh entropy.
    """

    max_small_cluster_size: int = 10
    seed: int | None = None

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.max_small_cluster_size < 1:
            raise ValueError(
                f"max_small_cluster_size must be at least 1, got {self.max_small_cluster_size}"
            )
