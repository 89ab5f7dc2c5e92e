"""Disjoint sets over record ids or cluster positions.

Used in two places: heuristic refinement counts the components spanned by
the known edges of a cluster, and the batch driver in ``ercluster.api``
splits a batch into groups of pairs connected by duplicates.
"""

from collections.abc import Hashable, Iterable
from typing import Generic, TypeVar

__all__ = ["UnionFind", "count_components"]

K = TypeVar("K", bound=Hashable)


class UnionFind(Generic[K]):
    """Union-Find with path halving and union by rank.

    Elements are added implicitly on first ``find`` or ``union``.

    Attributes
    ----------
    parent : dict[K, K]
        Parent pointers for each element.
    rank : dict[K, int]
        Upper bound on tree height for each root.
    """

    def __init__(self) -> None:
        self.parent: dict[K, K] = {}
        self.rank: dict[K, int] = {}

    def __contains__(self, x: object) -> bool:
        return x in self.parent

    def make_set(self, x: K) -> None:
        """Add ``x`` as a singleton set unless it is already known."""
        if x not in self.parent:
            self.parent[x] = x
            self.rank[x] = 0

    def find(self, x: K) -> K:
        """Return the root of the set containing ``x``.

        Parameters
        ----------
        x : K
            Element to look up; added as a singleton if unknown.

        Returns
        -------
        K
            Representative of the set.
        """
        self.make_set(x)
        while self.parent[x] != x:
            self.parent[x] = self.parent[self.parent[x]]
            x = self.parent[x]
        return x

    def union(self, x: K, y: K) -> None:
        """Join the sets containing ``x`` and ``y``."""
        root_x = self.find(x)
        root_y = self.find(y)
        if root_x == root_y:
            return

        if self.rank[root_x] < self.rank[root_y]:
            root_x, root_y = root_y, root_x
        self.parent[root_y] = root_x
        if self.rank[root_x] == self.rank[root_y]:
            self.rank[root_x] += 1

    def get_components(self) -> list[list[K]]:
        """Group all known elements by set, in insertion order.

        Returns
        -------
        list[list[K]]
            One list of elements per set.
        """
        components: dict[K, list[K]] = {}
        for element in self.parent:
            components.setdefault(self.find(element), []).append(element)
        return list(components.values())


def count_components(nodes: Iterable[K], links: Iterable[tuple[K, K]]) -> int:
    """Count connected components of a graph.

    Parameters
    ----------
    nodes : Iterable[K]
        All nodes, including isolated ones.
    links : Iterable[tuple[K, K]]
        Undirected links between nodes.

    Returns
    -------
    int
        Number of components.
    """
    uf: UnionFind[K] = UnionFind()
    for node in nodes:
        uf.make_set(node)
    for left, right in links:
        uf.union(left, right)
    return len(uf.get_components())
