"""Greedy agglomerative clustering over a sparse edge list."""

from collections.abc import Iterable

from ercluster.clustering.edges import WeightedEdge
from ercluster.clustering.partitions import score_partition
from ercluster.errors import InvariantError

__all__ = ["greedy_cluster"]


def _sort_key(edge: WeightedEdge) -> float:
    if edge.weight is None:
        raise InvariantError(f"Edge {edge.key} reached greedy clustering without a weight")
    return edge.weight


def greedy_cluster(size: int, edges: Iterable[WeightedEdge]) -> list[int]:
    """Merge singletons along edges while the partition score improves.

    Edges are visited best-first: descending weight, ties in input order.
    For each edge the blocks of its endpoints are merged tentatively; the
    merge is kept iff the global score strictly increases. Pairs without an
    edge count as weight 0.

    Parameters
    ----------
    size : int
        Number of items.
    edges : Iterable[WeightedEdge]
        Weighted edges between item positions.

    Returns
    -------
    list[int]
        Block label per item. A block keeps the label of the left endpoint of
        the edge that formed it.
    """
    ordered = sorted(edges, key=_sort_key, reverse=True)
    weights = {edge.key: edge.weight for edge in ordered}
    weighted_pairs = [(left, right, weight) for (left, right), weight in weights.items()]

    assignment = list(range(size))
    score = score_partition(assignment, weighted_pairs)
    for edge in ordered:
        kept = assignment[edge.left]
        absorbed = assignment[edge.right]
        if kept == absorbed:
            continue

        candidate = [kept if label == absorbed else label for label in assignment]
        candidate_score = score_partition(candidate, weighted_pairs)
        if candidate_score > score:
            assignment = candidate
            score = candidate_score

    return assignment
