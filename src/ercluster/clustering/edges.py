"""Weighted edges and edge sampling for heuristic refinement.

Edge indices refer to positions inside one cluster's element sequence. An edge
whose weight is None has not been scored yet; the classifier is only called for
such edges when the weight is actually needed.
"""

import itertools
import math
import random
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, replace

from ercluster.errors import InvariantError

__all__ = [
    "WeightedEdge",
    "WeightMatrix",
    "triangular_number",
    "create_gauss_pair",
    "gauss_pair_index",
    "get_random_edges",
    "close_triangles",
]


@dataclass(frozen=True)
class WeightedEdge:
    """Edge between two cluster positions.

    Attributes
    ----------
    left : int
        Smaller index.
    right : int
        Larger index.
    weight : float | None
        Weight in [-1, 1], or None while unknown.
    """

    left: int
    right: int
    weight: float | None = None

    @staticmethod
    def of(index1: int, index2: int, weight: float | None = None) -> "WeightedEdge":
        """Create an edge in canonical order (left < right)."""
        return WeightedEdge(min(index1, index2), max(index1, index2), weight)

    @property
    def key(self) -> tuple[int, int]:
        """Index pair identifying the edge regardless of weight."""
        return (self.left, self.right)

    @property
    def is_weighted(self) -> bool:
        return self.weight is not None

    def with_weight(self, weight: float) -> "WeightedEdge":
        """Return a copy carrying ``weight``."""
        return replace(self, weight=weight)

    def overlaps(self, other: "WeightedEdge") -> bool:
        """True if both edges share at least one endpoint."""
        return bool({self.left, self.right} & {other.left, other.right})

    def triangle_edge(self, other: "WeightedEdge") -> "WeightedEdge | None":
        """Third edge of the triangle spanned by two edges sharing one endpoint.

        Returns
        -------
        WeightedEdge | None
            Unweighted edge between the two non-shared endpoints, or None if
            the edges are identical or disjoint.
        """
        ends = {self.left, self.right} ^ {other.left, other.right}
        if len(ends) != 2 or not self.overlaps(other):
            return None
        left, right = sorted(ends)
        return WeightedEdge(left, right)


class WeightMatrix:
    """Upper-triangular pair weights with explicitly unknown cells.

    A cell is either known (any float, including the ``-0.0`` weight of an
    UNKNOWN classification) or absent. Absent cells must be computed before
    they are used.
    """

    def __init__(self, size: int) -> None:
        self.size = size
        self._weights: dict[tuple[int, int], float] = {}

    @staticmethod
    def _key(index1: int, index2: int) -> tuple[int, int]:
        if index1 == index2:
            raise ValueError(f"No weight for self pair ({index1}, {index2})")
        return (min(index1, index2), max(index1, index2))

    def __len__(self) -> int:
        return len(self._weights)

    def is_known(self, index1: int, index2: int) -> bool:
        """True if the cell holds a weight."""
        return self._key(index1, index2) in self._weights

    def get(self, index1: int, index2: int) -> float | None:
        """Weight of the cell, or None if unknown."""
        return self._weights.get(self._key(index1, index2))

    def set(self, index1: int, index2: int, weight: float) -> None:
        """Store the weight of a cell."""
        self._weights[self._key(index1, index2)] = weight

    def edges(self) -> list[WeightedEdge]:
        """All known cells as weighted edges, in insertion order."""
        return [WeightedEdge(left, right, w) for (left, right), w in self._weights.items()]


def triangular_number(n: int) -> int:
    """Return ``n * (n + 1) / 2``, the number of cells in a lower triangle of size n."""
    return n * (n + 1) // 2


def create_gauss_pair(i: int) -> tuple[int, int]:
    """Decode a flat index into a lower-triangular cell ``(row, col)`` with ``col <= row``.

    Cells are numbered row by row: (0, 0), (1, 0), (1, 1), (2, 0), ...
    Diagonal cells are self pairs and must be skipped by callers that need
    proper edges.
    """
    row = (math.isqrt(8 * i + 1) - 1) // 2
    return row, i - triangular_number(row)


def gauss_pair_index(row: int, col: int) -> int:
    """Encode a lower-triangular cell; inverse of ``create_gauss_pair``."""
    if not 0 <= col <= row:
        raise ValueError(f"Cell ({row}, {col}) is not in the lower triangle")
    return triangular_number(row) + col


def _proper_cells(potential_num_edges: int) -> int:
    """Number of off-diagonal cells among the first ``potential_num_edges`` flat indices."""
    diagonal = (math.isqrt(8 * potential_num_edges + 1) - 1) // 2
    return potential_num_edges - diagonal


def get_random_edges(
    potential_num_edges: int,
    desired_num_edges: int,
    rng: random.Random | None = None,
    exclude: Iterable[tuple[int, int]] = (),
) -> list[WeightedEdge]:
    """Sample distinct unweighted edges uniformly.

    Flat indices are drawn one at a time until enough proper edges are found,
    so the cost follows ``desired_num_edges`` rather than the size of the
    index space. Requests for more than half of the available edges shuffle
    the whole space instead.

    Parameters
    ----------
    potential_num_edges : int
        Size of the flat index space, ``triangular_number(n)`` for a cluster
        of size n. Only ``potential - n`` of these cells are proper edges.
    desired_num_edges : int
        Number of edges to return.
    rng : random.Random | None, optional
        Random source.
    exclude : Iterable[tuple[int, int]], optional
        Edge keys ``(left, right)`` that must not be returned.

    Returns
    -------
    list[WeightedEdge]
        Exactly ``desired_num_edges`` distinct edges without weights.

    Raises
    ------
    InvariantError
        If the index space holds fewer proper edges than requested.
    """
    rng = rng or random.Random()
    if desired_num_edges <= 0:
        return []

    seen = {
        gauss_pair_index(right, left)
        for left, right in exclude
        if gauss_pair_index(right, left) < potential_num_edges
    }
    available = _proper_cells(potential_num_edges) - len(seen)
    if desired_num_edges > available:
        raise InvariantError(
            f"Cannot sample {desired_num_edges} edges from {potential_num_edges} cells "
            f"with {len(seen)} excluded"
        )

    edges: list[WeightedEdge] = []
    if 2 * desired_num_edges > available:
        cells: Iterable[int] = rng.sample(range(potential_num_edges), potential_num_edges)
    else:
        cells = iter(lambda: rng.randrange(potential_num_edges), -1)

    for i in cells:
        if i in seen:
            continue
        seen.add(i)
        row, col = create_gauss_pair(i)
        if row == col:
            continue
        edges.append(WeightedEdge(col, row))
        if len(edges) == desired_num_edges:
            break
    return edges


def close_triangles(
    edges: Iterable[WeightedEdge],
    desired_num_edges: int,
    rng: random.Random | None = None,
) -> list[WeightedEdge]:
    """Grow a sparse graph by closing triangles.

    For every two edges sharing an endpoint, the edge between their other
    endpoints is proposed. Rounds repeat on the grown graph until the total
    edge count reaches ``desired_num_edges`` or no new edge appears. Within a
    round, proposals are shuffled before being added.

    Parameters
    ----------
    edges : Iterable[WeightedEdge]
        Existing edges.
    desired_num_edges : int
        Target number of distinct edges including the existing ones.
    rng : random.Random | None, optional
        Random source.

    Returns
    -------
    list[WeightedEdge]
        Newly added, unweighted edges. The result may be shorter than needed
        when the closure is exhausted; the graph is then complete on each of
        its connected components.
    """
    rng = rng or random.Random()
    known: set[tuple[int, int]] = set()
    incident: dict[int, list[WeightedEdge]] = defaultdict(list)

    def _add(edge: WeightedEdge) -> None:
        known.add(edge.key)
        incident[edge.left].append(edge)
        incident[edge.right].append(edge)

    for edge in edges:
        if edge.key not in known:
            _add(edge)

    added: list[WeightedEdge] = []
    while len(known) < desired_num_edges:
        proposals: dict[tuple[int, int], WeightedEdge] = {}
        for node in sorted(incident):
            for first, second in itertools.combinations(incident[node], 2):
                third = first.triangle_edge(second)
                if third is not None and third.key not in known:
                    proposals.setdefault(third.key, third)
        if not proposals:
            break

        round_edges = list(proposals.values())
        rng.shuffle(round_edges)
        for edge in round_edges[: desired_num_edges - len(known)]:
            _add(edge)
            added.append(edge)

    return added
