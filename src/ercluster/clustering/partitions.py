"""Exhaustive partition search for small clusters.

Set partitions of ``{0, ..., n-1}`` are enumerated as restricted growth
strings: index 0 carries label 0 and every later label exceeds the maximum of
the preceding labels by at most one. Each partition appears exactly once, so
the number of strings for ``n`` items is the n-th Bell number.
"""

import itertools
import math
from collections.abc import Callable, Iterable, Iterator, Sequence

from ercluster.errors import InvariantError

__all__ = [
    "restricted_growth_strings",
    "score_partition",
    "best_partition",
]


def _can_open_next_label(label: int, prefix_max: int) -> bool:
    """Whether ``label + 1`` stays at most one above every earlier label."""
    return label <= prefix_max


def restricted_growth_strings(n: int) -> Iterator[tuple[int, ...]]:
    """Enumerate all set partitions of ``n`` items in lexicographic order.

    Parameters
    ----------
    n : int
        Number of items.

    Yields
    ------
    tuple[int, ...]
        Partition assignment; ``assignment[i]`` is the block label of item i.
        The first assignment is all zeros (one block).
    """
    if n <= 0:
        return

    labels = [0] * n
    # prefix_max[i] == max(labels[: i + 1])
    prefix_max = [0] * n
    while True:
        yield tuple(labels)
        for index in range(n - 1, 0, -1):
            if _can_open_next_label(labels[index], prefix_max[index - 1]):
                labels[index] += 1
                top = max(prefix_max[index - 1], labels[index])
                prefix_max[index] = top
                for rest in range(index + 1, n):
                    labels[rest] = 0
                    prefix_max[rest] = top
                break
        else:
            return


def score_partition(
    assignment: Sequence[int],
    weighted_pairs: Iterable[tuple[int, int, float]],
) -> float:
    """Score a partition against pairwise weights.

    A pair inside one block adds its weight divided by the block size. A pair
    split across blocks subtracts its weight divided by the number of items
    outside each of the two blocks.

    Parameters
    ----------
    assignment : Sequence[int]
        Block label per item; labels are integers in ``[0, len(assignment))``.
    weighted_pairs : Iterable[tuple[int, int, float]]
        ``(i, j, weight)`` triples; pairs not listed count as weight 0.

    Returns
    -------
    float
        Higher is better.
    """
    n = len(assignment)
    block_sizes = [0] * n
    for label in assignment:
        block_sizes[label] += 1

    score = 0.0
    for i, j, weight in weighted_pairs:
        size_i = block_sizes[assignment[i]]
        if assignment[i] == assignment[j]:
            score += weight / size_i
        else:
            score -= weight / (n - size_i) + weight / (n - block_sizes[assignment[j]])
    return score


def best_partition(n: int, weight: Callable[[int, int], float]) -> tuple[int, ...]:
    """Find the highest scoring partition by exhaustive enumeration.

    Parameters
    ----------
    n : int
        Number of items.
    weight : Callable[[int, int], float]
        Weight of pair ``(i, j)`` with ``i < j``. Each pair is requested once,
        while the first partition is scored, so an implementation may compute
        unknown weights on demand.

    Returns
    -------
    tuple[int, ...]
        Best assignment; ties go to the partition enumerated first.

    Raises
    ------
    InvariantError
        If ``n`` is not positive.
    """
    if n <= 0:
        raise InvariantError("Cannot refine an empty cluster")

    weighted_pairs: list[tuple[int, int, float]] | None = None
    best: tuple[int, ...] | None = None
    best_score = -math.inf
    for assignment in restricted_growth_strings(n):
        if weighted_pairs is None:
            resolved = ((i, j, weight(i, j)) for i, j in itertools.combinations(range(n), 2))
            # zero weights never change a score
            weighted_pairs = [pair for pair in resolved if pair[2] != 0.0]
        score = score_partition(assignment, weighted_pairs)
        if best is None or score > best_score:
            best = assignment
            best_score = score

    if best is None:
        raise InvariantError("Non-empty clusters should have at least one partition")
    return best
