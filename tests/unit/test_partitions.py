"""Tests for partition enumeration, scoring and exact search."""

import itertools

import pytest

from ercluster.clustering.partitions import best_partition, restricted_growth_strings, score_partition
from ercluster.errors import InvariantError


@pytest.mark.unit
@pytest.mark.parametrize(("n", "bell"), [(1, 1), (2, 2), (3, 5), (4, 15), (5, 52), (6, 203)])
def test_restricted_growth_strings_count_is_bell_number(n: int, bell: int) -> None:
    """Test every set partition is enumerated exactly once."""
    strings = list(restricted_growth_strings(n))

    assert len(strings) == bell
    assert len(set(strings)) == bell


@pytest.mark.unit
def test_restricted_growth_strings_order_and_shape() -> None:
    """Test enumeration starts from all-zeros and stays growth restricted."""
    strings = list(restricted_growth_strings(3))

    assert strings == [(0, 0, 0), (0, 0, 1), (0, 1, 0), (0, 1, 1), (0, 1, 2)]
    assert list(restricted_growth_strings(0)) == []


@pytest.mark.unit
def test_score_partition_formula() -> None:
    """Test intra-block and cross-block contributions."""
    pairs = [(0, 1, 1.0), (0, 2, -1.0), (1, 2, -1.0)]

    # {0, 1}, {2}: 1/2 + 2 * (1/1 + 1/2)
    assert score_partition([0, 0, 1], pairs) == pytest.approx(3.5)
    # one block: (1 - 1 - 1) / 3
    assert score_partition([0, 0, 0], pairs) == pytest.approx(-1 / 3)


@pytest.mark.unit
def test_best_partition_is_optimal() -> None:
    """Test the exact search beats or ties every enumerated partition."""
    weights = {
        (i, j): ((i * 7 + j * 3) % 5 - 2) / 2 for i, j in itertools.combinations(range(6), 2)
    }
    pairs = [(i, j, w) for (i, j), w in weights.items()]

    best = best_partition(6, lambda i, j: weights[(i, j)])
    best_score = score_partition(best, pairs)

    for assignment in restricted_growth_strings(6):
        assert score_partition(assignment, pairs) <= best_score


@pytest.mark.unit
def test_best_partition_keeps_first_maximum() -> None:
    """Test ties go to the partition enumerated first."""
    assert best_partition(3, lambda i, j: 0.0) == (0, 0, 0)
    assert best_partition(1, lambda i, j: 1.0) == (0,)


@pytest.mark.unit
def test_best_partition_requests_each_weight_once() -> None:
    """Test every pair weight is requested exactly once across all 203 partitions."""
    requested: list[tuple[int, int]] = []

    def weight(i: int, j: int) -> float:
        requested.append((i, j))
        return 1.0 if (i < 3) == (j < 3) else -1.0

    best = best_partition(6, weight)

    assert sorted(requested) == list(itertools.combinations(range(6), 2))
    assert best == (0, 0, 0, 1, 1, 1)


@pytest.mark.unit
def test_best_partition_rejects_empty_cluster() -> None:
    """Test zero items is an invariant violation."""
    with pytest.raises(InvariantError, match="empty cluster"):
        best_partition(0, lambda i, j: 0.0)
