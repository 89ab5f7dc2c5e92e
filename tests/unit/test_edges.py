"""Tests for weighted edges, pair indexing and edge sampling."""

import random

import pytest

from ercluster.clustering.edges import (
    WeightedEdge,
    WeightMatrix,
    close_triangles,
    create_gauss_pair,
    gauss_pair_index,
    get_random_edges,
    triangular_number,
)
from ercluster.errors import InvariantError

# ---------------------------------------------------------------------------
# Pair indexing
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize(("n", "expected"), [(0, 0), (1, 1), (2, 3), (5, 15), (100, 5050)])
def test_triangular_number(n: int, expected: int) -> None:
    """Test triangular numbers."""
    assert triangular_number(n) == expected


@pytest.mark.unit
def test_gauss_pairs_enumerate_lower_triangle_row_by_row() -> None:
    """Test flat indices decode row by row for n = 7."""
    expected = [(row, col) for row in range(7) for col in range(row + 1)]

    decoded = [create_gauss_pair(i) for i in range(triangular_number(7))]

    assert decoded == expected


@pytest.mark.unit
def test_gauss_pair_index_is_inverse() -> None:
    """Test encoding a decoded cell yields the original index."""
    for i in range(triangular_number(50)):
        assert gauss_pair_index(*create_gauss_pair(i)) == i


@pytest.mark.unit
def test_gauss_pair_index_rejects_upper_triangle() -> None:
    """Test cells above the diagonal are rejected."""
    with pytest.raises(ValueError, match="lower triangle"):
        gauss_pair_index(1, 2)


# ---------------------------------------------------------------------------
# WeightedEdge / WeightMatrix
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_weighted_edge_canonical_order_and_triangle() -> None:
    """Test edges normalize endpoint order and close triangles."""
    edge = WeightedEdge.of(3, 1)

    assert edge.key == (1, 3)
    assert not edge.is_weighted
    assert edge.with_weight(0.5).weight == 0.5

    assert edge.triangle_edge(WeightedEdge.of(3, 7)) == WeightedEdge(1, 7)
    assert edge.triangle_edge(WeightedEdge.of(4, 5)) is None
    assert edge.triangle_edge(WeightedEdge.of(1, 3, 0.2)) is None


@pytest.mark.unit
def test_weight_matrix_distinguishes_unknown_from_zero() -> None:
    """Test an unknown weight is not the same as a known -0.0."""
    matrix = WeightMatrix(4)
    matrix.set(2, 0, -0.0)

    assert matrix.is_known(0, 2)
    assert matrix.get(0, 2) == 0.0
    assert matrix.get(1, 2) is None
    assert matrix.edges() == [WeightedEdge(0, 2, -0.0)]

    with pytest.raises(ValueError, match="self pair"):
        matrix.get(1, 1)


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_get_random_edges_returns_distinct_proper_edges() -> None:
    """Test sampling 45 edges from a cluster of 10."""
    edges = get_random_edges(triangular_number(10), 45, random.Random(1))

    assert len(edges) == 45
    assert len({e.key for e in edges}) == 45
    assert all(e.left < e.right < 10 for e in edges)
    assert all(e.weight is None for e in edges)


@pytest.mark.unit
def test_get_random_edges_from_55_cells() -> None:
    """Test sampling every proper edge of the 55-cell space."""
    assert len(get_random_edges(55, 45)) == 45


@pytest.mark.unit
def test_get_random_edges_edge_cases() -> None:
    """Test zero requests and impossible requests."""
    assert get_random_edges(15, 0) == []

    with pytest.raises(InvariantError):
        get_random_edges(15, 11)


@pytest.mark.unit
def test_get_random_edges_draws_lazily_from_huge_space() -> None:
    """Test a few edges from a million-node cluster without enumerating its cells."""
    edges = get_random_edges(triangular_number(1_000_000), 55, random.Random(3))

    assert len({e.key for e in edges}) == 55
    assert all(0 <= e.left < e.right < 1_000_000 for e in edges)


@pytest.mark.unit
def test_get_random_edges_skips_excluded_keys() -> None:
    """Test excluded edges are never returned and shrink the available space."""
    present = {(0, 1), (2, 3), (1, 4)}

    edges = get_random_edges(triangular_number(5), 7, random.Random(0), exclude=present)

    assert len(edges) == 7
    assert {e.key for e in edges}.isdisjoint(present)

    with pytest.raises(InvariantError, match="3 excluded"):
        get_random_edges(triangular_number(5), 8, exclude=present)


@pytest.mark.unit
def test_close_triangles_completes_connected_component() -> None:
    """Test closure of a path graph reaches the complete graph."""
    path = [WeightedEdge(0, 1, 1.0), WeightedEdge(1, 2, 1.0), WeightedEdge(2, 3, 1.0)]

    added = close_triangles(path, 100, random.Random(0))

    assert {e.key for e in added} == {(0, 2), (1, 3), (0, 3)}
    assert all(e.weight is None for e in added)


@pytest.mark.unit
def test_close_triangles_stops_at_desired_count() -> None:
    """Test closure adds no more edges than needed."""
    star = [WeightedEdge(0, i) for i in range(1, 6)]

    added = close_triangles(star, 7, random.Random(0))

    assert len(added) == 2
    assert all(e.left > 0 for e in added)


@pytest.mark.unit
def test_close_triangles_cannot_bridge_components() -> None:
    """Test disjoint edges yield no new edges."""
    assert close_triangles([WeightedEdge(0, 1), WeightedEdge(2, 3)], 6) == []
