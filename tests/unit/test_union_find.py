"""Tests for Union-Find and component counting."""

import pytest

from ercluster.clustering.union_find import UnionFind, count_components


@pytest.mark.unit
def test_union_find_basic() -> None:
    """Test basic Union-Find operations."""
    uf: UnionFind[int] = UnionFind()
    for x in range(5):
        uf.make_set(x)

    uf.union(0, 1)
    uf.union(3, 4)
    uf.union(1, 0)

    assert uf.find(0) == uf.find(1)
    assert uf.find(3) == uf.find(4)
    assert uf.find(0) != uf.find(3)
    assert sorted(sorted(c) for c in uf.get_components()) == [[0, 1], [2], [3, 4]]


@pytest.mark.unit
def test_union_find_find_creates_missing_set() -> None:
    """Test find() on an unknown element makes it its own root."""
    uf: UnionFind[str] = UnionFind()

    assert uf.find("x") == "x"
    assert uf.get_components() == [["x"]]


@pytest.mark.unit
@pytest.mark.parametrize(
    ("links", "expected"),
    [
        ([], 4),
        ([(0, 1), (2, 3)], 2),
        ([(0, 1), (1, 2), (2, 3)], 1),
    ],
)
def test_count_components(links: list[tuple[int, int]], expected: int) -> None:
    """Test isolated nodes count as their own component."""
    assert count_components(range(4), links) == expected


@pytest.mark.unit
def test_union_find_membership() -> None:
    """Test only elements passed to union or find are members."""
    uf: UnionFind[int] = UnionFind()
    uf.union(1, 2)

    assert 1 in uf
    assert 2 in uf
    assert 3 not in uf
