"""Tests for the split strategies."""

import numpy as np
import pytest
from Partition import (
    BlockSet,
    ConfigurationError,
    Coordinate,
    Grid,
    GridInvariantError,
    RoughlyRectangularSplit,
    SearchSplit,
    SimpleSplit,
    SplitMethod,
    Topography,
    create_splitter,
    create_test_topography,
)
from Partition.splits import (
    create_sub_parts,
    cut,
    distinct_permutations,
    slice_layout,
    split_work,
    split_work_slices,
    zigzag_columns,
    zigzag_rows,
)

STRATEGIES = [SimpleSplit, RoughlyRectangularSplit, SearchSplit]


@pytest.fixture(scope="module")
def ocean():
    """Ocean blocks of the 12x10 test grid, cyclic in X, tripole in Y."""
    grid = Grid.from_topography(create_test_topography(), 1, 1, "cyclic", "tripole")
    return BlockSet(grid.ocean_blocks())


def coordinates(sets):
    return [sorted(b.coordinate for b in s) for s in sets]


class TestWorkAccounting:
    """Tests for the work distribution helpers."""

    @pytest.mark.parametrize("work,parts,expected", [
        (10, 4, [3, 3, 2, 2]),
        (100, 4, [25, 25, 25, 25]),
        (7, 7, [1] * 7),
        (5, 1, [5]),
    ])
    def test_split_work(self, work, parts, expected):
        assert split_work(work, parts) == expected

    @pytest.mark.parametrize("work,slices,expected", [
        (11, [2, 2], [6, 5]),
        (100, [2, 2], [50, 50]),
        (100, [3, 2, 2], [44, 28, 28]),
        (100, [2, 2, 2], [34, 34, 32]),
    ])
    def test_split_work_slices(self, work, slices, expected):
        result = split_work_slices(work, slices, sum(slices))
        assert result == expected
        assert sum(result) == work

    @pytest.mark.parametrize("parts,sub_parts,left_over,expected", [
        (3, 3, -2, [3, 2, 2]),
        (3, 3, 1, [4, 3, 3]),
        (2, 2, 0, [2, 2]),
    ])
    def test_create_sub_parts(self, parts, sub_parts, left_over, expected):
        assert create_sub_parts(parts, sub_parts, left_over) == expected

    @pytest.mark.parametrize("parts,expected", [
        (1, [1]),
        (2, [1, 1]),
        (3, [2, 1]),
        (4, [2, 2]),
        (5, [2, 2, 1]),
        (6, [2, 2, 2]),
        (7, [3, 2, 2]),
        (9, [3, 3, 3]),
        (12, [3, 3, 3, 3]),
    ])
    def test_slice_layout(self, parts, expected):
        """Square, rectangular and imperfect arrangements."""
        layout = slice_layout(parts)
        assert layout == expected
        assert sum(layout) == parts


class TestTraversals:
    """Tests for zigzag orderings and cutting."""

    @pytest.fixture
    def rectangle(self):
        topo = Topography(np.ones((2, 3), dtype=np.int64))
        grid = Grid.from_topography(topo, 1, 1, "closed", "closed")
        return BlockSet(grid)

    def test_zigzag_rows(self, rectangle):
        order = [b.coordinate for b in zigzag_rows(rectangle)]
        assert order == [Coordinate(0, 0), Coordinate(1, 0), Coordinate(2, 0),
                         Coordinate(2, 1), Coordinate(1, 1), Coordinate(0, 1)]

    def test_zigzag_rows_reversed(self, rectangle):
        order = [b.coordinate for b in zigzag_rows(rectangle, reverse=True)]
        assert order[:3] == [Coordinate(2, 0), Coordinate(1, 0), Coordinate(0, 0)]

    def test_zigzag_columns(self, rectangle):
        order = [b.coordinate for b in zigzag_columns(rectangle)]
        assert order == [Coordinate(0, 0), Coordinate(0, 1), Coordinate(1, 1),
                         Coordinate(1, 0), Coordinate(2, 0), Coordinate(2, 1)]

    def test_zigzag_skips_holes(self, ocean):
        """Traversals visit every member exactly once."""
        for traversal in (zigzag_rows, zigzag_columns):
            for reverse in (False, True):
                visited = [b.block_id for b in traversal(ocean, reverse)]
                assert sorted(visited) == sorted(b.block_id for b in ocean)

    def test_cut(self, rectangle):
        sets = cut(zigzag_rows(rectangle), [4, 2])
        assert [s.size for s in sets] == [4, 2]
        assert [s.index for s in sets] == [0, 1]

    def test_cut_short(self, rectangle):
        with pytest.raises(GridInvariantError):
            cut(zigzag_rows(rectangle), [4, 4])


class TestDistinctPermutations:
    """Tests for duplicate-free ordering enumeration."""

    def test_with_repeats(self):
        assert list(distinct_permutations([2, 1, 1])) == [(1, 1, 2), (1, 2, 1), (2, 1, 1)]

    def test_all_distinct(self):
        perms = list(distinct_permutations([3, 1, 2]))
        assert len(perms) == 6
        assert len(set(perms)) == 6

    def test_all_equal(self):
        assert list(distinct_permutations([(25, 2), (25, 2)])) == [((25, 2), (25, 2))]

    def test_input_not_modified(self):
        items = [3, 1, 2]
        list(distinct_permutations(items))
        assert items == [3, 1, 2]


class TestSplitContract:
    """Tests shared by every strategy."""

    @pytest.mark.parametrize("strategy", STRATEGIES)
    @pytest.mark.parametrize("k", [1, 2, 3, 4, 5, 7, 8])
    def test_balanced_partition(self, ocean, strategy, k):
        """Exactly k non-empty, balanced, disjoint subsets covering the input."""
        result = strategy().split(ocean, k)

        assert len(result) == k
        assert sorted((s.size for s in result), reverse=True) == split_work(ocean.size, k)
        assert [s.index for s in result] == list(range(k))

        ids = [b.block_id for s in result for b in s]
        assert len(ids) == len(set(ids)) == ocean.size
        assert set(ids) == {b.block_id for b in ocean}

    @pytest.mark.parametrize("strategy", STRATEGIES)
    def test_invalid_counts(self, ocean, strategy):
        with pytest.raises(ConfigurationError):
            strategy().split(ocean, 0)
        with pytest.raises(ConfigurationError):
            strategy().split(ocean, ocean.size + 1)

    @pytest.mark.parametrize("strategy", STRATEGIES)
    def test_one_block_per_part(self, strategy):
        topo = Topography(np.ones((2, 3), dtype=np.int64))
        s = BlockSet(Grid.from_topography(topo, 1, 1, "closed", "closed"))

        result = strategy().split(s, 6)
        assert [part.size for part in result] == [1] * 6

    @pytest.mark.parametrize("strategy", STRATEGIES)
    def test_deterministic(self, ocean, strategy):
        assert coordinates(strategy().split(ocean, 5)) == coordinates(strategy().split(ocean, 5))


class TestStrategies:
    """Tests for the arrangement each strategy produces."""

    def test_simple_is_one_dimensional(self, ocean):
        """The test set is wider than tall, so parts are column bands."""
        result = SimpleSplit().split(ocean, 4)
        for left, right in zip(result, result[1:]):
            assert left.max_x <= right.min_x

    def test_roughly_rectangular_two_by_two(self, ocean):
        """Four parts form two column bands of two."""
        result = RoughlyRectangularSplit().split(ocean, 4)

        assert [s.size for s in result] == [25, 25, 25, 25]
        assert sum(1 for s in result if s.max_x <= 5) == 2
        assert sum(1 for s in result if s.min_x >= 6) == 2

    @pytest.mark.parametrize("k", [2, 3, 4, 6, 8])
    def test_search_sum_bound(self, ocean, k):
        """Search never communicates more in total than the other strategies."""
        search = sum(s.communication for s in SearchSplit("sum").split(ocean, k))
        rect = sum(s.communication for s in RoughlyRectangularSplit().split(ocean, k))
        simple = sum(s.communication for s in SimpleSplit().split(ocean, k))

        assert search <= rect
        assert search <= simple

    @pytest.mark.parametrize("k", [2, 4, 6])
    def test_search_max_bound(self, ocean, k):
        """With the 'max' policy the peak is never above the near-square split."""
        search = max(s.communication for s in SearchSplit("max").split(ocean, k))
        rect = max(s.communication for s in RoughlyRectangularSplit().split(ocean, k))

        assert search <= rect

    def test_search_leaves_input_untouched(self, ocean):
        before = [(b.block_id, b.coordinate) for b in ocean]
        SearchSplit().split(ocean, 4)
        assert [(b.block_id, b.coordinate) for b in ocean] == before


class TestFactory:
    """Tests for strategy selection."""

    @pytest.mark.parametrize("method,expected", [
        ("simple", SimpleSplit),
        ("RoughlyRect", RoughlyRectangularSplit),
        ("SEARCH", SearchSplit),
        (SplitMethod.SIMPLE, SimpleSplit),
    ])
    def test_create(self, method, expected):
        assert type(create_splitter(method)) is expected

    def test_comparison_policy(self):
        splitter = create_splitter("search", "MAX")
        assert splitter.comparison == "max"

    def test_unknown_method(self):
        with pytest.raises(ConfigurationError):
            create_splitter("spiral")

    def test_unknown_comparison(self):
        with pytest.raises(ConfigurationError):
            SearchSplit("median")
