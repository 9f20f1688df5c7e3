"""Tests for block size selection."""

import pytest
from Partition import (
    ConfigurationError,
    block_cost,
    create_test_topography,
    divisors,
    near_optimal,
    prime_factors,
    rank_block_sizes,
)


class TestArithmetic:
    """Tests for divisor and factor helpers."""

    def test_divisors(self):
        assert divisors(12) == [1, 2, 3, 4, 6, 12]
        assert divisors(1) == [1]
        with pytest.raises(ConfigurationError):
            divisors(0)

    @pytest.mark.parametrize("value,expected", [
        (60, [5, 3, 2, 2]),
        (13, [13]),
        (2400, [5, 5, 3, 2, 2, 2, 2, 2]),
        (3600, [5, 5, 3, 3, 2, 2, 2, 2]),
    ])
    def test_prime_factors(self, value, expected):
        assert prime_factors(value) == expected

    def test_prime_factors_invalid(self):
        with pytest.raises(ConfigurationError):
            prime_factors(1)


class TestRanking:
    """Tests for ranking block sizes by computed points."""

    def test_block_cost(self):
        """Every ocean point is one block with a 2-wide halo all round."""
        topo = create_test_topography()
        assert block_cost(topo, 1, 1) == 100 * 5 * 5

    def test_all_candidates(self):
        ranking = rank_block_sizes(create_test_topography())

        assert len(ranking) == 6 * 4
        assert ranking["cost"].is_monotonic_increasing
        assert ranking["overhead"].iloc[0] == 0.0
        assert (ranking["overhead"] >= 0).all()

    def test_cost_column(self):
        topo = create_test_topography(2, 2)
        ranking = rank_block_sizes(topo)
        row = ranking[(ranking["block_width"] == 2) & (ranking["block_height"] == 2)].iloc[0]

        assert row["blocks"] == 100
        assert row["cost"] == block_cost(topo, 2, 2) == 100 * 6 * 6

    def test_min_size(self):
        ranking = rank_block_sizes(create_test_topography(), min_size=5)
        assert sorted(zip(ranking["block_width"], ranking["block_height"])) == [(6, 5), (6, 10), (12, 5), (12, 10)]

    def test_min_size_too_large(self):
        with pytest.raises(ConfigurationError):
            rank_block_sizes(create_test_topography(), min_size=13)

    def test_near_optimal(self):
        ranking = rank_block_sizes(create_test_topography(4, 4))
        near = near_optimal(ranking)

        assert len(near) >= 1
        assert (near["overhead"] <= 0.025).all()
        assert (near["overhead"] <= near["within"]).all()
        assert near["within"].iloc[0] == 0.005
