"""
Unit tests for statistical_analysis module

Tests the descriptive statistics behind pattern detection.
"""

import pytest
from reflxy.services.statistical_analysis import (
    clamp,
    mean,
    std_dev,
    pearson_correlation,
    percentile,
    round_half_up,
    round_to_nearest,
)


class TestMeanAndStdDev:
    """Tests for mean() and std_dev()"""

    def test_mean_of_empty_is_zero(self):
        assert mean([]) == 0

    def test_mean(self):
        assert mean([10, 20, 30, 40]) == 25

    def test_std_dev_of_empty_is_zero(self):
        assert std_dev([]) == 0

    def test_std_dev_of_constant_sequence_is_zero(self):
        assert std_dev([42, 42, 42, 42, 42]) == 0

    def test_std_dev_is_population(self):
        """Population std dev divides by n: [2,4,4,4,5,5,7,9] -> 2"""
        assert std_dev([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)

    def test_std_dev_unchanged_by_shift(self):
        values = [3, 8, 15, 21]
        shifted = [value + 50 for value in values]
        assert std_dev(shifted) == pytest.approx(std_dev(values))


class TestPearsonCorrelation:
    """Tests for pearson_correlation()"""

    def test_perfect_positive_correlation(self):
        assert pearson_correlation([1, 2, 3, 4], [10, 20, 30, 40]) == pytest.approx(1.0)

    def test_perfect_negative_correlation(self):
        assert pearson_correlation([1, 2, 3, 4], [40, 30, 20, 10]) == pytest.approx(-1.0)

    def test_fewer_than_three_points_returns_zero(self):
        assert pearson_correlation([1, 2], [5, 9]) == 0
        assert pearson_correlation([], []) == 0

    def test_mismatched_lengths_return_zero(self):
        assert pearson_correlation([1, 2, 3, 4], [1, 2, 3]) == 0

    def test_zero_variance_returns_zero(self):
        assert pearson_correlation([5, 5, 5, 5], [1, 2, 3, 4]) == 0
        assert pearson_correlation([1, 2, 3, 4], [7, 7, 7, 7]) == 0

    def test_symmetric(self):
        xs = [12, 40, 85, 130, 22, 64]
        ys = [80, 72, 55, 41, 77, 70]
        assert pearson_correlation(xs, ys) == pytest.approx(pearson_correlation(ys, xs))

    def test_bounded(self):
        r = pearson_correlation([12, 40, 85, 130, 22], [80, 72, 55, 41, 90])
        assert -1.0 <= r <= 1.0
        assert r < 0


class TestPercentile:
    """Tests for percentile()"""

    def test_empty_is_zero(self):
        assert percentile([], 0.5) == 0

    def test_extremes(self):
        values = [30, 5, 80, 12, 44]
        assert percentile(values, 0) == min(values)
        assert percentile(values, 1) == max(values)

    def test_uses_lower_index_without_interpolation(self):
        # sorted [10, 20, 30, 40]: floor(0.75 * 3) = 2
        assert percentile([40, 10, 30, 20], 0.75) == 30
        # floor(0.3 * 3) = 0
        assert percentile([40, 10, 30, 20], 0.3) == 10

    def test_out_of_range_fraction_is_clamped(self):
        assert percentile([1, 2, 3], 1.5) == 3
        assert percentile([1, 2, 3], -0.5) == 1

    def test_does_not_mutate_input(self):
        values = [3, 1, 2]
        percentile(values, 0.5)
        assert values == [3, 1, 2]


class TestRounding:
    """Tests for rounding helpers"""

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(-2.5) == -2
        assert round_half_up(15.8) == 16

    def test_round_to_nearest(self):
        assert round_to_nearest(17, 5) == 15
        assert round_to_nearest(17.5, 5) == 20
        assert round_to_nearest(9.1, 2) == 10
        assert round_to_nearest(44, 10) == 40
        assert round_to_nearest(45, 10) == 50

    def test_clamp(self):
        assert clamp(1.6) == 1.0
        assert clamp(-0.2) == 0.0
        assert clamp(0.4) == 0.4
        assert clamp(120, 0, 100) == 100
