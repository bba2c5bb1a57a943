"""
Unit tests for pairwise Pearson correlation
"""

import math

import pytest

from sheetviz.constants import (
    STRENGTH_MODERATE,
    STRENGTH_STRONG,
    STRENGTH_VERY_WEAK,
    STRENGTH_WEAK,
)
from sheetviz.correlation import (
    classify_strength,
    correlate_all,
    correlate_pair,
    interpret,
    paired_values,
    pearson,
    t_statistic,
)
from sheetviz.errors import InsufficientData
from sheetviz.table_parser import normalize_table


class TestPearson:
    """Test cases for the coefficient itself"""

    def test_perfect_positive(self):
        """Collinear data gives exactly 1"""
        assert pearson([1, 2, 3], [2, 4, 6]) == 1.0

    def test_perfect_negative(self):
        assert pearson([1, 2, 3], [6, 4, 2]) == -1.0

    def test_zero_variance_side(self):
        """A constant column has no linear relationship"""
        assert pearson([1, 2, 3], [5, 5, 5]) == 0.0

    def test_symmetry(self):
        xs = [1.5, 2.25, 3.1, 7.7, 0.3, 4.4]
        ys = [10.0, 8.2, 9.9, 1.1, 12.5, 3.3]
        assert pearson(xs, ys) == pearson(ys, xs)

    def test_bounds(self):
        samples = [
            ([1, 2, 3, 4], [1, 3, 2, 4]),
            ([0.1, 0.2, 0.3], [0.3, 0.2, 0.1000001]),
            ([1e6, 1e6 + 1, 1e6 + 2], [3, 1, 2]),
        ]
        for xs, ys in samples:
            assert -1.0 <= pearson(xs, ys) <= 1.0

    def test_large_magnitudes(self):
        """Values whose squares overflow a float keep their sign and bounds"""
        assert pearson([1e160, 2e160, 3e160], [3, 2, 1]) == pytest.approx(-1.0)
        assert pearson([-1e308, 0, 1e308], [1, 2, 3]) == pytest.approx(1.0)
        assert pearson([1e308, 1e308, 1], [1, 2, 3]) == pytest.approx(-math.sqrt(3) / 2)

    def test_tiny_magnitudes(self):
        assert pearson([1e-310, 2e-310, 3e-310], [1, 2, 3]) == pytest.approx(1.0)

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            pearson([1, 2], [1])


class TestStrengthAndSignificance:
    """Test cases for strength classes and the t statistic"""

    def test_strength_classes(self):
        assert classify_strength(0.7) == STRENGTH_STRONG
        assert classify_strength(-0.85) == STRENGTH_STRONG
        assert classify_strength(0.5) == STRENGTH_MODERATE
        assert classify_strength(0.3) == STRENGTH_MODERATE
        assert classify_strength(-0.2) == STRENGTH_WEAK
        assert classify_strength(0.05) == STRENGTH_VERY_WEAK

    def test_t_statistic(self):
        assert t_statistic(0.5, 10) == pytest.approx(0.5 * math.sqrt(8 / 0.75))
        assert t_statistic(0.0, 5) == 0.0

    def test_t_statistic_perfect(self):
        assert t_statistic(1.0, 3) == math.inf
        assert t_statistic(-1.0, 3) == -math.inf

    def test_interpretation(self):
        text = interpret(-0.8, STRENGTH_STRONG, 'price', 'demand')
        assert 'strong negatively correlated' in text
        assert 'tends to decrease' in text
        assert 'price' in text and 'demand' in text


class TestCorrelateTable:
    """Test cases for correlating table columns"""

    def setup_method(self):
        self.table = normalize_table({
            'headers': ['x', 'y', 'z', 'sparse'],
            'rows': [
                [1, 2, 9, None],
                [2, 4, 'n/a', 5],
                [3, 6, 7, None],
                [4, 8, 1, None],
            ],
        })

    def test_perfect_pair(self):
        result = correlate_pair(self.table, 'x', 'y')
        assert result.coefficient == 1.0
        assert result.strength == STRENGTH_STRONG
        assert result.significant is True
        assert result.t_statistic == math.inf
        assert result.sample_size == 4
        assert result.direction == 'positive'
        assert result.to_dict()['tStatistic'] is None

    def test_pairwise_complete_rows(self):
        """Rows where either side fails to parse are dropped from both"""
        xs, ys = paired_values(self.table, 'x', 'z')
        assert xs == [1.0, 3.0, 4.0]
        assert ys == [9.0, 7.0, 1.0]
        assert correlate_pair(self.table, 'x', 'z').sample_size == 3

    def test_insufficient_pair(self):
        with pytest.raises(InsufficientData):
            correlate_pair(self.table, 'x', 'sparse')

    def test_all_pairs(self):
        """One entry per unordered pair; thin pairs are skipped"""
        results = correlate_all(self.table, ['x', 'y', 'z', 'sparse'])
        pairs = [(r.column_a, r.column_b) for r in results]
        assert pairs == [('x', 'y'), ('x', 'z'), ('y', 'z')]
        assert len({r.pair for r in results}) == len(results)

    def test_order_independent(self):
        forward = correlate_all(self.table, ['x', 'z'])[0]
        backward = correlate_all(self.table, ['z', 'x'])[0]
        assert forward.coefficient == backward.coefficient
        assert forward.pair == backward.pair

    def test_unknown_column(self):
        with pytest.raises(KeyError):
            correlate_all(self.table, ['x', 'nope'])

    def test_single_column(self):
        assert correlate_all(self.table, ['x']) == []

    def test_near_float_limit(self):
        """Huge finite values do not abort the batch"""
        table = normalize_table({
            'headers': ['big', 'small', 'other'],
            'rows': [[1e308, 1, 5], [1e308, 2, 3], [1, 3, 4]],
        })
        results = correlate_all(table, ['big', 'small', 'other'])
        assert [(r.column_a, r.column_b) for r in results] == [
            ('big', 'small'), ('big', 'other'), ('small', 'other'),
        ]
        for r in results:
            assert -1.0 <= r.coefficient <= 1.0
        assert results[0].direction == 'negative'
