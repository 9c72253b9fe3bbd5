import math

import pytest

from core.analytics.aggregations import (
    Histogram, average, evenness_score, percentage, ratio_percent, round_half_up
)


class TestPercentage:
    """Tests for percentage helper."""

    def test_zero_denominator_is_zero(self):
        assert percentage(5, 0) == 0
        assert percentage(0, 0) == 0

    def test_negative_denominator_is_zero(self):
        assert percentage(1, -3) == 0

    @pytest.mark.parametrize("part,total", [(0, 1), (1, 3), (2, 3), (7, 7), (1, 1000)])
    def test_bounded(self, part, total):
        value = percentage(part, total)
        assert 0 <= value <= 100

    def test_rounds_to_two_decimals(self):
        assert percentage(1, 3) == 33.33
        assert percentage(2, 3) == 66.67

    def test_one_decimal(self):
        assert percentage(1, 3, digits=1) == 33.3

    @pytest.mark.parametrize("part,total,expected", [
        (23, 160, 14.38),
        (41, 160, 25.63),
        (51, 160, 31.88),
    ])
    def test_exact_halves_round_up(self, part, total, expected):
        assert percentage(part, total) == expected

    def test_ratio_percent(self):
        assert ratio_percent(0.14375) == 14.38
        assert ratio_percent(0.75, 1) == 75.0
        assert ratio_percent(1 / 3, 1) == 33.3

    def test_half_rounds_up(self):
        assert round_half_up(0.125, 2) == 0.13
        assert round_half_up(2.5, 0) == 3


class TestAverage:

    def test_empty_is_zero(self):
        assert average([]) == 0

    def test_mean(self):
        assert average([0.5, 1.0]) == 0.75


class TestEvennessScore:
    """Tests for Shannon evenness."""

    def test_no_categories(self):
        assert evenness_score([]) == 0

    def test_single_category(self):
        assert evenness_score([5]) == 1

    def test_zero_counts_ignored(self):
        assert evenness_score([0, 5, 0]) == 1

    def test_perfectly_even(self):
        assert math.isclose(evenness_score([1, 1, 1, 1]), 1.0)

    def test_skewed_between_zero_and_one(self):
        score = evenness_score([100, 1])
        assert 0 < score < 1


class TestHistogram:

    def test_most_common_descending(self):
        histogram = Histogram(["b", "a", "a", "c", "a", "c"])
        assert histogram.most_common() == [("a", 3), ("c", 2), ("b", 1)]

    def test_ties_keep_insertion_order(self):
        histogram = Histogram(["x", "y", "z", "y", "x", "z"])
        assert [key for key, _ in histogram.most_common()] == ["x", "y", "z"]

    def test_totals(self):
        histogram = Histogram()
        histogram.add("a", 2)
        histogram.add("b")
        assert histogram.total == 3
        assert histogram["a"] == 2
        assert histogram["missing"] == 0
        assert len(histogram) == 2
