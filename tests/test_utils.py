"""Tests for helper functions in utils.py.

Tests clamp with ordered and swapped bounds, non-numeric and non-finite
input, and the distance helpers used by drag placement.
"""

import math

import pytest

from pylinefitqt.utils import clamp, distance, far_enough


class TestClamp:
    """Tests for clamp function."""

    def test_within_range(self):
        assert clamp(0.5) == 0.5
        assert clamp(150.0, 0.0, 400.0) == 150.0

    def test_outside_range(self):
        assert clamp(-3.0, 0.0, 400.0) == 0.0
        assert clamp(401.5, 0.0, 400.0) == 400.0

    def test_swapped_bounds(self):
        """Bounds given in reverse order are swapped."""
        assert clamp(5.0, 10.0, 0.0) == 5.0
        assert clamp(-1.0, 10.0, 0.0) == 0.0

    def test_non_numeric_returns_lower_bound(self):
        assert clamp("abc", 2.0, 3.0) == 2.0
        assert clamp(None, 2.0, 3.0) == 2.0

    def test_non_finite_returns_lower_bound(self):
        assert clamp(math.nan, 1.0, 2.0) == 1.0
        assert clamp(math.inf, 1.0, 2.0) == 1.0


class TestDistance:
    """Tests for distance and far_enough."""

    def test_distance(self):
        assert distance((0.0, 0.0), (3.0, 4.0)) == pytest.approx(5.0)
        assert distance((1.0, 1.0), (1.0, 1.0)) == 0.0

    def test_far_enough_without_previous_point(self):
        assert far_enough(None, (0.0, 0.0), 15.0)

    def test_far_enough_threshold_is_inclusive(self):
        assert far_enough((0.0, 0.0), (15.0, 0.0), 15.0)
        assert not far_enough((0.0, 0.0), (14.9, 0.0), 15.0)
