"""
Tests for pure geometry functions.

These tests validate individual pure functions that have no side effects.
"""

import pytest

from lumiose_map.core.annotation.state import Point
from lumiose_map.core.annotation.utils import (
    bounds_center,
    closing_threshold,
    distance,
    effective_grid,
    is_closing_click,
    measure,
    ring_radius_pixels,
    snap,
)
from lumiose_map.utils.config import FIXED_PIXELS_PER_UNIT


class TestSnap:
    """Tests for grid snapping."""

    def test_grid_five(self):
        """A click at (12, 13) on a grid of 5 lands on (10, 15)."""
        assert snap(Point(12, 13), 5) == Point(10, 15)

    def test_halves_round_up(self):
        assert snap(Point(2.5, -2.5), 1) == Point(3, -2)
        assert snap(Point(7.5, 12.5), 5) == Point(10, 15)

    def test_disabled_is_identity(self):
        p = Point(12.3, 45.6)
        assert snap(p, 5, enabled=False) is p

    @pytest.mark.parametrize("grid_size", [0, None, -3])
    def test_degenerate_grid_falls_back_to_one(self, grid_size):
        assert effective_grid(grid_size) == 1.0
        assert snap(Point(1.4, 1.6), grid_size) == Point(1, 2)

    @pytest.mark.parametrize("grid_size", [1, 2.5, 5, 10])
    def test_idempotent(self, grid_size):
        for p in [Point(0.1, 0.2), Point(13.7, -8.4), Point(1234.5, 99.99)]:
            once = snap(p, grid_size)
            assert snap(once, grid_size) == once


class TestMeasure:
    def test_distance(self):
        assert distance(Point(0, 0), Point(3, 4)) == pytest.approx(5.0)

    def test_measure_uses_fixed_scale(self):
        result = measure(Point(0, 0), Point(0, FIXED_PIXELS_PER_UNIT * 10))
        assert result.units == pytest.approx(10.0)
        assert result.units_text == "10.00"
        assert result.pixels_text == "32.7"

    def test_midpoint(self):
        result = measure(Point(0, 0), Point(10, 20), scale=2)
        assert result.midpoint == Point(5, 10)
        assert result.units == pytest.approx(distance(Point(0, 0), Point(10, 20)) / 2)


class TestZoneClosing:
    """Tests for the zone closing proximity test."""

    square = [Point(0, 0), Point(10, 0), Point(10, 10)]

    def test_threshold_is_at_least_one(self):
        assert closing_threshold(0.5) == 1.0
        assert closing_threshold(None) == 1.0
        assert closing_threshold(5) == 5.0

    def test_close_within_grid(self):
        assert is_closing_click(self.square, Point(3, 4), 5)
        assert not is_closing_click(self.square, Point(3, 4.1), 5)

    def test_needs_three_points(self):
        assert not is_closing_click(self.square[:2], Point(0, 0), 5)

    def test_small_grid_uses_one(self):
        assert is_closing_click(self.square, Point(0, 1), 0.1)
        assert not is_closing_click(self.square, Point(1, 1), 0.1)


class TestMisc:
    def test_bounds_center(self):
        points = [Point(0, 0), Point(10, 2), Point(4, 8)]
        assert bounds_center(points) == Point(5, 4)
        assert bounds_center([]) is None

    def test_ring_radius(self):
        assert ring_radius_pixels(50) == pytest.approx(25 * FIXED_PIXELS_PER_UNIT)
        assert ring_radius_pixels(70, scale=1) == 35
