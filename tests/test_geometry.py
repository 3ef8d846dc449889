"""
tests/test_geometry.py - Tests for glow/geometry.py

Zone classification, proximity distance and position along the zone.
"""

import math

import numpy as np
import pytest

from glow.constants import CORNER_ZONES, Zone
from glow.geometry import clamp01, classify, position_along_zone
from glow.types_state import ElementBounds, PointerSample

RECT = ElementBounds(left=0.0, top=0.0, width=100.0, height=100.0)


def _at(x, y):
    return PointerSample(x=x, y=y, timestamp_ms=0.0)


class TestOutsideEdges:
    """Pointer outside the rect, facing a single edge."""

    def test_above_top_center(self):
        """(50, -10) against a 100x100 rect -> TOP, distance 10, position 0.5."""
        out = classify(_at(50, -10), RECT)
        assert out.zone is Zone.TOP, f"Expected TOP, got {out.zone}"
        assert out.distance == pytest.approx(10.0), f"Expected 10, got {out.distance}"
        assert out.raw_position == pytest.approx(0.5), f"Expected 0.5, got {out.raw_position}"
        assert out.inside is False

    def test_right_runs_top_to_bottom(self):
        """Right edge position grows downward."""
        out = classify(_at(110, 25), RECT)
        assert out.zone is Zone.RIGHT
        assert out.distance == pytest.approx(10.0)
        assert out.raw_position == pytest.approx(0.25), f"Got {out.raw_position}"

    def test_bottom_runs_right_to_left(self):
        """Bottom edge is traversed clockwise, so x=25 maps to 0.75."""
        out = classify(_at(25, 130), RECT)
        assert out.zone is Zone.BOTTOM
        assert out.distance == pytest.approx(30.0)
        assert out.raw_position == pytest.approx(0.75), f"Got {out.raw_position}"

    def test_left_runs_bottom_to_top(self):
        """Left edge is traversed clockwise, so y=25 maps to 0.75."""
        out = classify(_at(-5, 25), RECT)
        assert out.zone is Zone.LEFT
        assert out.distance == pytest.approx(5.0)
        assert out.raw_position == pytest.approx(0.75), f"Got {out.raw_position}"

    def test_offset_rect(self):
        """Coordinates are taken relative to the rect's origin."""
        rect = ElementBounds(left=300.0, top=200.0, width=100.0, height=50.0)
        out = classify(_at(350, 190), rect)
        assert out.zone is Zone.TOP
        assert out.distance == pytest.approx(10.0)
        assert out.raw_position == pytest.approx(0.5)


class TestCorners:
    """Pointer diagonally outside a corner."""

    def test_top_left_euclidean_distance(self):
        """Corner distance is Euclidean to the corner point."""
        out = classify(_at(-3, -4), RECT)
        assert out.zone is Zone.TOP_LEFT, f"Expected TOP_LEFT, got {out.zone}"
        assert out.distance == pytest.approx(5.0), f"Expected 5, got {out.distance}"

    def test_each_corner_zone(self):
        """All four diagonal quadrants map to their corner."""
        cases = {
            (-10, -10): Zone.TOP_LEFT,
            (110, -10): Zone.TOP_RIGHT,
            (-10, 110): Zone.BOTTOM_LEFT,
            (110, 110): Zone.BOTTOM_RIGHT,
        }
        for (x, y), expected in cases.items():
            out = classify(_at(x, y), RECT)
            assert out.zone is expected, f"({x}, {y}): expected {expected}, got {out.zone}"
            assert out.distance == pytest.approx(math.hypot(10, 10))

    def test_corner_position_is_compressed(self):
        """Corner positions fall in [0, 0.5]."""
        for zone in CORNER_ZONES:
            for rx, ry in [(0, 0), (50, 50), (100, 100), (-20, 130)]:
                pos = position_along_zone(zone, rx, ry, 100.0, 100.0)
                assert 0.0 <= pos <= 0.5, f"{zone} at ({rx}, {ry}) gave {pos}"


class TestInside:
    """Pointer within the rect: nearest edge wins."""

    def test_inside_near_top(self):
        out = classify(_at(50, 5), RECT)
        assert out.zone is Zone.TOP
        assert out.distance == pytest.approx(5.0)
        assert out.inside is True, "Point within the rect should be flagged inside"

    def test_on_boundary_is_inside_distance_zero(self):
        """A point on the top edge has distance 0."""
        out = classify(_at(50, 0), RECT)
        assert out.zone is Zone.TOP
        assert out.distance == 0.0
        assert out.raw_position == pytest.approx(0.5)

    def test_tie_prefers_left(self):
        """Equidistant center resolves in left, right, top, bottom order."""
        out = classify(_at(50, 50), RECT)
        assert out.zone is Zone.LEFT, f"Expected LEFT on tie, got {out.zone}"
        assert out.distance == pytest.approx(50.0)


class TestDegenerateInput:
    """Zero-sized rects and non-finite pointers never produce NaN."""

    def test_zero_sized_rect(self):
        rect = ElementBounds(left=0.0, top=0.0, width=0.0, height=0.0)
        out = classify(_at(5, 5), rect)
        assert math.isfinite(out.distance), f"Distance should be finite, got {out.distance}"
        assert math.isfinite(out.raw_position)
        assert 0.0 <= out.raw_position <= 1.0

    def test_non_finite_pointer(self):
        out = classify(_at(float("nan"), 10), RECT)
        assert out.zone is Zone.NONE, f"Expected NONE, got {out.zone}"
        assert math.isinf(out.distance)

    def test_clamp01_non_finite(self):
        assert clamp01(float("nan")) == 0.0
        assert clamp01(float("inf")) == 0.0
        assert clamp01(-0.5) == 0.0
        assert clamp01(1.5) == 1.0

    def test_none_zone_position(self):
        assert position_along_zone(Zone.NONE, 10, 10, 100, 100) == 0.0


class TestRandomSweep:
    """Classifier outputs stay in range over a random point cloud."""

    def test_positions_and_distances_in_range(self):
        rng = np.random.default_rng(7)
        rect = ElementBounds(left=40.0, top=20.0, width=220.0, height=160.0)
        points = rng.uniform(-200.0, 500.0, size=(500, 2))
        for x, y in points:
            out = classify(_at(float(x), float(y)), rect)
            assert out.zone is not Zone.NONE
            assert out.distance >= 0.0, f"Negative distance at ({x}, {y})"
            assert 0.0 <= out.raw_position <= 1.0, f"Position {out.raw_position} out of range"
            if out.zone in CORNER_ZONES:
                assert out.raw_position <= 0.5
