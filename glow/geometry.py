"""
glow/geometry.py - Geometry Classifier

Maps a pointer point and a tile rectangle to the nearest zone, the proximity
distance and the normalized position along that zone. Pure functions, O(1).
"""

import math
from typing import Tuple

from .constants import Zone
from .types_state import ClassifierOutput, ElementBounds, PointerSample


def clamp01(value: float) -> float:
    """Clamp to [0, 1]; non-finite input maps to 0."""
    if not math.isfinite(value):
        return 0.0
    return max(0.0, min(1.0, value))


def _safe_extent(extent: float) -> float:
    # Zero or broken extents would turn projections into NaN/Infinity
    if not math.isfinite(extent) or extent == 0:
        return 1.0
    return extent


def position_along_zone(zone: Zone, rel_x: float, rel_y: float,
                        width: float, height: float) -> float:
    """
    Project a rect-relative point onto a zone.

    Edges run clockwise: Top left->right, Right top->bottom, Bottom
    right->left, Left bottom->top. Corners use the compressed half-range
    min(a, b) * 0.5 of the two adjoining projections.

    Args:
        zone: Zone to project onto
        rel_x: X relative to the rect's left edge
        rel_y: Y relative to the rect's top edge
        width: Rect width (0 treated as 1)
        height: Rect height (0 treated as 1)

    Returns:
        float: Position in [0, 1] for edges, [0, 0.5] for corners, 0 for NONE
    """
    fx = rel_x / _safe_extent(width)
    fy = rel_y / _safe_extent(height)

    if zone is Zone.TOP:
        return clamp01(fx)
    if zone is Zone.RIGHT:
        return clamp01(fy)
    if zone is Zone.BOTTOM:
        return clamp01(1.0 - fx)
    if zone is Zone.LEFT:
        return clamp01(1.0 - fy)
    if zone is Zone.TOP_LEFT:
        return min(clamp01(fx), clamp01(fy)) * 0.5
    if zone is Zone.TOP_RIGHT:
        return min(clamp01(1.0 - fx), clamp01(fy)) * 0.5
    if zone is Zone.BOTTOM_LEFT:
        return min(clamp01(fx), clamp01(1.0 - fy)) * 0.5
    if zone is Zone.BOTTOM_RIGHT:
        return min(clamp01(1.0 - fx), clamp01(1.0 - fy)) * 0.5
    return 0.0


def _nearest_zone(rel_x: float, rel_y: float,
                  width: float, height: float) -> Tuple[Zone, float, bool]:
    """Return (zone, distance, inside) for a rect-relative point."""
    dist_left = abs(rel_x)
    dist_right = abs(rel_x - width)
    dist_top = abs(rel_y)
    dist_bottom = abs(rel_y - height)

    inside = 0 <= rel_x <= width and 0 <= rel_y <= height
    if inside:
        # Ties resolve in list order
        candidates = [
            (Zone.LEFT, dist_left),
            (Zone.RIGHT, dist_right),
            (Zone.TOP, dist_top),
            (Zone.BOTTOM, dist_bottom),
        ]
        zone, distance = min(candidates, key=lambda c: c[1])
        return zone, distance, True

    left_of = rel_x < 0
    right_of = rel_x > width
    above = rel_y < 0
    below = rel_y > height

    if left_of and above:
        return Zone.TOP_LEFT, math.hypot(dist_left, dist_top), False
    if right_of and above:
        return Zone.TOP_RIGHT, math.hypot(dist_right, dist_top), False
    if left_of and below:
        return Zone.BOTTOM_LEFT, math.hypot(dist_left, dist_bottom), False
    if right_of and below:
        return Zone.BOTTOM_RIGHT, math.hypot(dist_right, dist_bottom), False
    if left_of:
        return Zone.LEFT, dist_left, False
    if right_of:
        return Zone.RIGHT, dist_right, False
    if above:
        return Zone.TOP, dist_top, False
    return Zone.BOTTOM, dist_bottom, False


def classify(pointer: PointerSample, rect: ElementBounds) -> ClassifierOutput:
    """
    Classify a pointer position against a tile rectangle.

    Args:
        pointer: Pointer position (anything with x and y), viewport coordinates
        rect: Tile bounds in the same coordinate space

    Returns:
        ClassifierOutput with zone, distance, raw_position and inside flag.
        Non-finite input yields Zone.NONE at infinite distance.
    """
    rel_x = pointer.x - rect.left
    rel_y = pointer.y - rect.top
    if not (math.isfinite(rel_x) and math.isfinite(rel_y)):
        return ClassifierOutput(zone=Zone.NONE, distance=math.inf, raw_position=0.0)

    width = max(0.0, rect.width) if math.isfinite(rect.width) else 0.0
    height = max(0.0, rect.height) if math.isfinite(rect.height) else 0.0

    zone, distance, inside = _nearest_zone(rel_x, rel_y, width, height)
    raw_position = position_along_zone(zone, rel_x, rel_y, width, height)

    return ClassifierOutput(
        zone=zone,
        distance=distance,
        raw_position=raw_position,
        inside=inside
    )
