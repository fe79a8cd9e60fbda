"""Picking: which shape is under the cursor."""

from __future__ import annotations

import math
from typing import Optional, Sequence

from .curves import Viewport, curve_point
from .geometry import (
    bounding_box,
    distance,
    ellipse_radii,
    point_in_polygon,
    point_segment_distance,
    polygon_area,
    rotate_point,
    shape_center,
    visual_corners,
    visual_edges,
)
from .model import CLOSED_CATEGORIES, ROUND_CATEGORIES, Point, Shape, ShapeCategory

_DEFAULT_TOLERANCE = 18.0
_SEGMENT_TOLERANCE = 6.0

_PRIORITY = {
    ShapeCategory.POINT: 0,
    ShapeCategory.MARKER: 0,
    ShapeCategory.SEGMENT: 2,
    ShapeCategory.PATH: 2,
    ShapeCategory.FREEHAND: 2,
    ShapeCategory.CURVE: 2,
    ShapeCategory.TEXT: 3,
    ShapeCategory.RECTANGLE: 4,
    ShapeCategory.SQUARE: 4,
    ShapeCategory.CIRCLE: 4,
    ShapeCategory.ELLIPSE: 4,
    ShapeCategory.TRIANGLE: 4,
    ShapeCategory.POLYGON: 4,
    ShapeCategory.IMAGE: 5,
}


def _stroke_width(shape: Shape) -> float:
    value = shape.style.get("strokeWidth", 1)
    return float(value) if isinstance(value, (int, float)) else 1.0


def _outline_distance(cursor: Point, shape: Shape, viewport: Optional[Viewport]) -> float:
    if shape.category is ShapeCategory.CURVE:
        if shape.formula is None or viewport is None or viewport.ppu <= 0:
            return math.inf
        expected = curve_point(shape.formula, viewport.to_math(cursor)[0], viewport)
        if not math.isfinite(expected[1]):
            return math.inf
        return abs(expected[1] - cursor[1])
    corners = visual_corners(shape)
    if len(corners) == 1:
        return distance(cursor, corners[0])
    if shape.category is ShapeCategory.MARKER:
        edges = list(zip(corners, corners[1:]))
    else:
        edges = list(visual_edges(shape))
    if not edges:
        return math.inf
    return min(point_segment_distance(cursor, a, b) for a, b in edges)


def _area(shape: Shape) -> float:
    if shape.category in ROUND_CATEGORIES:
        rx, ry = ellipse_radii(shape)
        return math.pi * rx * ry
    corners = visual_corners(shape)
    if shape.category in CLOSED_CATEGORIES:
        return polygon_area(corners)
    box = bounding_box(corners)
    return box.width * box.height if box is not None else 0.0


def shape_contains_point(
    cursor: Point,
    shape: Shape,
    viewport: Optional[Viewport] = None,
    tolerance: Optional[float] = None,
) -> bool:
    """Whether ``cursor`` picks ``shape``; interiors count for closed figures."""

    if tolerance is not None:
        threshold = tolerance
    elif shape.category is ShapeCategory.SEGMENT:
        threshold = _SEGMENT_TOLERANCE
    else:
        threshold = _DEFAULT_TOLERANCE
    category = shape.category

    if category is ShapeCategory.CURVE:
        return _outline_distance(cursor, shape, viewport) < threshold
    if not shape.points:
        return False
    if category is ShapeCategory.POINT:
        reach = max(10.0, _stroke_width(shape) + 5.0 + (tolerance or 0.0))
        return distance(cursor, shape.points[0]) < reach
    if category is ShapeCategory.MARKER:
        return _outline_distance(cursor, shape, viewport) < threshold

    if category in (
        ShapeCategory.RECTANGLE,
        ShapeCategory.SQUARE,
        ShapeCategory.IMAGE,
        ShapeCategory.TEXT,
    ):
        if point_in_polygon(cursor, visual_corners(shape)):
            return True
        if tolerance:
            return _outline_distance(cursor, shape, viewport) < threshold
        return False

    if category is ShapeCategory.CIRCLE:
        center = shape_center(shape)
        assert center is not None
        radius = ellipse_radii(shape)[0]
        d = distance(cursor, center)
        return d <= radius or abs(d - radius) < threshold

    if category is ShapeCategory.ELLIPSE:
        center = shape_center(shape)
        assert center is not None
        rx, ry = ellipse_radii(shape)
        local = rotate_point(cursor, center, -shape.rotation)
        if rx > 0 and ry > 0:
            value = ((local[0] - center[0]) / rx) ** 2 + ((local[1] - center[1]) / ry) ** 2
            if value <= 1.0:
                return True
        if tolerance:
            return distance(cursor, center) < max(rx, ry) + threshold
        return False

    if category in (ShapeCategory.TRIANGLE, ShapeCategory.POLYGON):
        if point_in_polygon(cursor, visual_corners(shape)):
            return True

    if category in (ShapeCategory.PATH, ShapeCategory.FREEHAND):
        box = bounding_box(visual_corners(shape))
        if box is None or not box.contains(cursor, threshold):
            return False

    return _outline_distance(cursor, shape, viewport) < threshold


def find_hit_shape(
    cursor: Point,
    shapes: Sequence[Shape],
    viewport: Optional[Viewport] = None,
    tolerance: Optional[float] = None,
) -> Optional[Shape]:
    """Topmost pick under ``cursor``.

    Points and markers win over strokes, strokes over text, text over closed
    figures and images come last. Among strokes the nearest wins, among the
    rest the smallest.
    """

    hits = [s for s in shapes if shape_contains_point(cursor, s, viewport, tolerance)]
    if not hits:
        return None

    def _rank(shape: Shape):
        priority = _PRIORITY.get(shape.category, 4)
        if priority == 2:
            return priority, _outline_distance(cursor, shape, viewport)
        return priority, _area(shape)

    return min(hits, key=_rank)


__all__ = ["shape_contains_point", "find_hit_shape"]
