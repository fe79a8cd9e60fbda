"""Geometry primitives shared by snapping, binding, transforms and hit testing.

Everything that reasons about where a shape *is* on screen goes through
:func:`visual_corners`; raw ``Shape.points`` are pre-rotation and only the
transform operators touch them directly.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from .model import (
    BOX_CATEGORIES,
    CLOSED_CATEGORIES,
    POLYGON_CATEGORIES,
    Point,
    Shape,
    ShapeCategory,
)

_DENOM_EPS = 1e-12


def _vec2(a: Point, b: Point) -> Point:
    return b[0] - a[0], b[1] - a[1]


def _dot2(a: Point, b: Point) -> float:
    return a[0] * b[0] + a[1] * b[1]


def distance(a: Point, b: Point) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def lerp(a: Point, b: Point, t: float) -> Point:
    return a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t


def rotate_point(point: Point, center: Point, degrees: float) -> Point:
    """Rotate ``point`` about ``center``; positive angles turn clockwise on screen."""

    if not degrees:
        return point[0], point[1]
    rad = math.radians(degrees)
    cos_a = math.cos(rad)
    sin_a = math.sin(rad)
    dx = point[0] - center[0]
    dy = point[1] - center[1]
    return (
        center[0] + dx * cos_a - dy * sin_a,
        center[1] + dx * sin_a + dy * cos_a,
    )


def angle_degrees(a: Point, b: Point) -> float:
    return math.degrees(math.atan2(b[1] - a[1], b[0] - a[0]))


def projection_parameter(p: Point, a: Point, b: Point) -> float:
    """Unclamped parameter of the projection of ``p`` on line ``ab``; 0 for a degenerate segment."""

    ab = _vec2(a, b)
    len_sq = _dot2(ab, ab)
    if len_sq <= _DENOM_EPS:
        return 0.0
    return _dot2(_vec2(a, p), ab) / len_sq


def closest_point_on_segment(p: Point, a: Point, b: Point) -> Tuple[Point, float]:
    t = min(1.0, max(0.0, projection_parameter(p, a, b)))
    return lerp(a, b, t), t


def point_segment_distance(p: Point, a: Point, b: Point) -> float:
    closest, _ = closest_point_on_segment(p, a, b)
    return distance(p, closest)


@dataclass(frozen=True)
class Bounds:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point:
        return (self.min_x + self.max_x) * 0.5, (self.min_y + self.max_y) * 0.5

    def corners(self) -> Tuple[Point, Point, Point, Point]:
        """Top-left, top-right, bottom-right, bottom-left."""
        return (
            (self.min_x, self.min_y),
            (self.max_x, self.min_y),
            (self.max_x, self.max_y),
            (self.min_x, self.max_y),
        )

    def contains(self, p: Point, margin: float = 0.0) -> bool:
        return (
            self.min_x - margin <= p[0] <= self.max_x + margin
            and self.min_y - margin <= p[1] <= self.max_y + margin
        )


def bounding_box(points: Iterable[Point]) -> Optional[Bounds]:
    xs = []
    ys = []
    for x, y in points:
        xs.append(x)
        ys.append(y)
    if not xs:
        return None
    return Bounds(min(xs), min(ys), max(xs), max(ys))


def text_extent(shape: Shape) -> Bounds:
    """Measured box of a text shape anchored at its first point."""

    x, y = shape.points[0]
    fs = shape.effective_font_size
    width = max(20.0, len(shape.text or "") * fs * 0.8)
    height = fs * 1.2
    top = y - fs * 0.1
    return Bounds(x, top, x + width, top + height)


def _box_bounds(shape: Shape) -> Bounds:
    if shape.category is ShapeCategory.TEXT:
        return text_extent(shape)
    p0 = shape.points[0]
    p1 = shape.points[1] if len(shape.points) > 1 else p0
    return Bounds(min(p0[0], p1[0]), min(p0[1], p1[1]), max(p0[0], p1[0]), max(p0[1], p1[1]))


def shape_center(shape: Shape) -> Optional[Point]:
    """Rotation pivot of a shape, or ``None`` for shapes without defining points."""

    if not shape.points:
        return None
    if shape.category in BOX_CATEGORIES:
        return _box_bounds(shape).center
    if shape.category in POLYGON_CATEGORIES:
        n = float(len(shape.points))
        return (
            sum(p[0] for p in shape.points) / n,
            sum(p[1] for p in shape.points) / n,
        )
    box = bounding_box(shape.points)
    assert box is not None
    return box.center


def local_corners(shape: Shape) -> Tuple[Point, ...]:
    """Corners before rotation: the four box corners or the raw vertices."""

    if shape.category is ShapeCategory.CURVE or not shape.points:
        return ()
    if shape.category in BOX_CATEGORIES:
        return _box_bounds(shape).corners()
    return shape.points


def visual_corners(shape: Shape) -> Tuple[Point, ...]:
    """On-screen corner positions of ``shape`` after applying its rotation."""

    corners = local_corners(shape)
    if not corners or not shape.rotation:
        return tuple(corners)
    center = shape_center(shape)
    assert center is not None
    return tuple(rotate_point(p, center, shape.rotation) for p in corners)


def edge_count(shape: Shape) -> int:
    n = len(local_corners(shape))
    if n < 2:
        return 0
    if shape.category in CLOSED_CATEGORIES:
        return n
    return n - 1


def visual_edges(shape: Shape) -> Tuple[Tuple[Point, Point], ...]:
    corners = visual_corners(shape)
    count = edge_count(shape)
    n = len(corners)
    return tuple((corners[i], corners[(i + 1) % n]) for i in range(count))


def visual_edge(shape: Shape, index: int) -> Optional[Tuple[Point, Point]]:
    edges = visual_edges(shape)
    if index < 0 or index >= len(edges):
        return None
    return edges[index]


def ellipse_radii(shape: Shape) -> Tuple[float, float]:
    box = _box_bounds(shape)
    return box.width * 0.5, box.height * 0.5


def ellipse_point(shape: Shape, angle: float) -> Point:
    """Boundary point at ``angle`` (degrees, shape's local frame) of a round shape."""

    center = shape_center(shape)
    assert center is not None
    rx, ry = ellipse_radii(shape)
    rad = math.radians(angle)
    local = (center[0] + rx * math.cos(rad), center[1] + ry * math.sin(rad))
    return rotate_point(local, center, shape.rotation)


def ellipse_angle(shape: Shape, point: Point) -> float:
    """Parametric angle (degrees, local frame) whose boundary point lies on the ray to ``point``."""

    center = shape_center(shape)
    assert center is not None
    local = rotate_point(point, center, -shape.rotation)
    rx, ry = ellipse_radii(shape)
    dx = (local[0] - center[0]) / rx if rx > _DENOM_EPS else 0.0
    dy = (local[1] - center[1]) / ry if ry > _DENOM_EPS else 0.0
    if abs(dx) <= _DENOM_EPS and abs(dy) <= _DENOM_EPS:
        return 0.0
    return math.degrees(math.atan2(dy, dx))


def polygon_area(vertices: Sequence[Point]) -> float:
    """Unsigned shoelace area; fewer than three vertices enclose nothing."""

    n = len(vertices)
    if n < 3:
        return 0.0
    twice = 0.0
    for i in range(n):
        x0, y0 = vertices[i - 1]
        x1, y1 = vertices[i]
        twice += x0 * y1 - x1 * y0
    return abs(twice) * 0.5


def point_in_polygon(p: Point, vertices: Sequence[Point]) -> bool:
    inside = False
    n = len(vertices)
    j = n - 1
    for i in range(n):
        xi, yi = vertices[i]
        xj, yj = vertices[j]
        if (yi > p[1]) != (yj > p[1]):
            x_cross = (xj - xi) * (p[1] - yi) / (yj - yi) + xi
            if p[0] < x_cross:
                inside = not inside
        j = i
    return inside


def reflect_point(p: Point, a: Point, b: Point) -> Point:
    """Mirror ``p`` across the line through ``a`` and ``b``."""

    foot = lerp(a, b, projection_parameter(p, a, b))
    return 2.0 * foot[0] - p[0], 2.0 * foot[1] - p[1]


__all__ = [
    "Bounds",
    "distance",
    "lerp",
    "rotate_point",
    "angle_degrees",
    "projection_parameter",
    "closest_point_on_segment",
    "point_segment_distance",
    "bounding_box",
    "text_extent",
    "shape_center",
    "local_corners",
    "visual_corners",
    "edge_count",
    "visual_edges",
    "visual_edge",
    "ellipse_radii",
    "ellipse_point",
    "ellipse_angle",
    "polygon_area",
    "point_in_polygon",
    "reflect_point",
]
