import math

import pytest

from shapebind import ShapeCategory, classify_freehand, simplify_rdp
from shapebind.config import EngineConfig


def _polyline(vertices, step=10.0, noise=0.8):
    """Sample a polyline every ``step`` pixels with alternating sideways jitter."""

    points = []
    sign = 1.0
    for (ax, ay), (bx, by) in zip(vertices, vertices[1:]):
        length = math.hypot(bx - ax, by - ay)
        n = max(1, int(length / step))
        nx, ny = -(by - ay) / length, (bx - ax) / length
        for i in range(n):
            t = i / n
            offset = noise * sign if i else 0.0
            sign = -sign
            points.append((ax + (bx - ax) * t + nx * offset, ay + (by - ay) * t + ny * offset))
    points.append(vertices[-1])
    return points


def _arc(radius, start_deg, stop_deg, step_deg=5):
    return [
        (radius * math.cos(math.radians(a)), radius * math.sin(math.radians(a)))
        for a in range(start_deg, stop_deg + 1, step_deg)
    ]


def test_closed_rectangle_stroke():
    stroke = _polyline([(0, 0), (200, 0), (200, 100), (0, 100), (0, 0)])

    result = classify_freehand(stroke)

    assert result.category is ShapeCategory.RECTANGLE
    (x0, y0), (x1, y1) = result.points
    assert (x0, y0, x1, y1) == pytest.approx((0, 0, 200, 100), abs=1)


def test_closed_square_stroke():
    stroke = _polyline([(0, 0), (120, 0), (120, 120), (0, 120), (0, 0)])

    result = classify_freehand(stroke)

    assert result.category is ShapeCategory.SQUARE


def test_closed_triangle_stroke():
    stroke = _polyline([(0, 0), (200, 0), (100, 170), (0, 0)])

    result = classify_freehand(stroke)

    assert result.category is ShapeCategory.TRIANGLE
    assert len(result.points) == 3


def test_round_stroke_becomes_square_bounded_circle():
    result = classify_freehand(_arc(100, 0, 360))

    assert result.category is ShapeCategory.CIRCLE
    (x0, y0), (x1, y1) = result.points
    assert x1 - x0 == pytest.approx(y1 - y0)
    assert ((x0 + x1) / 2, (y0 + y1) / 2) == pytest.approx((0, 0), abs=1e-6)
    assert x1 - x0 == pytest.approx(200, abs=1)


def test_noisy_open_stroke_becomes_segment():
    stroke = _polyline([(0, 0), (300, 0)])

    result = classify_freehand(stroke)

    assert result.category is ShapeCategory.SEGMENT
    assert result.points == ((0, 0), (300, 0))

    shape = result.to_shape("s1", labels=("AB",))
    assert shape.id == "s1"
    assert shape.category is ShapeCategory.SEGMENT
    assert shape.labels == ("AB",)


def test_short_or_tiny_strokes_are_rejected():
    assert classify_freehand([(0, 0), (50, 0), (50, 50), (0, 50), (0, 0)]) is None
    tiny = [(i * 0.2, (i % 2) * 0.2) for i in range(12)]
    assert classify_freehand(tiny) is None


def test_open_curved_stroke_stays_freehand():
    assert classify_freehand(_arc(100, 0, 180)) is None


def test_minimum_point_count_comes_from_config():
    stroke = _polyline([(0, 0), (300, 0)])

    assert classify_freehand(stroke, config=EngineConfig(min_stroke_points=100)) is None


def test_simplify_rdp_keeps_endpoints_and_corners():
    assert simplify_rdp([(0, 0), (1, 0.01), (2, 0), (3, 0)], 1.0) == [(0, 0), (3, 0)]
    corner = [(0, 0), (5, 0), (10, 0), (10, 5), (10, 10)]
    assert simplify_rdp(corner, 1.0) == [(0, 0), (10, 0), (10, 10)]
    assert simplify_rdp([(1, 2), (3, 4)], 1.0) == [(1, 2), (3, 4)]
