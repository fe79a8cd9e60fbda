import math

import pytest

from shapebind import Shape, ShapeCategory, Viewport, pixels_per_unit
from shapebind.geometry import (
    closest_point_on_segment,
    edge_count,
    ellipse_point,
    point_in_polygon,
    polygon_area,
    reflect_point,
    rotate_point,
    shape_center,
    text_extent,
    visual_corners,
    visual_edge,
)


def _close(p, q, tol=1e-9):
    return math.isclose(p[0], q[0], abs_tol=tol) and math.isclose(p[1], q[1], abs_tol=tol)


def _rect(rotation=0.0):
    return Shape("r", ShapeCategory.RECTANGLE, ((100, 100), (300, 200)), rotation=rotation)


def test_rotate_point_quarter_turn_is_clockwise_on_screen():
    assert _close(rotate_point((1.0, 0.0), (0.0, 0.0), 90), (0.0, 1.0))
    assert _close(rotate_point((5.0, 5.0), (5.0, 5.0), 37), (5.0, 5.0))


def test_rotated_rectangle_visual_corners():
    corners = visual_corners(_rect(90))
    expected = [(250, 50), (250, 250), (150, 250), (150, 50)]
    assert len(corners) == 4
    for got, want in zip(corners, expected):
        assert _close(got, want)


def test_unrotated_box_corners_are_clockwise_from_top_left():
    shape = Shape("r", ShapeCategory.RECTANGLE, ((300, 200), (100, 100)))
    assert visual_corners(shape) == ((100, 100), (300, 100), (300, 200), (100, 200))


def test_centers_by_category():
    tri = Shape("t", ShapeCategory.TRIANGLE, ((0, 0), (100, 0), (0, 100)))
    assert _close(shape_center(tri), (100 / 3, 100 / 3))
    assert shape_center(_rect()) == (200, 150)
    seg = Shape("s", ShapeCategory.SEGMENT, ((0, 0), (100, 40)))
    assert shape_center(seg) == (50, 20)
    curve = Shape("c", ShapeCategory.CURVE)
    assert shape_center(curve) is None


def test_text_extent_and_center_share_the_measured_box():
    text = Shape("x", ShapeCategory.TEXT, ((0, 20),), text="AB", font_size=10)
    box = text_extent(text)
    assert (box.min_x, box.min_y, box.max_x, box.max_y) == pytest.approx((0, 19, 20, 31))
    assert shape_center(text) == pytest.approx((10, 25))


def test_edge_counts_follow_open_and_closed_outlines():
    assert edge_count(Shape("t", ShapeCategory.TRIANGLE, ((0, 0), (1, 0), (0, 1)))) == 3
    assert edge_count(Shape("s", ShapeCategory.SEGMENT, ((0, 0), (1, 0)))) == 1
    assert edge_count(Shape("p", ShapeCategory.POINT, ((0, 0),))) == 0
    assert edge_count(_rect()) == 4
    path = Shape("a", ShapeCategory.PATH, ((0, 0), (1, 0), (2, 1), (3, 3)))
    assert edge_count(path) == 3


def test_visual_edge_wraps_for_closed_shapes_and_rejects_bad_index():
    tri = Shape("t", ShapeCategory.TRIANGLE, ((0, 0), (100, 0), (0, 100)))
    assert visual_edge(tri, 2) == ((0, 100), (0, 0))
    assert visual_edge(tri, 3) is None
    assert visual_edge(tri, -1) is None


def test_closest_point_on_segment_clamps_and_handles_zero_length():
    point, t = closest_point_on_segment((150, 10), (0, 0), (100, 0))
    assert point == (100, 0)
    assert t == 1.0
    point, t = closest_point_on_segment((5, 5), (3, 3), (3, 3))
    assert point == (3, 3)
    assert t == 0.0


def test_ellipse_point_follows_rotation():
    ellipse = Shape("e", ShapeCategory.ELLIPSE, ((0, 0), (200, 100)))
    assert _close(ellipse_point(ellipse, 90), (100, 100))
    rotated = Shape("e", ShapeCategory.ELLIPSE, ((0, 0), (200, 100)), rotation=90)
    assert _close(ellipse_point(rotated, 90), (50, 50))


def test_reflect_point_across_line():
    assert _close(reflect_point((3, 4), (0, 0), (1, 0)), (3, -4))
    assert _close(reflect_point((2, 0), (0, 0), (1, 1)), (0, 2))


def test_polygon_helpers():
    square = [(0, 0), (10, 0), (10, 10), (0, 10)]
    assert polygon_area(square) == 100
    assert polygon_area(list(reversed(square))) == 100
    assert polygon_area(square[:2]) == 0
    assert point_in_polygon((5, 5), square)
    assert not point_in_polygon((15, 5), square)


def test_viewport_mapping_and_default_scale():
    viewport = Viewport(800, 600, 50)
    assert viewport.to_math((450, 250)) == (1, 1)
    assert viewport.to_screen((1, 1)) == (450, 250)
    assert Viewport(800, 600, 50, origin_y=500).to_screen((0, 0)) == (400, 500)

    assert pixels_per_unit(800, 600) == 60
    assert pixels_per_unit(100, 100) == 20
    assert pixels_per_unit(0, 600) == 40
