import math

import pytest

from shapebind import (
    CurveFormula,
    OnEdge,
    OnPath,
    PointsLink,
    Shape,
    ShapeCategory,
    Viewport,
    find_snap_target,
    link_segment_endpoints,
    snap_free_point,
    snap_segment_endpoint,
)
from shapebind.config import EngineConfig


def _close(p, q, tol=1e-9):
    return math.isclose(p[0], q[0], abs_tol=tol) and math.isclose(p[1], q[1], abs_tol=tol)


def _triangle():
    return Shape("tri", ShapeCategory.TRIANGLE, ((0, 0), (100, 0), (0, 100)))


def test_vertex_anchor_beats_closer_edge_projection():
    result = find_snap_target((8, 1), [_triangle()])

    assert result.snapped
    assert result.kind == "anchor"
    assert result.point == (0, 0)
    assert result.binding is None
    assert result.target_id == "tri"


def test_anchor_on_point_shape_yields_points_link():
    point = Shape("P", ShapeCategory.POINT, ((200, 200),))

    result = find_snap_target((205, 203), [_triangle(), point])

    assert result.point == (200, 200)
    assert result.binding == PointsLink(("P",))


def test_edge_projection_produces_on_edge_binding():
    result = find_snap_target((50, 5), [_triangle()])

    assert result.kind == "edge"
    assert _close(result.point, (50, 0))
    assert result.binding == OnEdge("tri", 0, 0.5)


def test_edge_parameter_is_clamped_to_segment():
    result = find_snap_target((110, 3), [_triangle()])

    assert isinstance(result.binding, OnEdge)
    assert result.binding.edge_index == 0
    assert result.binding.t == 1.0
    assert result.point == (100, 0)


def test_rotated_rectangle_snaps_to_visual_edge():
    rect = Shape("rect", ShapeCategory.RECTANGLE, ((100, 100), (300, 200)), rotation=90)

    result = find_snap_target((255, 150), [rect])

    assert result.binding.parent_id == "rect"
    assert result.binding.edge_index == 0
    assert result.binding.t == pytest.approx(0.5)
    assert _close(result.point, (250, 150))


def test_free_point_near_shape_binds_to_that_shape_with_valid_t():
    poly = Shape("poly", ShapeCategory.POLYGON, ((0, 0), (120, 0), (160, 80), (40, 120)))
    cursors = [(60, 4), (141, 37), (100, 103), (18, 58), (-4, 20), (130, -8)]

    for cursor in cursors:
        result = snap_free_point(cursor, [poly])
        assert isinstance(result.binding, OnEdge), cursor
        assert result.binding.parent_id == "poly"
        assert 0.0 <= result.binding.t <= 1.0


def test_excluded_shapes_are_ignored():
    result = find_snap_target((50, 5), [_triangle()], exclude_ids=["tri"])

    assert not result.snapped
    assert result.point == (50, 5)
    assert result.binding is None


def test_thresholds_come_from_config():
    result = find_snap_target((50, 12), [_triangle()], config=EngineConfig(edge_threshold=10))
    assert not result.snapped

    result = find_snap_target((50, 12), [_triangle()])
    assert result.snapped


def test_circle_boundary_gives_on_path_angle():
    circle = Shape("c", ShapeCategory.CIRCLE, ((0, 0), (100, 100)))

    result = find_snap_target((104, 50), [circle])

    assert isinstance(result.binding, OnPath)
    assert result.binding.parent_id == "c"
    angle = result.binding.angle
    assert min(angle, 360.0 - angle) < 1e-4
    assert _close(result.point, (100, 50), tol=1e-6)


def test_circle_center_is_an_anchor():
    circle = Shape("c", ShapeCategory.CIRCLE, ((0, 0), (100, 100)))

    result = find_snap_target((53, 48), [circle])

    assert result.kind == "anchor"
    assert result.point == (50, 50)


def test_curve_snap_records_math_x():
    viewport = Viewport(800, 600, 50)
    curve = Shape("f", ShapeCategory.CURVE, formula=CurveFormula(a=1.0))

    result = find_snap_target((400, 305), [curve], viewport=viewport)

    assert isinstance(result.binding, OnPath)
    assert result.binding.x == pytest.approx(0.0, abs=1e-4)
    assert _close(result.point, (400, 300), tol=1e-3)
    assert not find_snap_target((400, 305), [curve]).snapped


def test_grid_snap_only_when_grid_is_shown():
    shown = Viewport(800, 600, 50, show_grid=True)
    hidden = Viewport(800, 600, 50)

    result = find_snap_target((453, 248), [], viewport=shown)
    assert result.kind == "grid"
    assert _close(result.point, (450, 250))
    assert result.binding is None

    assert not find_snap_target((453, 248), [], viewport=hidden).snapped


def test_free_point_rejects_point_links():
    point = Shape("P", ShapeCategory.POINT, ((200, 200),))

    result = snap_free_point((203, 200), [point])

    assert result.snapped
    assert result.point == (200, 200)
    assert result.binding is None


def test_segment_endpoint_is_forced_onto_nearby_point():
    point = Shape("P", ShapeCategory.POINT, ((8, 0),))

    result = snap_segment_endpoint((2, 0), [_triangle(), point])

    assert result.binding == PointsLink(("P",))
    assert result.point == (8, 0)


def test_segment_endpoint_drops_edge_binding():
    result = snap_segment_endpoint((50, 5), [_triangle()])

    assert result.binding is None
    assert _close(result.point, (50, 0))


def test_link_segment_endpoints():
    linked = snap_segment_endpoint((201, 199), [Shape("P", ShapeCategory.POINT, ((200, 200),))])
    free = snap_segment_endpoint((500, 500), [])

    assert link_segment_endpoints(linked, free) == PointsLink(("P", None))
    assert link_segment_endpoints(free, linked) == PointsLink((None, "P"))
    assert link_segment_endpoints(free, free) is None
