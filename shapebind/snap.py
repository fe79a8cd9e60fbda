"""Proximity search for bindable targets near the cursor."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Sequence, Tuple

from scipy.optimize import minimize_scalar

from .config import EngineConfig, _resolve_config
from .curves import Viewport, curve_point
from .geometry import (
    closest_point_on_segment,
    distance,
    ellipse_angle,
    ellipse_point,
    ellipse_radii,
    shape_center,
    visual_corners,
    visual_edges,
)
from .logging_utils import debug_log_call
from .model import ROUND_CATEGORIES, Binding, OnEdge, OnPath, Point, PointsLink, Shape, ShapeCategory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapResult:
    """Where the cursor lands and what, if anything, it binds to.

    ``kind`` is one of ``anchor``, ``edge``, ``path``, ``grid`` or ``none``.
    """

    point: Point
    snapped: bool
    binding: Optional[Binding] = None
    target_id: Optional[str] = None
    kind: str = "none"


def _anchors(shape: Shape) -> List[Point]:
    if shape.category is ShapeCategory.CURVE:
        return []
    center = shape_center(shape)
    if center is None:
        return []
    if shape.category in ROUND_CATEGORIES:
        return [center]
    if shape.category is ShapeCategory.POINT:
        return list(visual_corners(shape))
    return list(visual_corners(shape)) + [center]


def _nearest_on_round(shape: Shape, cursor: Point) -> Optional[Tuple[float, Point]]:
    rx, ry = ellipse_radii(shape)
    if rx <= 0 and ry <= 0:
        return None
    guess = math.radians(ellipse_angle(shape, cursor))

    def _dist_sq(theta: float) -> float:
        p = ellipse_point(shape, math.degrees(theta))
        return (p[0] - cursor[0]) ** 2 + (p[1] - cursor[1]) ** 2

    res = minimize_scalar(
        _dist_sq,
        bounds=(guess - math.pi / 2.0, guess + math.pi / 2.0),
        method="bounded",
        options={"xatol": 1e-8},
    )
    theta = float(res.x) if _dist_sq(float(res.x)) <= _dist_sq(guess) else guess
    angle = math.degrees(theta) % 360.0
    return angle, ellipse_point(shape, angle)


def _nearest_on_curve(
    shape: Shape, cursor: Point, viewport: Viewport, window_px: float
) -> Optional[Tuple[float, Point]]:
    if shape.formula is None or viewport.ppu <= 0:
        return None
    formula = shape.formula
    mx = viewport.to_math(cursor)[0]
    # any curve point within window_px of the cursor has its x inside this window
    half = window_px / viewport.ppu

    def _dist_sq(x: float) -> float:
        p = curve_point(formula, x, viewport)
        return (p[0] - cursor[0]) ** 2 + (p[1] - cursor[1]) ** 2

    res = minimize_scalar(
        _dist_sq,
        bounds=(mx - half, mx + half),
        method="bounded",
        options={"xatol": 1e-9},
    )
    x = float(res.x)
    point = curve_point(formula, x, viewport)
    if not all(math.isfinite(v) for v in point):
        return None
    return x, point


def _grid_snap(cursor: Point, viewport: Viewport, threshold: float) -> Optional[Point]:
    if viewport.ppu <= 0:
        return None
    mx, my = viewport.to_math(cursor)
    target = viewport.to_screen((math.floor(mx + 0.5), math.floor(my + 0.5)))
    if distance(cursor, target) <= threshold:
        return target
    return None


@debug_log_call(logger)
def find_snap_target(
    cursor: Point,
    shapes: Sequence[Shape],
    exclude_ids: Iterable[str] = (),
    viewport: Optional[Viewport] = None,
    *,
    config: Optional[EngineConfig] = None,
) -> SnapResult:
    """Snap ``cursor`` to the best nearby target.

    Priority: discrete anchors (visual vertices and centers) within the
    vertex threshold, then the closest projection onto any visual edge,
    round boundary or analytic curve within the edge threshold, then the
    nearest grid intersection when the viewport shows a grid. An anchor
    wins even when an edge projection is closer.
    """

    cfg = _resolve_config(config)
    excluded = set(exclude_ids)
    candidates = [
        s for s in shapes if s.id not in excluded and s.category is not ShapeCategory.MARKER
    ]

    best_anchor: Optional[Tuple[float, Point, Shape]] = None
    for shape in candidates:
        for anchor in _anchors(shape):
            d = distance(cursor, anchor)
            if d <= cfg.vertex_threshold and (best_anchor is None or d < best_anchor[0]):
                best_anchor = (d, anchor, shape)
    if best_anchor is not None:
        _, anchor, shape = best_anchor
        binding = PointsLink((shape.id,)) if shape.category is ShapeCategory.POINT else None
        return SnapResult(anchor, True, binding, shape.id, "anchor")

    best: Optional[Tuple[float, SnapResult]] = None

    def _offer(d: float, result: SnapResult) -> None:
        nonlocal best
        if d <= cfg.edge_threshold and (best is None or d < best[0]):
            best = (d, result)

    for shape in candidates:
        if shape.category in ROUND_CATEGORIES:
            found = _nearest_on_round(shape, cursor)
            if found is not None:
                angle, point = found
                _offer(
                    distance(cursor, point),
                    SnapResult(point, True, OnPath(shape.id, angle=angle), shape.id, "path"),
                )
        elif shape.category is ShapeCategory.CURVE:
            if viewport is None:
                continue
            found = _nearest_on_curve(shape, cursor, viewport, cfg.edge_threshold)
            if found is not None:
                x, point = found
                _offer(
                    distance(cursor, point),
                    SnapResult(point, True, OnPath(shape.id, x=x), shape.id, "path"),
                )
        else:
            for index, (a, b) in enumerate(visual_edges(shape)):
                point, t = closest_point_on_segment(cursor, a, b)
                _offer(
                    distance(cursor, point),
                    SnapResult(point, True, OnEdge(shape.id, index, t), shape.id, "edge"),
                )
    if best is not None:
        return best[1]

    if viewport is not None and viewport.show_grid:
        grid_point = _grid_snap(cursor, viewport, cfg.vertex_threshold)
        if grid_point is not None:
            return SnapResult(grid_point, True, None, None, "grid")

    return SnapResult((float(cursor[0]), float(cursor[1])), False)


def snap_free_point(
    cursor: Point,
    shapes: Sequence[Shape],
    exclude_ids: Iterable[str] = (),
    viewport: Optional[Viewport] = None,
    *,
    config: Optional[EngineConfig] = None,
) -> SnapResult:
    """Snap for a standalone point: points bind to edges and paths, never to other points."""

    result = find_snap_target(cursor, shapes, exclude_ids, viewport, config=config)
    if isinstance(result.binding, PointsLink):
        return replace(result, binding=None)
    return result


def snap_segment_endpoint(
    cursor: Point,
    shapes: Sequence[Shape],
    exclude_ids: Iterable[str] = (),
    viewport: Optional[Viewport] = None,
    *,
    config: Optional[EngineConfig] = None,
) -> SnapResult:
    """Snap for a segment endpoint: link to a nearby point shape or stay unbound."""

    cfg = _resolve_config(config)
    result = find_snap_target(cursor, shapes, exclude_ids, viewport, config=cfg)
    if isinstance(result.binding, PointsLink):
        return result

    excluded = set(exclude_ids)
    nearest: Optional[Tuple[float, Shape, Point]] = None
    for shape in shapes:
        if shape.category is not ShapeCategory.POINT or shape.id in excluded or not shape.points:
            continue
        position = visual_corners(shape)[0]
        d = distance(cursor, position)
        if d <= cfg.vertex_threshold and (nearest is None or d < nearest[0]):
            nearest = (d, shape, position)
    if nearest is not None:
        _, shape, position = nearest
        return SnapResult(position, True, PointsLink((shape.id,)), shape.id, "anchor")
    if result.binding is not None:
        logger.debug("Dropping %s binding for segment endpoint", type(result.binding).__name__)
        return replace(result, binding=None)
    return result


def _linked_point(result: Optional[SnapResult]) -> Optional[str]:
    if result is None or not isinstance(result.binding, PointsLink):
        return None
    ids = result.binding.parent_ids
    return ids[0] if ids else None


def link_segment_endpoints(
    start: Optional[SnapResult], end: Optional[SnapResult]
) -> Optional[PointsLink]:
    """Combine two endpoint snaps into one two-slot link, or ``None`` if neither is linked."""

    start_id = _linked_point(start)
    end_id = _linked_point(end)
    if start_id is None and end_id is None:
        return None
    return PointsLink((start_id, end_id))


__all__ = [
    "SnapResult",
    "find_snap_target",
    "snap_free_point",
    "snap_segment_endpoint",
    "link_segment_endpoints",
]
