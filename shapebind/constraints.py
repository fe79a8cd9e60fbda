"""Constraint graph resolution.

Bindings name their parents by id. After a shape changes, :func:`resolve`
recomputes every shape bound to it from the parent's current visual geometry
and recurses into the dependents of whatever actually moved. Markers follow
the shape they annotate the same way.
"""

from __future__ import annotations

import logging
import math
from collections import deque
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Sequence

from .config import EngineConfig, _resolve_config
from .curves import Viewport, curve_point
from .geometry import closest_point_on_segment, ellipse_point, lerp, visual_corners, visual_edge
from .model import (
    ROUND_CATEGORIES,
    OnEdge,
    OnPath,
    Point,
    PointsLink,
    Shape,
    ShapeCategory,
    find_shape,
    parent_ids,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EdgeProjection:
    point: Point
    t: float


def constrain_point_to_edge(cursor: Point, parent: Shape, edge_index: int) -> EdgeProjection:
    """Project ``cursor`` onto visual edge ``edge_index`` of ``parent`` with ``t`` clamped to [0, 1].

    An edge index the parent does not have yields the cursor itself with
    ``t = 0``; a zero-length edge yields its first corner with ``t = 0``.
    """

    edge = visual_edge(parent, edge_index)
    if edge is None:
        return EdgeProjection((float(cursor[0]), float(cursor[1])), 0.0)
    point, t = closest_point_on_segment(cursor, edge[0], edge[1])
    return EdgeProjection(point, t)


def _unit(v: Point) -> Optional[Point]:
    length = math.hypot(v[0], v[1])
    if length <= 1e-12:
        return None
    return v[0] / length, v[1] / length


def recalculate_marker(
    marker: Shape, target: Shape, *, config: Optional[EngineConfig] = None
) -> Shape:
    """Rebuild an angle marker from the current visual corners of ``target``.

    The marker's vertex indices name (previous, vertex, next) corners. The
    stored points are ``(start, corner, end)`` for a right-angle square and
    ``(start, vertex, end)`` for every other marker kind.
    """

    cfg = _resolve_config(config)
    if marker.marker is None:
        return marker
    indices = marker.marker.vertex_indices
    corners = visual_corners(target)
    if len(indices) < 3 or any(i < 0 or i >= len(corners) for i in indices[:3]):
        return marker
    prev_pt, vertex, next_pt = (corners[i] for i in indices[:3])
    u1 = _unit((prev_pt[0] - vertex[0], prev_pt[1] - vertex[1]))
    u2 = _unit((next_pt[0] - vertex[0], next_pt[1] - vertex[1]))
    if u1 is None or u2 is None:
        return marker
    length = cfg.marker_length
    start = (vertex[0] + u1[0] * length, vertex[1] + u1[1] * length)
    end = (vertex[0] + u2[0] * length, vertex[1] + u2[1] * length)
    if marker.marker.kind == "perpendicular":
        middle = (start[0] + u2[0] * length, start[1] + u2[1] * length)
    else:
        middle = vertex
    return replace(marker, points=(start, middle, end), rotation=0.0)


def _place(dependent: Shape, position: Point) -> Shape:
    if not dependent.points:
        return replace(dependent, points=(position,))
    ox, oy = dependent.points[0]
    dx = position[0] - ox
    dy = position[1] - oy
    return replace(dependent, points=tuple((x + dx, y + dy) for x, y in dependent.points))


def _recompute(
    dependent: Shape,
    changed_id: str,
    shapes: Sequence[Shape],
    viewport: Optional[Viewport],
    cfg: EngineConfig,
) -> Optional[Shape]:
    if dependent.marker is not None and dependent.marker.target_id == changed_id:
        target = find_shape(shapes, changed_id)
        if target is None:
            return None
        return recalculate_marker(dependent, target, config=cfg)

    binding = dependent.binding
    if isinstance(binding, OnEdge):
        parent = find_shape(shapes, binding.parent_id)
        if parent is None:
            logger.debug("Parent %s of %s is missing", binding.parent_id, dependent.id)
            return None
        edge = visual_edge(parent, binding.edge_index)
        if edge is None:
            logger.debug(
                "Edge %d of %s is out of range for %s", binding.edge_index, parent.id, dependent.id
            )
            return None
        return _place(dependent, lerp(edge[0], edge[1], binding.t))

    if isinstance(binding, OnPath):
        parent = find_shape(shapes, binding.parent_id)
        if parent is None:
            logger.debug("Parent %s of %s is missing", binding.parent_id, dependent.id)
            return None
        if parent.category in ROUND_CATEGORIES and binding.angle is not None:
            return _place(dependent, ellipse_point(parent, binding.angle))
        if parent.category is ShapeCategory.CURVE and binding.x is not None:
            if parent.formula is None or viewport is None:
                logger.debug("Cannot place %s on curve %s without a viewport", dependent.id, parent.id)
                return None
            position = curve_point(parent.formula, binding.x, viewport)
            if not all(math.isfinite(v) for v in position):
                return None
            return _place(dependent, position)
        logger.debug("Unsupported path parent %s (%s) for %s", parent.id, parent.category, dependent.id)
        return None

    if isinstance(binding, PointsLink):
        points = list(dependent.points)
        for slot, pid in enumerate(binding.parent_ids):
            if not pid or slot >= len(points):
                continue
            parent = find_shape(shapes, pid)
            if parent is None or not parent.points:
                continue
            points[slot] = visual_corners(parent)[0]
        return replace(dependent, points=tuple(points), rotation=0.0)

    return None


def _geometry_changed(old: Shape, new: Shape, tolerance: float) -> bool:
    if abs(old.rotation - new.rotation) > tolerance:
        return True
    if len(old.points) != len(new.points):
        return True
    for (x0, y0), (x1, y1) in zip(old.points, new.points):
        if abs(x0 - x1) > tolerance or abs(y0 - y1) > tolerance:
            return True
    return False


def resolve(
    shapes: Sequence[Shape],
    changed_id: str,
    viewport: Optional[Viewport] = None,
    depth: int = 0,
    *,
    config: Optional[EngineConfig] = None,
) -> List[Shape]:
    """Propagate a change of ``changed_id`` to every shape that depends on it.

    Returns a new list in the same order as ``shapes``. Dependents whose
    parent is missing, or whose binding cannot be evaluated, keep their last
    geometry. Recursion stops after ``config.max_depth`` levels with a
    warning and the shapes computed so far.
    """

    cfg = _resolve_config(config)
    result = list(shapes)
    if depth > cfg.max_depth:
        logger.warning(
            "Constraint resolution stopped at depth %d while updating dependents of %s; "
            "the binding graph is probably cyclic",
            depth,
            changed_id,
        )
        return result

    dependent_ids = [s.id for s in result if changed_id in parent_ids(s)]
    for dep_id in dependent_ids:
        position = next((idx for idx, s in enumerate(result) if s.id == dep_id), None)
        if position is None:
            continue
        current = result[position]
        updated = _recompute(current, changed_id, result, viewport, cfg)
        if updated is None or not _geometry_changed(current, updated, cfg.change_tolerance):
            continue
        result[position] = updated
        result = resolve(result, dep_id, viewport, depth + 1, config=cfg)
    return result


def resolve_many(
    shapes: Sequence[Shape],
    changed_ids: Iterable[str],
    viewport: Optional[Viewport] = None,
    *,
    config: Optional[EngineConfig] = None,
) -> List[Shape]:
    result = list(shapes)
    for changed_id in changed_ids:
        result = resolve(result, changed_id, viewport, config=config)
    return result


def _children_index(shapes: Sequence[Shape]) -> Dict[str, List[Shape]]:
    children: Dict[str, List[Shape]] = {}
    for shape in shapes:
        for pid in parent_ids(shape):
            children.setdefault(pid, []).append(shape)
    return children


def get_dependents(shapes: Sequence[Shape], root_ids: Iterable[str]) -> List[Shape]:
    """Transitive dependents of ``root_ids`` in breadth-first order, roots excluded."""

    roots = list(dict.fromkeys(root_ids))
    children = _children_index(shapes)
    visited = set(roots)
    queue = deque(roots)
    found: List[Shape] = []
    while queue:
        pid = queue.popleft()
        for child in children.get(pid, []):
            if child.id in visited:
                continue
            visited.add(child.id)
            found.append(child)
            queue.append(child.id)
    return found


def delete_shapes(shapes: Sequence[Shape], ids: Iterable[str]) -> List[Shape]:
    """Remove ``ids`` and everything pinned to them.

    Shapes bound on an edge or path of a removed shape, and markers on a
    removed shape, are removed as well. Segment links to a removed point are
    detached instead: the slot is freed and the endpoint stays where it is.
    """

    removed = set(ids)
    grew = True
    while grew:
        grew = False
        for shape in shapes:
            if shape.id in removed:
                continue
            pinned = isinstance(shape.binding, (OnEdge, OnPath)) and shape.binding.parent_id in removed
            marked = shape.marker is not None and shape.marker.target_id in removed
            if pinned or marked:
                removed.add(shape.id)
                grew = True

    result: List[Shape] = []
    for shape in shapes:
        if shape.id in removed:
            continue
        binding = shape.binding
        if isinstance(binding, PointsLink) and any(pid in removed for pid in binding.parent_ids):
            slots = tuple(None if pid in removed else pid for pid in binding.parent_ids)
            shape = replace(shape, binding=PointsLink(slots) if any(slots) else None)
        result.append(shape)
    logger.debug("Deleted %d shape(s)", len(shapes) - len(result))
    return result


__all__ = [
    "EdgeProjection",
    "constrain_point_to_edge",
    "recalculate_marker",
    "resolve",
    "resolve_many",
    "get_dependents",
    "delete_shapes",
]
