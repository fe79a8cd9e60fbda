"""Gesture-level entry points: live previews, commits and point drags.

While a move, rotate or group-scale gesture is in progress the committed
shapes stay untouched and the presentation layer draws them through a
:class:`Preview`. On release :func:`commit_preview` folds the preview into
the committed shapes with the regular transform operators and resolves the
dependents, so final geometry has a single code path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from .config import EngineConfig, _resolve_config
from .constraints import constrain_point_to_edge, get_dependents, resolve, resolve_many
from .curves import Viewport
from .geometry import rotate_point
from .logging_utils import debug_log_call
from .model import OnEdge, Point, Shape, ShapeCategory, find_shape
from .snap import link_segment_endpoints, snap_free_point, snap_segment_endpoint
from .transforms import move_shape, resize_group, resize_shape, rotate_shape, scale_group

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Preview:
    """Additive delta applied at render time on top of the committed shapes."""

    dx: float = 0.0
    dy: float = 0.0
    rotation: float = 0.0
    pivot: Optional[Point] = None
    scale: Optional[Tuple[float, float]] = None
    scale_center: Optional[Point] = None

    @property
    def is_identity(self) -> bool:
        return (
            not self.dx
            and not self.dy
            and not (self.rotation and self.pivot is not None)
            and not (self.scale is not None and self.scale_center is not None)
        )

    def transform_point(self, p: Point) -> Point:
        x, y = p
        if self.scale is not None and self.scale_center is not None:
            cx, cy = self.scale_center
            x = cx + (x - cx) * self.scale[0]
            y = cy + (y - cy) * self.scale[1]
        if self.rotation and self.pivot is not None:
            x, y = rotate_point((x, y), self.pivot, self.rotation)
        return x + self.dx, y + self.dy


def _exclusions(shapes: Sequence[Shape], shape_id: str) -> Set[str]:
    # never snap a shape onto itself or onto anything derived from it
    return {shape_id} | {s.id for s in get_dependents(shapes, [shape_id])}


def _rebind_point(
    point: Shape,
    shapes: Sequence[Shape],
    viewport: Optional[Viewport],
    cfg: EngineConfig,
) -> Shape:
    binding = point.binding
    if isinstance(binding, OnEdge):
        parent = find_shape(shapes, binding.parent_id)
        if parent is not None:
            projection = constrain_point_to_edge(point.points[0], parent, binding.edge_index)
            return replace(point, points=(projection.point,), binding=replace(binding, t=projection.t))
    snap = snap_free_point(
        point.points[0], shapes, _exclusions(shapes, point.id), viewport, config=cfg
    )
    return replace(point, points=(snap.point,), binding=snap.binding)


@debug_log_call(logger)
def commit_preview(
    shapes: Sequence[Shape],
    selected_ids: Iterable[str],
    preview: Preview,
    viewport: Optional[Viewport] = None,
    *,
    snap_rotation: bool = False,
    config: Optional[EngineConfig] = None,
) -> List[Shape]:
    """Fold ``preview`` into the selected shapes and resolve their dependents.

    The committed geometry is the one :meth:`Preview.transform_point` draws.
    Moved points that sit on an edge are re-anchored to that edge; other
    moved points are snapped and take whatever binding the snap produces.
    """

    cfg = _resolve_config(config)
    ids = list(dict.fromkeys(selected_ids))
    selected = set(ids)
    result = list(shapes)
    if not ids or preview.is_identity:
        return result

    # same order as Preview.transform_point: scale, rotate, translate
    if preview.scale is not None and preview.scale_center is not None:
        sx, sy = preview.scale
        result = scale_group(result, selected, sx, sy, preview.scale_center, config=cfg)

    if preview.rotation and preview.pivot is not None:
        result = [
            rotate_shape(s, preview.rotation, preview.pivot, snap_rotation, config=cfg)
            if s.id in selected
            else s
            for s in result
        ]

    if preview.dx or preview.dy:
        result = [
            move_shape(s, preview.dx, preview.dy, viewport) if s.id in selected else s
            for s in result
        ]
        for idx, shape in enumerate(result):
            if shape.id in selected and shape.category is ShapeCategory.POINT and shape.points:
                result[idx] = _rebind_point(shape, result, viewport, cfg)

    return resolve_many(result, ids, viewport, config=cfg)


def drag_point(
    shapes: Sequence[Shape],
    point_id: str,
    cursor: Point,
    viewport: Optional[Viewport] = None,
    *,
    config: Optional[EngineConfig] = None,
) -> List[Shape]:
    """One frame of dragging a point shape.

    A point bound to an edge slides along that edge however far the cursor
    strays; any other point follows the snap result and adopts its binding.
    """

    cfg = _resolve_config(config)
    point = find_shape(shapes, point_id)
    if point is None or point.category is not ShapeCategory.POINT:
        return list(shapes)
    moved = _rebind_point(replace(point, points=(cursor,)), shapes, viewport, cfg)
    result = [moved if s.id == point_id else s for s in shapes]
    return resolve(result, point_id, viewport, config=cfg)


def resize_selection(
    shapes: Sequence[Shape],
    selected_ids: Iterable[str],
    cursor: Point,
    handle_index: int,
    keep_aspect: bool = False,
    viewport: Optional[Viewport] = None,
    *,
    config: Optional[EngineConfig] = None,
) -> List[Shape]:
    """Resize one shape by its handle, or a multi-selection by its bounding box."""

    cfg = _resolve_config(config)
    ids = list(dict.fromkeys(selected_ids))
    if not ids:
        return list(shapes)
    if len(ids) == 1:
        result = [
            resize_shape(s, cursor, handle_index, keep_aspect, config=cfg) if s.id == ids[0] else s
            for s in shapes
        ]
    else:
        result = resize_group(shapes, ids, cursor, handle_index, keep_aspect, config=cfg)
    return resolve_many(result, ids, viewport, config=cfg)


def create_point(
    shapes: Sequence[Shape],
    point_id: str,
    cursor: Point,
    viewport: Optional[Viewport] = None,
    *,
    config: Optional[EngineConfig] = None,
) -> Shape:
    """A new point shape at the snapped cursor, bound to the edge or path it landed on."""

    snap = snap_free_point(cursor, shapes, (point_id,), viewport, config=config)
    return Shape(point_id, ShapeCategory.POINT, (snap.point,), binding=snap.binding)


def create_segment(
    shapes: Sequence[Shape],
    segment_id: str,
    start: Point,
    end: Point,
    viewport: Optional[Viewport] = None,
    *,
    config: Optional[EngineConfig] = None,
) -> Shape:
    """A new segment whose endpoints link to the point shapes they were dropped on."""

    start_snap = snap_segment_endpoint(start, shapes, (segment_id,), viewport, config=config)
    end_snap = snap_segment_endpoint(end, shapes, (segment_id,), viewport, config=config)
    return Shape(
        segment_id,
        ShapeCategory.SEGMENT,
        (start_snap.point, end_snap.point),
        binding=link_segment_endpoints(start_snap, end_snap),
    )


__all__ = [
    "Preview",
    "commit_preview",
    "drag_point",
    "resize_selection",
    "create_point",
    "create_segment",
]
