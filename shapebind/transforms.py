"""Move, rotate, resize and mirror operators.

Resizing picks one of three stabilization strategies by category:

* vertex shapes (points, segments, polygons, strokes) bake their rotation
  into the points and move the dragged vertex to the cursor;
* box shapes pin the corner opposite the dragged handle and rescale in
  their own un-rotated frame;
* a multi-shape selection remaps every point through the change of the
  selection's bounding box.

All operators return new shapes; inputs are never modified.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence

from .config import EngineConfig, _resolve_config
from .curves import Viewport, shift_curve
from .geometry import (
    Bounds,
    angle_degrees,
    bounding_box,
    local_corners,
    reflect_point,
    rotate_point,
    shape_center,
    visual_corners,
)
from .model import (
    ASPECT_LOCKED_CATEGORIES,
    BOX_CATEGORIES,
    VERTEX_CATEGORIES,
    Point,
    Shape,
    ShapeCategory,
)

logger = logging.getLogger(__name__)

_FIXED_CATEGORIES = frozenset({ShapeCategory.CURVE, ShapeCategory.MARKER})


def _translate(points: Iterable[Point], dx: float, dy: float):
    return tuple((x + dx, y + dy) for x, y in points)


def _baked_points(shape: Shape):
    if not shape.rotation:
        return tuple(shape.points)
    center = shape_center(shape)
    assert center is not None
    return tuple(rotate_point(p, center, shape.rotation) for p in shape.points)


def _js_round(value: float) -> float:
    return math.floor(value + 0.5)


def move_shape(shape: Shape, dx: float, dy: float, viewport: Optional[Viewport] = None) -> Shape:
    """Translate ``shape`` by ``(dx, dy)`` screen pixels.

    Curves are moved algebraically: the pixel offset is converted to math
    units through ``viewport`` and applied to the curve's vertex.
    """

    if shape.category is ShapeCategory.CURVE:
        if shape.formula is None:
            return shape
        if viewport is None or viewport.ppu <= 0:
            raise ValueError(f"moving curve {shape.id!r} requires a viewport with a positive scale")
        formula = shift_curve(shape.formula, dx / viewport.ppu, -dy / viewport.ppu)
        return replace(shape, formula=formula)
    if not dx and not dy:
        return shape
    return replace(shape, points=_translate(shape.points, dx, dy))


def snap_rotation(rotation: float, step: float) -> float:
    if step <= 0:
        return rotation
    return _js_round(rotation / step) * step


def rotate_shape(
    shape: Shape,
    delta: float,
    pivot: Optional[Point] = None,
    snap: bool = False,
    *,
    config: Optional[EngineConfig] = None,
) -> Shape:
    """Rotate by ``delta`` degrees, optionally about an external ``pivot``.

    The stored rotation always stays relative to the shape's own center; an
    external pivot only contributes the translation of that center.
    """

    if shape.category in _FIXED_CATEGORIES:
        return shape
    center = shape_center(shape)
    if center is None:
        return shape
    cfg = _resolve_config(config)
    rotation = shape.rotation + delta
    if snap:
        rotation = snap_rotation(rotation, cfg.rotation_snap_step)
    points = shape.points
    if pivot is not None:
        new_center = rotate_point(center, pivot, delta)
        points = _translate(points, new_center[0] - center[0], new_center[1] - center[1])
    return replace(shape, points=points, rotation=rotation)


def _resize_vertex(shape: Shape, cursor: Point, handle_index: int) -> Shape:
    if handle_index < 0 or handle_index >= len(shape.points):
        logger.debug("Handle %d out of range for %s", handle_index, shape.id)
        return shape
    points = list(_baked_points(shape))
    points[handle_index] = (float(cursor[0]), float(cursor[1]))
    return replace(shape, points=tuple(points), rotation=0.0)


def _resize_box(
    shape: Shape, cursor: Point, handle_index: int, keep_aspect: bool, cfg: EngineConfig
) -> Shape:
    corners = visual_corners(shape)
    if len(corners) < 4:
        return shape
    anchor = corners[(handle_index + 2) % 4]
    rad = math.radians(shape.rotation)
    cos_a = math.cos(rad)
    sin_a = math.sin(rad)
    dx = cursor[0] - anchor[0]
    dy = cursor[1] - anchor[1]
    # cursor offset from the pinned corner in the shape's un-rotated frame
    vx = dx * cos_a + dy * sin_a
    vy = -dx * sin_a + dy * cos_a

    box = bounding_box(local_corners(shape))
    assert box is not None
    if shape.category is ShapeCategory.TEXT:
        old_w, old_h = box.width, box.height
    else:
        old_w, old_h = max(1.0, box.width), max(1.0, box.height)

    if keep_aspect or shape.category in ASPECT_LOCKED_CATEGORIES:
        ratio = old_w / old_h
        if abs(vx) > ratio * abs(vy):
            vy = math.copysign(abs(vx) / ratio, vy if vy else 1.0)
        else:
            vx = math.copysign(abs(vy) * ratio, vx if vx else 1.0)

    half_x = vx * 0.5
    half_y = vy * 0.5
    center = (
        anchor[0] + half_x * cos_a - half_y * sin_a,
        anchor[1] + half_x * sin_a + half_y * cos_a,
    )
    new_w = abs(vx)
    new_h = abs(vy)
    top_left = (center[0] - new_w * 0.5, center[1] - new_h * 0.5)
    bottom_right = (center[0] + new_w * 0.5, center[1] + new_h * 0.5)

    if shape.category is ShapeCategory.TEXT:
        font_size = max(cfg.min_font_size, shape.effective_font_size * new_h / old_h)
        anchor_point = (top_left[0], top_left[1] + font_size * 0.1)
        return replace(shape, points=(anchor_point,), font_size=font_size)
    return replace(shape, points=(top_left, bottom_right))


def resize_shape(
    shape: Shape,
    cursor: Point,
    handle_index: int,
    keep_aspect: bool = False,
    *,
    config: Optional[EngineConfig] = None,
) -> Shape:
    """Drag handle ``handle_index`` of a single shape to ``cursor``.

    For vertex shapes the handle is a vertex index; for box shapes it is a
    corner (0 top-left, 1 top-right, 2 bottom-right, 3 bottom-left).
    """

    cfg = _resolve_config(config)
    if shape.category in VERTEX_CATEGORIES:
        return _resize_vertex(shape, cursor, handle_index)
    if shape.category in BOX_CATEGORIES:
        return _resize_box(shape, cursor, handle_index % 4, keep_aspect, cfg)
    return shape


def selection_bounds(shapes: Sequence[Shape], ids: Iterable[str]) -> Optional[Bounds]:
    """Axis-aligned bounds of the selected shapes' visual corners."""

    wanted = set(ids)
    corners = [p for s in shapes if s.id in wanted for p in visual_corners(s)]
    return bounding_box(corners)


def resize_group(
    shapes: Sequence[Shape],
    selected_ids: Iterable[str],
    cursor: Point,
    handle_index: int,
    keep_aspect: bool = False,
    *,
    config: Optional[EngineConfig] = None,
) -> List[Shape]:
    """Scale every selected shape with the selection's bounding box."""

    cfg = _resolve_config(config)
    selected = set(selected_ids)
    bounds = selection_bounds(shapes, selected)
    if bounds is None:
        return list(shapes)
    handle = handle_index % 4
    w = max(bounds.width, cfg.min_group_extent)
    h = max(bounds.height, cfg.min_group_extent)
    fixed = bounds.corners()[(handle + 2) % 4]
    tx, ty = float(cursor[0]), float(cursor[1])

    if keep_aspect:
        ratio = w / h
        dx = tx - fixed[0]
        dy = ty - fixed[1]
        if abs(dx) > ratio * abs(dy):
            ty = fixed[1] + math.copysign(abs(dx) / ratio, dy if dy else 1.0)
        else:
            tx = fixed[0] + math.copysign(abs(dy) * ratio, dx if dx else 1.0)

    if handle in (0, 3):
        left, right = tx, bounds.max_x
    else:
        left, right = bounds.min_x, tx
    if handle in (0, 1):
        top, bottom = ty, bounds.max_y
    else:
        top, bottom = bounds.min_y, ty
    new_w = right - left
    new_h = bottom - top
    if abs(new_w) < cfg.min_group_extent:
        new_w = math.copysign(cfg.min_group_extent, new_w if new_w else 1.0)
    if abs(new_h) < cfg.min_group_extent:
        new_h = math.copysign(cfg.min_group_extent, new_h if new_h else 1.0)
    return scale_group(
        shapes,
        selected,
        new_w / w,
        new_h / h,
        (bounds.min_x, bounds.min_y),
        left - bounds.min_x,
        top - bounds.min_y,
        config=cfg,
    )


def scale_group(
    shapes: Sequence[Shape],
    selected_ids: Iterable[str],
    sx: float,
    sy: float,
    center: Point,
    dx: float = 0.0,
    dy: float = 0.0,
    *,
    config: Optional[EngineConfig] = None,
) -> List[Shape]:
    """Scale selected shapes by ``(sx, sy)`` about ``center`` and then translate by ``(dx, dy)``."""

    cfg = _resolve_config(config)
    selected = set(selected_ids)
    cx, cy = center
    result: List[Shape] = []
    for shape in shapes:
        if shape.id not in selected or shape.category in _FIXED_CATEGORIES:
            result.append(shape)
            continue
        points = tuple(
            (cx + (x - cx) * sx + dx, cy + (y - cy) * sy + dy) for x, y in shape.points
        )
        if shape.category is ShapeCategory.TEXT:
            font_size = max(cfg.min_font_size, shape.effective_font_size * abs(sy))
            result.append(replace(shape, points=points, font_size=font_size))
        else:
            result.append(replace(shape, points=points))
    return result


def reflect_shape(shape: Shape, a: Point, b: Point, new_id: Optional[str] = None) -> Shape:
    """Mirror image of ``shape`` across the line through ``a`` and ``b``.

    The copy is unbound; pass ``new_id`` to give it a fresh identity.
    """

    shape_id = new_id if new_id is not None else shape.id
    if shape.category in _FIXED_CATEGORIES:
        return replace(shape, id=shape_id, binding=None)
    if shape.category in BOX_CATEGORIES:
        center = shape_center(shape)
        assert center is not None
        mirrored = reflect_point(center, a, b)
        rotation = (2.0 * angle_degrees(a, b) - shape.rotation) % 360.0
        points = _translate(shape.points, mirrored[0] - center[0], mirrored[1] - center[1])
        return replace(shape, id=shape_id, points=points, rotation=rotation, binding=None)
    points = tuple(reflect_point(p, a, b) for p in _baked_points(shape))
    return replace(shape, id=shape_id, points=points, rotation=0.0, binding=None)


def fit_to_viewport(
    shapes: Sequence[Shape], width: float, height: float, padding: float = 50.0
) -> List[Shape]:
    """Uniformly scale and center the figure inside a ``width`` x ``height`` canvas."""

    box = bounding_box(p for s in shapes for p in s.points)
    if box is None or box.width <= 0 or box.height <= 0:
        return list(shapes)
    scale = min((width - 2.0 * padding) / box.width, (height - 2.0 * padding) / box.height)
    cx, cy = box.center
    vx, vy = width / 2.0, height / 2.0

    result: List[Shape] = []
    for shape in shapes:
        points = tuple((vx + (x - cx) * scale, vy + (y - cy) * scale) for x, y in shape.points)
        style = dict(shape.style)
        stroke_width = style.get("strokeWidth")
        if isinstance(stroke_width, (int, float)):
            style["strokeWidth"] = stroke_width * scale
        font_size = shape.font_size * scale if shape.font_size else shape.font_size
        result.append(replace(shape, points=points, font_size=font_size, style=style))
    return result


__all__ = [
    "move_shape",
    "snap_rotation",
    "rotate_shape",
    "resize_shape",
    "selection_bounds",
    "resize_group",
    "scale_group",
    "reflect_shape",
    "fit_to_viewport",
]
