"""Recognition of hand-drawn strokes as canonical shapes."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .config import EngineConfig, _resolve_config
from .logging_utils import debug_log_call
from .model import Point, Shape, ShapeCategory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecognizedShape:
    category: ShapeCategory
    points: Tuple[Point, ...]

    def to_shape(self, shape_id: str, **fields) -> Shape:
        return Shape(shape_id, self.category, self.points, **fields)


def _segment_distances_sq(p: np.ndarray, a: np.ndarray, b: np.ndarray) -> np.ndarray:
    ab = b - a
    len_sq = float(ab @ ab)
    if len_sq <= 1e-12:
        diff = p - a
    else:
        t = np.clip(((p - a) @ ab) / len_sq, 0.0, 1.0)
        diff = p - (a + t[:, None] * ab)
    return np.einsum("ij,ij->i", diff, diff)


def simplify_rdp(points: Sequence[Point], tolerance: float) -> List[Point]:
    """Ramer-Douglas-Peucker simplification keeping both endpoints."""

    pts = np.asarray(points, dtype=float).reshape(-1, 2)
    if len(pts) <= 2:
        return [(float(x), float(y)) for x, y in pts]
    keep = np.zeros(len(pts), dtype=bool)
    keep[0] = keep[-1] = True
    tol_sq = tolerance * tolerance
    stack = [(0, len(pts) - 1)]
    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue
        dist_sq = _segment_distances_sq(pts[first + 1 : last], pts[first], pts[last])
        idx = int(np.argmax(dist_sq))
        if dist_sq[idx] > tol_sq:
            split = first + 1 + idx
            keep[split] = True
            stack.append((first, split))
            stack.append((split, last))
    return [(float(x), float(y)) for x, y in pts[keep]]


def _turn_degrees(prev: Point, cur: Point, nxt: Point) -> float:
    v1 = (cur[0] - prev[0], cur[1] - prev[1])
    v2 = (nxt[0] - cur[0], nxt[1] - cur[1])
    cross = v1[0] * v2[1] - v1[1] * v2[0]
    dot = v1[0] * v2[0] + v1[1] * v2[1]
    if not cross and not dot:
        return 0.0
    return math.degrees(math.atan2(abs(cross), dot))


def _prune_straight(corners: List[Point], min_turn: float) -> List[Point]:
    pts = list(corners)
    pruned = True
    while pruned and len(pts) > 3:
        pruned = False
        for i in range(len(pts)):
            if _turn_degrees(pts[i - 1], pts[i], pts[(i + 1) % len(pts)]) < min_turn:
                del pts[i]
                pruned = True
                break
    return pts


@debug_log_call(logger)
def classify_freehand(
    points: Sequence[Point], *, config: Optional[EngineConfig] = None
) -> Optional[RecognizedShape]:
    """Classify a stroke as a segment, triangle, rectangle, square or circle.

    Returns ``None`` when the stroke is too short or no category is a
    confident match; the caller then keeps the raw stroke. Corner counting
    runs before the roundness test so that sloppy rectangles are not taken
    for circles.
    """

    cfg = _resolve_config(config)
    if len(points) < cfg.min_stroke_points:
        return None
    pts = np.asarray(points, dtype=float).reshape(-1, 2)
    mins = pts.min(axis=0)
    maxs = pts.max(axis=0)
    width, height = (float(v) for v in maxs - mins)
    diagonal = math.hypot(width, height)
    if diagonal < cfg.min_stroke_diagonal:
        return None

    steps = np.diff(pts, axis=0)
    path_length = float(np.hypot(steps[:, 0], steps[:, 1]).sum())
    start = (float(pts[0, 0]), float(pts[0, 1]))
    end = (float(pts[-1, 0]), float(pts[-1, 1]))
    gap = math.hypot(end[0] - start[0], end[1] - start[1])

    if gap > cfg.open_gap_ratio * diagonal:
        if len(simplify_rdp(pts, cfg.line_tolerance)) <= 3:
            return RecognizedShape(ShapeCategory.SEGMENT, (start, end))

    if gap >= cfg.closed_gap_ratio * path_length:
        logger.debug("Stroke is neither straight nor closed (gap %.3g, length %.3g)", gap, path_length)
        return None

    tolerance = max(cfg.corner_tolerance_min, diagonal * cfg.corner_tolerance_ratio)
    corners = simplify_rdp(pts, tolerance)
    if len(corners) > 2 and math.dist(corners[0], corners[-1]) < tolerance:
        corners.pop()
    corners = _prune_straight(corners, cfg.corner_min_turn)
    logger.debug("Closed stroke simplified to %d corner(s)", len(corners))

    box = ((float(mins[0]), float(mins[1])), (float(maxs[0]), float(maxs[1])))
    if len(corners) == 3:
        return RecognizedShape(ShapeCategory.TRIANGLE, tuple(corners))
    if len(corners) in (4, 5):
        ratio = width / height if height > 0 else math.inf
        if abs(ratio - 1.0) <= cfg.square_tolerance:
            return RecognizedShape(ShapeCategory.SQUARE, box)
        return RecognizedShape(ShapeCategory.RECTANGLE, box)

    radii = np.hypot(*(pts - pts.mean(axis=0)).T)
    mean_radius = float(radii.mean())
    if mean_radius > 0 and float(radii.std()) / mean_radius < cfg.circle_max_cv:
        cx, cy = (mins + maxs) / 2.0
        half = (width + height) / 4.0
        return RecognizedShape(
            ShapeCategory.CIRCLE,
            ((float(cx - half), float(cy - half)), (float(cx + half), float(cy + half))),
        )
    return None


__all__ = ["RecognizedShape", "simplify_rdp", "classify_freehand"]
