from typing import Iterable, Set

from .model import MIN_POINTS, OnEdge, OnPath, PointsLink, Shape, ShapeCategory


class ValidationError(Exception):
    pass


def _fail(shape_id: str, message: str) -> ValidationError:
    return ValidationError(f"[shape {shape_id}] {message}")


def validate_shapes(shapes: Iterable[Shape]) -> None:
    """Reject structurally broken shape collections.

    A binding whose parent is absent is fine: deletions leave such
    dependents behind on purpose and resolution simply skips them.
    """

    seen: Set[str] = set()
    for s in shapes:
        if not s.id:
            raise ValidationError("shape without an id")
        if s.id in seen:
            raise _fail(s.id, "duplicate id")
        seen.add(s.id)

        k = s.category
        need = MIN_POINTS[k]
        if len(s.points) < need:
            raise _fail(s.id, f"{k} needs at least {need} point(s), got {len(s.points)}")
        if k in (ShapeCategory.POINT, ShapeCategory.SEGMENT, ShapeCategory.TRIANGLE) and len(s.points) != need:
            raise _fail(s.id, f"{k} needs exactly {need} point(s), got {len(s.points)}")
        if s.pressure and len(s.pressure) != len(s.points):
            raise _fail(s.id, "pressure samples do not match points")
        if k == ShapeCategory.CURVE:
            if s.formula is None:
                raise _fail(s.id, "curve without a formula")
            if s.formula.kind not in ("quadratic", "linear"):
                raise _fail(s.id, f"curve kind must be quadratic|linear (got {s.formula.kind})")
            if s.formula.form not in ("standard", "vertex"):
                raise _fail(s.id, f"curve form must be standard|vertex (got {s.formula.form})")
        if k == ShapeCategory.MARKER:
            if s.marker is None:
                raise _fail(s.id, "marker without a target")
            if len(s.marker.vertex_indices) != 3:
                raise _fail(s.id, "marker needs three vertex indices")
            if s.marker.target_id == s.id:
                raise _fail(s.id, "marker cannot target itself")
        if k == ShapeCategory.TEXT and s.font_size is not None and s.font_size <= 0:
            raise _fail(s.id, "font size must be positive")

        b = s.binding
        if b is None:
            continue
        if isinstance(b, PointsLink):
            if k != ShapeCategory.SEGMENT:
                raise _fail(s.id, "points_link binds segments only")
            if not 1 <= len(b.parent_ids) <= 2:
                raise _fail(s.id, "points_link needs one or two slots")
            if s.id in b.parent_ids:
                raise _fail(s.id, "shape cannot link to itself")
        elif isinstance(b, OnEdge):
            if b.parent_id == s.id:
                raise _fail(s.id, "shape cannot bind to itself")
            if b.edge_index < 0:
                raise _fail(s.id, f"edge index must be non-negative (got {b.edge_index})")
        elif isinstance(b, OnPath):
            if b.parent_id == s.id:
                raise _fail(s.id, "shape cannot bind to itself")
            if b.angle is None and b.x is None:
                raise _fail(s.id, "on_path needs an angle or an x coordinate")
