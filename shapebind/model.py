"""Immutable figure model: categories, bindings and shapes."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Mapping, Optional, Sequence, Tuple, Union

Point = Tuple[float, float]

DEFAULT_FONT_SIZE = 16.0


class ShapeCategory(str, enum.Enum):
    POINT = "point"
    SEGMENT = "segment"
    TRIANGLE = "triangle"
    POLYGON = "polygon"
    PATH = "path"
    FREEHAND = "freehand"
    RECTANGLE = "rectangle"
    SQUARE = "square"
    CIRCLE = "circle"
    ELLIPSE = "ellipse"
    TEXT = "text"
    IMAGE = "image"
    CURVE = "curve"
    MARKER = "marker"

    def __str__(self) -> str:
        return self.value


BOX_CATEGORIES: FrozenSet[ShapeCategory] = frozenset(
    {
        ShapeCategory.RECTANGLE,
        ShapeCategory.SQUARE,
        ShapeCategory.CIRCLE,
        ShapeCategory.ELLIPSE,
        ShapeCategory.TEXT,
        ShapeCategory.IMAGE,
    }
)
POLYGON_CATEGORIES: FrozenSet[ShapeCategory] = frozenset(
    {ShapeCategory.TRIANGLE, ShapeCategory.POLYGON}
)
VERTEX_CATEGORIES: FrozenSet[ShapeCategory] = frozenset(
    {
        ShapeCategory.POINT,
        ShapeCategory.SEGMENT,
        ShapeCategory.TRIANGLE,
        ShapeCategory.POLYGON,
        ShapeCategory.PATH,
        ShapeCategory.FREEHAND,
    }
)
ROUND_CATEGORIES: FrozenSet[ShapeCategory] = frozenset(
    {ShapeCategory.CIRCLE, ShapeCategory.ELLIPSE}
)
ASPECT_LOCKED_CATEGORIES: FrozenSet[ShapeCategory] = frozenset(
    {ShapeCategory.SQUARE, ShapeCategory.CIRCLE}
)
# Closed outlines: the last visual corner connects back to the first.
CLOSED_CATEGORIES: FrozenSet[ShapeCategory] = POLYGON_CATEGORIES | BOX_CATEGORIES

# Minimum number of defining points per category.
MIN_POINTS: Dict[ShapeCategory, int] = {
    ShapeCategory.POINT: 1,
    ShapeCategory.SEGMENT: 2,
    ShapeCategory.TRIANGLE: 3,
    ShapeCategory.POLYGON: 3,
    ShapeCategory.PATH: 1,
    ShapeCategory.FREEHAND: 1,
    ShapeCategory.RECTANGLE: 2,
    ShapeCategory.SQUARE: 2,
    ShapeCategory.CIRCLE: 2,
    ShapeCategory.ELLIPSE: 2,
    ShapeCategory.TEXT: 1,
    ShapeCategory.IMAGE: 2,
    ShapeCategory.CURVE: 0,
    ShapeCategory.MARKER: 0,
}


@dataclass(frozen=True)
class OnEdge:
    """Dependent sits at ``t`` along visual edge ``edge_index`` of the parent."""

    parent_id: str
    edge_index: int
    t: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "edge_index", int(self.edge_index))
        object.__setattr__(self, "t", float(self.t))


@dataclass(frozen=True)
class OnPath:
    """Dependent tracks a round boundary (``angle``) or an analytic curve (``x``)."""

    parent_id: str
    angle: Optional[float] = None
    x: Optional[float] = None


@dataclass(frozen=True)
class PointsLink:
    """Segment endpoints copied from point shapes; ``None`` slots stay free."""

    parent_ids: Tuple[Optional[str], ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "parent_ids", tuple(self.parent_ids))


Binding = Union[OnEdge, OnPath, PointsLink]


def binding_parent_ids(binding: Optional[Binding]) -> Tuple[str, ...]:
    if binding is None:
        return ()
    if isinstance(binding, PointsLink):
        return tuple(pid for pid in binding.parent_ids if pid)
    return (binding.parent_id,)


@dataclass(frozen=True)
class CurveFormula:
    """Coefficients of an analytic curve in math space.

    ``quadratic`` curves are ``a*x^2 + b*x + c`` in standard form and
    ``a*(x - h)^2 + k`` in vertex form. ``linear`` curves store the slope in
    ``k`` and the intercept in ``b``.
    """

    kind: str = "quadratic"
    form: str = "standard"
    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    h: float = 0.0
    k: float = 0.0

    @classmethod
    def linear(cls, slope: float, intercept: float) -> "CurveFormula":
        return cls(kind="linear", form="standard", a=0.0, b=intercept, c=0.0, h=0.0, k=slope)

    def evaluate(self, x: float) -> float:
        if self.kind == "linear":
            return self.k * x + self.b
        if self.form == "vertex":
            return self.a * (x - self.h) ** 2 + self.k
        return self.a * x * x + self.b * x + self.c


@dataclass(frozen=True)
class MarkerConfig:
    kind: str
    target_id: str
    vertex_indices: Tuple[int, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "vertex_indices", tuple(int(i) for i in self.vertex_indices))


@dataclass(frozen=True)
class Shape:
    """An identified figure.

    ``points`` are raw, pre-rotation coordinates in screen space (y grows
    downward). ``rotation`` is in degrees about the shape's own center.
    """

    id: str
    category: ShapeCategory
    points: Tuple[Point, ...] = ()
    rotation: float = 0.0
    binding: Optional[Binding] = None
    text: Optional[str] = None
    font_size: Optional[float] = None
    labels: Tuple[str, ...] = ()
    formula: Optional[CurveFormula] = None
    marker: Optional[MarkerConfig] = None
    pressure: Tuple[float, ...] = ()
    style: Mapping[str, object] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", ShapeCategory(self.category))
        object.__setattr__(
            self, "points", tuple((float(x), float(y)) for x, y in self.points)
        )
        object.__setattr__(self, "rotation", float(self.rotation))
        object.__setattr__(self, "labels", tuple(self.labels))
        object.__setattr__(self, "pressure", tuple(float(p) for p in self.pressure))

    @property
    def effective_font_size(self) -> float:
        return float(self.font_size) if self.font_size else DEFAULT_FONT_SIZE


def parent_ids(shape: Shape) -> Tuple[str, ...]:
    """Ids this shape's geometry is derived from (binding parents and marker target)."""

    ids = binding_parent_ids(shape.binding)
    if shape.marker is not None and shape.marker.target_id not in ids:
        ids = ids + (shape.marker.target_id,)
    return ids


def find_shape(shapes: Sequence[Shape], shape_id: Optional[str]) -> Optional[Shape]:
    if shape_id is None:
        return None
    for shape in shapes:
        if shape.id == shape_id:
            return shape
    return None


__all__ = [
    "Point",
    "DEFAULT_FONT_SIZE",
    "ShapeCategory",
    "BOX_CATEGORIES",
    "POLYGON_CATEGORIES",
    "VERTEX_CATEGORIES",
    "ROUND_CATEGORIES",
    "ASPECT_LOCKED_CATEGORIES",
    "CLOSED_CATEGORIES",
    "MIN_POINTS",
    "OnEdge",
    "OnPath",
    "PointsLink",
    "Binding",
    "binding_parent_ids",
    "CurveFormula",
    "MarkerConfig",
    "Shape",
    "parent_ids",
    "find_shape",
]
