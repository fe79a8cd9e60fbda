"""Conversion between :class:`Shape` objects and persisted shape records.

A record is a JSON-compatible mapping::

    {"id": "p1", "category": "point", "points": [{"x": 50, "y": 0}],
     "rotation": 0, "fill": "transparent", "stroke": "#000000",
     "strokeWidth": 1, "strokeType": "solid",
     "binding": {"type": "on_edge", "parentId": "t1", "edgeIndex": 0, "t": 0.5}}

Style attributes and any keys this module does not understand live at the
top level and are carried through unchanged. Older records that use
``type``/``constraint``/``formulaParams``/``markerConfig`` are read too.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .model import (
    Binding,
    CurveFormula,
    MarkerConfig,
    OnEdge,
    OnPath,
    Point,
    PointsLink,
    Shape,
    ShapeCategory,
)
from .validate import ValidationError, validate_shapes

logger = logging.getLogger(__name__)

_CATEGORY_ALIASES = {
    "line": ShapeCategory.SEGMENT,
    "function_graph": ShapeCategory.CURVE,
}

_STYLE_DEFAULTS = {
    "fill": "transparent",
    "stroke": "#000000",
    "strokeWidth": 1,
    "strokeType": "solid",
}

_MODEL_KEYS = frozenset(
    {
        "id",
        "category",
        "type",
        "points",
        "rotation",
        "binding",
        "constraint",
        "text",
        "fontSize",
        "labels",
        "formula",
        "formulaParams",
        "functionType",
        "functionForm",
        "marker",
        "markerConfig",
    }
)


def _category(record: Mapping[str, Any]) -> ShapeCategory:
    raw = record.get("category", record.get("type"))
    if not isinstance(raw, str):
        raise ValidationError(f"[shape {record.get('id')}] missing category")
    name = raw.strip().lower()
    if name in _CATEGORY_ALIASES:
        return _CATEGORY_ALIASES[name]
    try:
        return ShapeCategory(name)
    except ValueError:
        raise ValidationError(f"[shape {record.get('id')}] unknown category {raw!r}") from None


def _points(record: Mapping[str, Any]) -> Tuple[Tuple[Point, ...], Tuple[float, ...]]:
    points: List[Point] = []
    pressure: List[float] = []
    for item in record.get("points") or ():
        if isinstance(item, Mapping):
            points.append((float(item["x"]), float(item["y"])))
            if item.get("p") is not None:
                pressure.append(float(item["p"]))
        else:
            x, y = item
            points.append((float(x), float(y)))
    if len(pressure) != len(points):
        pressure = []
    return tuple(points), tuple(pressure)


def _optional_float(data: Mapping[str, Any], *keys: str) -> Optional[float]:
    for key in keys:
        if data.get(key) is not None:
            return float(data[key])
    return None


def _binding(data: Optional[Mapping[str, Any]], shape_id: str) -> Optional[Binding]:
    if not data:
        return None
    kind = data.get("type")
    if kind == "on_edge":
        t = _optional_float(data, "t", "paramT")
        if data.get("edgeIndex") is None or t is None:
            raise ValidationError(f"[shape {shape_id}] on_edge binding needs edgeIndex and t")
        return OnEdge(str(data["parentId"]), int(data["edgeIndex"]), t)
    if kind == "on_path":
        return OnPath(
            str(data["parentId"]),
            angle=_optional_float(data, "angle", "paramAngle"),
            x=_optional_float(data, "x", "paramX"),
        )
    if kind == "points_link":
        parents = data.get("parents")
        if parents is None and data.get("parentId"):
            parents = [data["parentId"]]
        return PointsLink(tuple(str(pid) if pid else None for pid in parents or ()))
    logger.warning("Ignoring unsupported binding %r on shape %s", kind, shape_id)
    return None


def _formula(record: Mapping[str, Any]) -> Optional[CurveFormula]:
    data = record.get("formula")
    if data is not None:
        kind = data.get("kind", "quadratic")
        form = data.get("form", "standard")
    elif record.get("formulaParams") is not None:
        data = record["formulaParams"]
        kind = record.get("functionType") or "quadratic"
        form = record.get("functionForm") or "standard"
    else:
        return None
    if kind == "linear":
        return CurveFormula.linear(float(data.get("k", 1.0)), float(data.get("b", 0.0)))
    return CurveFormula(
        kind=kind,
        form=form,
        a=float(data.get("a", 1.0)),
        b=float(data.get("b", 0.0)),
        c=float(data.get("c", 0.0)),
        h=float(data.get("h", 0.0)),
        k=float(data.get("k", 0.0)),
    )


def _marker(record: Mapping[str, Any]) -> Optional[MarkerConfig]:
    data = record.get("marker")
    if data is not None:
        return MarkerConfig(data["kind"], str(data["targetId"]), tuple(data["vertexIndices"]))
    legacy = record.get("markerConfig")
    if legacy and legacy.get("targets"):
        target = legacy["targets"][0]
        return MarkerConfig(legacy["type"], str(target["shapeId"]), tuple(target["pointIndices"]))
    return None


def shape_from_record(record: Mapping[str, Any]) -> Shape:
    """Build a :class:`Shape` from one record, filling in default style attributes."""

    shape_id = record.get("id")
    if not shape_id:
        raise ValidationError("record without an id")
    shape_id = str(shape_id)
    category = _category(record)
    try:
        points, pressure = _points(record)
        binding = _binding(record.get("binding") or record.get("constraint"), shape_id)
        formula = _formula(record)
        marker = _marker(record)
    except (KeyError, TypeError, ValueError) as exc:
        raise ValidationError(f"[shape {shape_id}] malformed record: {exc}") from exc

    style: Dict[str, Any] = dict(_STYLE_DEFAULTS)
    for key, value in record.items():
        if key not in _MODEL_KEYS:
            style[key] = value
    for key, default in _STYLE_DEFAULTS.items():
        if style.get(key) is None:
            style[key] = default

    font_size = record.get("fontSize")
    return Shape(
        id=shape_id,
        category=category,
        points=points,
        rotation=float(record.get("rotation") or 0.0),
        binding=binding,
        text=record.get("text"),
        font_size=float(font_size) if font_size else None,
        labels=tuple(record.get("labels") or ()),
        formula=formula,
        marker=marker,
        pressure=pressure,
        style=style,
    )


def _binding_record(binding: Binding) -> Dict[str, Any]:
    if isinstance(binding, OnEdge):
        return {
            "type": "on_edge",
            "parentId": binding.parent_id,
            "edgeIndex": binding.edge_index,
            "t": binding.t,
        }
    if isinstance(binding, OnPath):
        data: Dict[str, Any] = {"type": "on_path", "parentId": binding.parent_id}
        if binding.angle is not None:
            data["angle"] = binding.angle
        if binding.x is not None:
            data["x"] = binding.x
        return data
    return {"type": "points_link", "parents": list(binding.parent_ids)}


def shape_to_record(shape: Shape) -> Dict[str, Any]:
    record: Dict[str, Any] = {"id": shape.id, "category": shape.category.value}
    if shape.pressure:
        record["points"] = [
            {"x": x, "y": y, "p": p} for (x, y), p in zip(shape.points, shape.pressure)
        ]
    else:
        record["points"] = [{"x": x, "y": y} for x, y in shape.points]
    record["rotation"] = shape.rotation
    record.update(shape.style)
    if shape.binding is not None:
        record["binding"] = _binding_record(shape.binding)
    if shape.text is not None:
        record["text"] = shape.text
    if shape.font_size is not None:
        record["fontSize"] = shape.font_size
    if shape.labels:
        record["labels"] = list(shape.labels)
    if shape.formula is not None:
        f = shape.formula
        record["formula"] = {"kind": f.kind, "form": f.form, "a": f.a, "b": f.b, "c": f.c, "h": f.h, "k": f.k}
    if shape.marker is not None:
        record["marker"] = {
            "kind": shape.marker.kind,
            "targetId": shape.marker.target_id,
            "vertexIndices": list(shape.marker.vertex_indices),
        }
    return record


def shapes_from_records(records: Iterable[Mapping[str, Any]], validate: bool = True) -> List[Shape]:
    shapes = [shape_from_record(record) for record in records]
    if validate:
        validate_shapes(shapes)
    return shapes


def shapes_to_records(shapes: Sequence[Shape]) -> List[Dict[str, Any]]:
    return [shape_to_record(shape) for shape in shapes]


__all__ = [
    "shape_from_record",
    "shape_to_record",
    "shapes_from_records",
    "shapes_to_records",
]
