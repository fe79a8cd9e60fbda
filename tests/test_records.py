import pytest

from shapebind import (
    CurveFormula,
    MarkerConfig,
    OnEdge,
    OnPath,
    PointsLink,
    ShapeCategory,
    ValidationError,
    shape_from_record,
    shape_to_record,
    shapes_from_records,
    shapes_to_records,
)


RECORDS = [
    {"id": "t1", "category": "triangle", "points": [{"x": 0, "y": 0}, {"x": 100, "y": 0}, {"x": 0, "y": 100}]},
    {
        "id": "p1",
        "category": "point",
        "points": [{"x": 50, "y": 0}],
        "labels": ["A"],
        "binding": {"type": "on_edge", "parentId": "t1", "edgeIndex": 0, "t": 0.5},
    },
    {"id": "p2", "category": "point", "points": [{"x": 200, "y": 200}]},
    {
        "id": "s1",
        "category": "segment",
        "points": [{"x": 50, "y": 0}, {"x": 0, "y": 0}],
        "binding": {"type": "points_link", "parents": ["p1", None]},
    },
    {"id": "c1", "category": "circle", "points": [{"x": 0, "y": 0}, {"x": 100, "y": 100}], "rotation": 15},
    {
        "id": "p3",
        "category": "point",
        "points": [{"x": 100, "y": 50}],
        "binding": {"type": "on_path", "parentId": "c1", "angle": 0},
    },
    {"id": "f1", "category": "curve", "formula": {"kind": "quadratic", "form": "vertex", "a": 2, "h": 1, "k": -3}},
    {"id": "x1", "category": "text", "points": [{"x": 10, "y": 40}], "text": "Hello", "fontSize": 24},
    {
        "id": "m1",
        "category": "marker",
        "marker": {"kind": "angle_arc", "targetId": "t1", "vertexIndices": [2, 0, 1]},
    },
    {
        "id": "h1",
        "category": "freehand",
        "points": [{"x": 0, "y": 0, "p": 0.5}, {"x": 4, "y": 3, "p": 0.7}],
        "strokeWidth": 3,
        "layer": "ink",
    },
]


def test_records_survive_a_round_trip():
    shapes = shapes_from_records(RECORDS)

    again = shapes_from_records(shapes_to_records(shapes))

    assert again == shapes


def test_records_decode_into_model_types():
    shapes = {s.id: s for s in shapes_from_records(RECORDS)}

    assert shapes["p1"].binding == OnEdge("t1", 0, 0.5)
    assert shapes["p1"].labels == ("A",)
    assert shapes["s1"].binding == PointsLink(("p1", None))
    assert shapes["p3"].binding == OnPath("c1", angle=0.0)
    assert shapes["c1"].rotation == 15
    assert shapes["f1"].formula == CurveFormula(kind="quadratic", form="vertex", a=2, h=1, k=-3)
    assert shapes["x1"].font_size == 24
    assert shapes["m1"].marker == MarkerConfig("angle_arc", "t1", (2, 0, 1))
    assert shapes["h1"].pressure == (0.5, 0.7)


def test_style_defaults_and_unknown_keys_are_kept():
    shape = shape_from_record(RECORDS[-1])

    assert shape.style["strokeWidth"] == 3
    assert shape.style["fill"] == "transparent"
    assert shape.style["stroke"] == "#000000"
    assert shape.style["strokeType"] == "solid"
    assert shape.style["layer"] == "ink"
    assert shape_to_record(shape)["layer"] == "ink"

    unset = shape_from_record({"id": "r", "category": "rectangle", "points": [[0, 0], [1, 1]], "fill": None})
    assert unset.style["fill"] == "transparent"


def test_falsy_style_values_survive_a_round_trip():
    record = {
        "id": "a",
        "category": "point",
        "points": [{"x": 0, "y": 0}],
        "strokeWidth": 0,
        "fill": "",
    }

    shape = shape_from_record(record)
    assert shape.style["strokeWidth"] == 0
    assert shape.style["fill"] == ""

    written = shape_to_record(shape)
    assert written["strokeWidth"] == 0
    assert written["fill"] == ""


def test_partial_pressure_is_dropped():
    shape = shape_from_record(
        {"id": "h", "category": "freehand", "points": [{"x": 0, "y": 0, "p": 0.5}, {"x": 1, "y": 1}]}
    )

    assert shape.pressure == ()
    assert "p" not in shape_to_record(shape)["points"][0]


def test_legacy_record_keys_are_understood():
    segment = shape_from_record(
        {
            "id": "s",
            "type": "LINE",
            "points": [{"x": 0, "y": 0}, {"x": 10, "y": 0}],
            "constraint": {"type": "points_link", "parentId": "p"},
        }
    )
    assert segment.category is ShapeCategory.SEGMENT
    assert segment.binding == PointsLink(("p",))

    point = shape_from_record(
        {
            "id": "q",
            "type": "point",
            "points": [{"x": 5, "y": 0}],
            "constraint": {"type": "on_edge", "parentId": "s", "edgeIndex": 0, "paramT": 0.5},
        }
    )
    assert point.binding == OnEdge("s", 0, 0.5)

    curve = shape_from_record(
        {
            "id": "g",
            "type": "function_graph",
            "functionType": "linear",
            "formulaParams": {"k": 2, "b": 1},
        }
    )
    assert curve.category is ShapeCategory.CURVE
    assert curve.formula == CurveFormula.linear(2, 1)

    marker = shape_from_record(
        {
            "id": "m",
            "type": "marker",
            "markerConfig": {"type": "perpendicular", "targets": [{"shapeId": "r", "pointIndices": [3, 0, 1]}]},
        }
    )
    assert marker.marker == MarkerConfig("perpendicular", "r", (3, 0, 1))

    assert "type" not in shape_to_record(segment)


def test_malformed_records_raise_validation_error():
    with pytest.raises(ValidationError, match="unknown category"):
        shape_from_record({"id": "z", "category": "hexagon", "points": []})
    with pytest.raises(ValidationError, match=r"\[shape q\]"):
        shape_from_record(
            {"id": "q", "category": "point", "points": [{"x": 1, "y": 1}], "binding": {"type": "on_edge", "parentId": "s"}}
        )
    with pytest.raises(ValidationError, match="malformed"):
        shape_from_record({"id": "q", "category": "point", "points": [{"x": 1}]})
    with pytest.raises(ValidationError):
        shape_from_record({"category": "point", "points": [[0, 0]]})


def test_collections_are_validated_unless_disabled():
    records = [RECORDS[2], dict(RECORDS[2])]

    with pytest.raises(ValidationError, match="duplicate"):
        shapes_from_records(records)
    assert len(shapes_from_records(records, validate=False)) == 2
