import pytest

from shapebind import (
    CurveFormula,
    MarkerConfig,
    OnEdge,
    OnPath,
    PointsLink,
    Shape,
    ShapeCategory,
    ValidationError,
    validate_shapes,
)


def _triangle(sid="t"):
    return Shape(sid, ShapeCategory.TRIANGLE, ((0, 0), (100, 0), (0, 100)))


def test_valid_figure_passes():
    shapes = [
        _triangle(),
        Shape("p", ShapeCategory.POINT, ((50, 0),), binding=OnEdge("t", 0, 0.5)),
        Shape("q", ShapeCategory.POINT, ((0, 0),)),
        Shape("s", ShapeCategory.SEGMENT, ((50, 0), (0, 0)), binding=PointsLink(("p", "q"))),
        Shape("f", ShapeCategory.CURVE, formula=CurveFormula(a=1.0)),
        Shape("m", ShapeCategory.MARKER, marker=MarkerConfig("angle_arc", "t", (2, 0, 1))),
    ]

    validate_shapes(shapes)


def test_missing_parent_is_not_an_error():
    validate_shapes([Shape("p", ShapeCategory.POINT, ((1, 1),), binding=OnEdge("gone", 0, 0.5))])


@pytest.mark.parametrize(
    "shapes, message",
    [
        ([_triangle(), _triangle()], "duplicate id"),
        ([Shape("t", ShapeCategory.TRIANGLE, ((0, 0), (1, 0)))], "at least 3"),
        ([Shape("t", ShapeCategory.TRIANGLE, ((0, 0), (1, 0), (0, 1), (1, 1)))], "exactly 3"),
        ([Shape("h", ShapeCategory.FREEHAND, ((0, 0), (1, 1)), pressure=(0.5,))], "pressure"),
        ([Shape("f", ShapeCategory.CURVE)], "without a formula"),
        ([Shape("f", ShapeCategory.CURVE, formula=CurveFormula(kind="cubic"))], "quadratic|linear"),
        ([Shape("m", ShapeCategory.MARKER, marker=MarkerConfig("angle_arc", "m", (0, 1, 2)))], "itself"),
        ([Shape("m", ShapeCategory.MARKER, marker=MarkerConfig("angle_arc", "t", (0, 1)))], "three"),
        ([Shape("x", ShapeCategory.TEXT, ((0, 0),), text="a", font_size=-1)], "font size"),
        ([Shape("p", ShapeCategory.POINT, ((0, 0),), binding=PointsLink(("q",)))], "segments only"),
        ([Shape("s", ShapeCategory.SEGMENT, ((0, 0), (1, 0)), binding=PointsLink(("s",)))], "itself"),
        ([Shape("s", ShapeCategory.SEGMENT, ((0, 0), (1, 0)), binding=PointsLink(()))], "one or two"),
        ([Shape("p", ShapeCategory.POINT, ((0, 0),), binding=OnEdge("p", 0, 0.5))], "itself"),
        ([Shape("p", ShapeCategory.POINT, ((0, 0),), binding=OnEdge("t", -1, 0.5))], "non-negative"),
        ([Shape("p", ShapeCategory.POINT, ((0, 0),), binding=OnPath("c"))], "angle or an x"),
    ],
)
def test_invalid_shapes_are_rejected(shapes, message):
    with pytest.raises(ValidationError) as excinfo:
        validate_shapes(shapes)
    assert message in str(excinfo.value)


def test_error_names_the_shape():
    with pytest.raises(ValidationError, match=r"^\[shape t\]"):
        validate_shapes([Shape("t", ShapeCategory.TRIANGLE, ((0, 0),))])
