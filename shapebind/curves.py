"""Math-space viewport mapping and analytic curve helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .model import CurveFormula, Point


@dataclass(frozen=True)
class Viewport:
    """Screen <-> math mapping used by curves and grid snapping.

    Math space has its origin at ``(width / 2, origin_y)`` on screen (``origin_y``
    defaults to the vertical middle), x to the right and y up, measured in
    units of ``ppu`` pixels.
    """

    width: float
    height: float
    ppu: float
    origin_y: Optional[float] = None
    show_grid: bool = False

    @property
    def origin(self) -> Point:
        oy = self.origin_y if self.origin_y is not None else self.height / 2.0
        return self.width / 2.0, oy

    def to_math(self, p: Point) -> Point:
        if self.ppu <= 0:
            return 0.0, 0.0
        ox, oy = self.origin
        return (p[0] - ox) / self.ppu, -(p[1] - oy) / self.ppu

    def to_screen(self, p: Point) -> Point:
        ox, oy = self.origin
        return ox + p[0] * self.ppu, oy - p[1] * self.ppu


def pixels_per_unit(width: float, height: float, ticks: int = 5) -> float:
    """Scale that fits ``ticks`` unit steps into half the smaller canvas side."""

    if width <= 0 or height <= 0:
        return 40.0
    min_dimension = min(width, height)
    target = (min_dimension / 2.0) / (ticks or 5)
    min_ppu = 20.0
    max_ppu = min_dimension / 2.0
    return min(max(target, min_ppu), max(min_ppu, max_ppu))


def vertex_to_standard(a: float, h: float, k: float) -> Tuple[float, float]:
    """Standard-form ``(b, c)`` of ``a*(x - h)^2 + k``."""

    return -2.0 * a * h, a * h * h + k


def standard_to_vertex(a: float, b: float, c: float) -> Tuple[float, float]:
    """Vertex ``(h, k)`` of ``a*x^2 + b*x + c``; a flat parabola keeps its vertex at x = 0."""

    if a == 0:
        return 0.0, c
    h = -b / (2.0 * a)
    return h, c - a * h * h


def curve_point(formula: CurveFormula, x: float, viewport: Viewport) -> Point:
    """Screen position of the curve at math-space input ``x``."""

    return viewport.to_screen((x, formula.evaluate(x)))


def shift_curve(formula: CurveFormula, dx: float, dy: float) -> CurveFormula:
    """Translate a curve by ``(dx, dy)`` math units, keeping both forms consistent."""

    if formula.kind == "linear":
        return CurveFormula(
            kind=formula.kind,
            form=formula.form,
            a=formula.a,
            b=formula.b + dy - formula.k * dx,
            c=formula.c,
            h=formula.h,
            k=formula.k,
        )
    if formula.form == "vertex":
        h, k = formula.h, formula.k
    elif formula.a == 0:
        return CurveFormula(
            kind=formula.kind,
            form=formula.form,
            a=0.0,
            b=formula.b,
            c=formula.c + dy - formula.b * dx,
            h=formula.h + dx,
            k=formula.k + dy,
        )
    else:
        h, k = standard_to_vertex(formula.a, formula.b, formula.c)
    h += dx
    k += dy
    b, c = vertex_to_standard(formula.a, h, k)
    return CurveFormula(kind=formula.kind, form=formula.form, a=formula.a, b=b, c=c, h=h, k=k)


__all__ = [
    "Viewport",
    "pixels_per_unit",
    "vertex_to_standard",
    "standard_to_vertex",
    "curve_point",
    "shift_curve",
]
