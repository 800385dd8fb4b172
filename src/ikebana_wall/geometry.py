"""Bezier evaluation, clamping and hit-testing shared by placement and rendering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

import numpy as np


class Point(NamedTuple):
    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in screen coordinates (y grows downward)."""

    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height


def clamp(n: float, lo: float, hi: float) -> float:
    # hi wins when lo > hi (tiny stages)
    return min(hi, max(lo, n))


def point_inside_rect(x: float, y: float, rect: Rect) -> bool:
    """Inclusive bounds test."""
    return rect.left <= x <= rect.right and rect.top <= y <= rect.bottom


def cubic_point(p0: Point, p1: Point, p2: Point, p3: Point, t: float) -> Point:
    """Point on the cubic Bezier p0..p3 at parameter t in [0, 1]."""
    mt = 1.0 - t
    a = mt * mt * mt
    b = 3.0 * mt * mt * t
    c = 3.0 * mt * t * t
    d = t * t * t
    return Point(
        a * p0[0] + b * p1[0] + c * p2[0] + d * p3[0],
        a * p0[1] + b * p1[1] + c * p2[1] + d * p3[1],
    )


def cubic_tangent(p0: Point, p1: Point, p2: Point, p3: Point, t: float) -> Point:
    """First derivative of the cubic Bezier at t (not normalized)."""
    mt = 1.0 - t
    a = 3.0 * mt * mt
    b = 6.0 * mt * t
    c = 3.0 * t * t
    return Point(
        a * (p1[0] - p0[0]) + b * (p2[0] - p1[0]) + c * (p3[0] - p2[0]),
        a * (p1[1] - p0[1]) + b * (p2[1] - p1[1]) + c * (p3[1] - p2[1]),
    )


def sample_cubic(p0, p1, p2, p3, n: int = 24) -> np.ndarray:
    """Sample n+1 points along a cubic Bezier as an (n+1, 2) array."""
    t = np.linspace(0.0, 1.0, n + 1)[:, None]
    mt = 1.0 - t
    P = np.asarray([p0, p1, p2, p3], dtype=float)
    return (
        (mt**3) * P[0]
        + (3.0 * mt * mt * t) * P[1]
        + (3.0 * mt * t * t) * P[2]
        + (t**3) * P[3]
    )
