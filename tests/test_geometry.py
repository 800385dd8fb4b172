import numpy as np
import pytest

from ikebana_wall.geometry import (
    Point,
    Rect,
    clamp,
    cubic_point,
    cubic_tangent,
    point_inside_rect,
    sample_cubic,
)

P = (Point(0, 0), Point(10, 30), Point(40, 30), Point(50, 0))


def test_cubic_endpoints():
    assert cubic_point(*P, 0.0) == Point(0, 0)
    assert cubic_point(*P, 1.0) == Point(50, 0)


def test_cubic_midpoint_symmetric_curve():
    mid = cubic_point(*P, 0.5)
    assert mid.x == pytest.approx(25.0)
    assert mid.y == pytest.approx(22.5)


def test_tangent_at_ends():
    assert cubic_tangent(*P, 0.0) == Point(30, 90)
    assert cubic_tangent(*P, 1.0) == Point(30, -90)


def test_clamp():
    assert clamp(5, 0, 10) == 5
    assert clamp(-1, 0, 10) == 0
    assert clamp(11, 0, 10) == 10
    # hi wins when the range is inverted
    assert clamp(5, 10, 0) == 0


def test_point_inside_rect_inclusive():
    r = Rect(10, 20, 100, 50)
    assert r.right == 110 and r.bottom == 70
    assert point_inside_rect(10, 20, r)
    assert point_inside_rect(110, 70, r)
    assert not point_inside_rect(9.99, 30, r)
    assert not point_inside_rect(50, 70.01, r)


def test_sample_cubic_matches_point():
    pts = sample_cubic(*P, n=10)
    assert pts.shape == (11, 2)
    assert np.allclose(pts[0], [0, 0])
    assert np.allclose(pts[-1], [50, 0])
    assert np.allclose(pts[5], cubic_point(*P, 0.5))
