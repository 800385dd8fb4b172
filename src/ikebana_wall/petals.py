"""
Petal and stamen drawing
------------------------
Draws one petal (a two-curve wedge from the flower centre) and the stamen
dots in the middle. Layer order of a petal, bottom to top:

    offset shadow -> radial body gradient -> screen highlight wash
    -> soft-light shading along the petal -> translucent rim stroke

`depth` scales shadow and shading strength: previews use a flat 0.7, wall
sprites a stronger 1.15.
"""

from __future__ import annotations

import math
from collections.abc import Callable

from ikebana_wall.canvas import (
    Canvas,
    CanvasPath,
    LinearGradient,
    RadialGradient,
    hsla,
    rgba,
)

Rng = Callable[[], float]


def petal_path(radius: float, roundness: float, curl: float, rng: Rng) -> tuple[CanvasPath, float]:
    """
    Build the petal outline in the petal's own frame (pointing along +x).

    Returns (path, r2) where r2 is the tip distance. Draw order from rng is
    fixed: r2 jitter, wobble, edge, then the four control-point jitters.
    """
    r1 = radius * (0.38 + roundness * 0.42)
    r2 = radius * (0.92 + rng() * 0.05)
    wobble = (rng() - 0.5) * curl * radius * 0.16
    edge = (rng() - 0.5) * curl * radius * 0.05

    path = CanvasPath()
    path.move_to(0.0, 0.0)
    path.bezier_curve_to(
        r1,
        -radius * (0.14 + rng() * 0.04) + wobble,
        r2 * (0.42 + rng() * 0.06),
        -radius * 0.06 + wobble + edge,
        r2,
        0.0,
    )
    path.bezier_curve_to(
        r2 * (0.42 + rng() * 0.06),
        radius * 0.06 - wobble + edge,
        r1,
        radius * (0.14 + rng() * 0.04) - wobble,
        0.0,
        0.0,
    )
    path.close()
    return path, r2


def draw_petal(
    ctx: Canvas,
    angle: float,
    radius: float,
    roundness: float,
    curl: float,
    hue: float,
    saturation: float,
    lightness: float,
    rng: Rng,
    depth: float = 1.0,
) -> None:
    """Draw one petal rotated by angle (radians) around the current origin."""
    path, r2 = petal_path(radius, roundness, curl, rng)

    ctx.save()
    ctx.rotate(angle)

    # shadow
    ctx.save()
    ctx.translate(-2.2 * depth, 2.6 * depth)
    ctx.fill(path, rgba(0, 0, 0, 0.16 * depth))
    ctx.restore()

    # body: lighter centre -> base colour -> darker, hue-shifted rim
    body = RadialGradient(0.0, 0.0, 0.0, r2 * 0.5, 0.0, r2)
    body.add_color_stop(0.0, hsla(hue, min(100, saturation + 6), min(96, lightness + 18)))
    body.add_color_stop(0.5, hsla(hue, saturation, lightness))
    body.add_color_stop(
        1.0, hsla((hue + 20) % 360, max(0, saturation - 10), max(0, lightness - 22))
    )
    ctx.fill(path, body)

    # highlight wash
    wash = RadialGradient(r2 * 0.28, 0.0, 0.0, r2 * 0.28, 0.0, r2 * 0.55)
    wash.add_color_stop(
        0.0,
        hsla((hue + 60) % 360, min(100, saturation + 20), min(100, lightness + 30), 0.5),
    )
    wash.add_color_stop(1.0, (0.0, 0.0, 0.0, 0.0))
    ctx.save()
    ctx.composite_op = "screen"
    ctx.fill(path, wash)
    ctx.restore()

    # shading along the length suggests curvature
    shade = LinearGradient(0.0, 0.0, r2, 0.0)
    shade.add_color_stop(0.0, rgba(0, 0, 0, 0.18 * depth))
    shade.add_color_stop(0.35, rgba(255, 255, 255, 0.1 * depth))
    shade.add_color_stop(0.75, rgba(255, 255, 255, 0.04 * depth))
    shade.add_color_stop(1.0, rgba(255, 255, 255, 0.0))
    ctx.save()
    ctx.composite_op = "soft-light"
    ctx.fill(path, shade)
    ctx.restore()

    # rim
    rim = hsla(hue, min(100, saturation + 8), min(98, lightness + 12), 0.22)
    ctx.stroke(path, rim, line_width=1.1 + depth * 0.35)

    ctx.restore()


def draw_stamens(ctx: Canvas, radius: float, lightness: float, rng: Rng) -> int:
    """Scatter 10-17 soft dots within radius, additively blended. Returns the dot count."""
    ctx.save()
    ctx.composite_op = "lighter"
    count = 10 + int(math.floor(rng() * 8))
    for i in range(count):
        a = (i / count) * math.pi * 2.0 + rng() * 0.4
        r = radius * (0.2 + rng() * 0.85)
        x = math.cos(a) * r
        y = math.sin(a) * r
        dot_r = 1.1 + rng() * 1.8
        light = min(96.0, lightness + 10 + rng() * 12)
        ctx.fill_circle(x, y, dot_r, hsla(0, 0, light, 0.32 + rng() * 0.22))
    ctx.restore()
    return count
