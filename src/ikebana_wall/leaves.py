"""
Leaf generation and leaf geometry
---------------------------------
generate_leaves() runs inside placement and decides how many leaves a stem
gets, of which kind, and where along the stem (Bezier parameter t) they
attach. The base of each stem stays clean: no leaf attaches below t=0.2.

The geometry helpers turn a stored leaf into matplotlib Paths in the leaf's
local frame (x along the leaf, origin at the attachment point) plus the
frame itself (position and angle on the stem), for render.py to draw.
"""

from __future__ import annotations

import math
from collections.abc import Callable

from matplotlib.path import Path as MplPath

from ikebana_wall.geometry import clamp, cubic_point, cubic_tangent
from ikebana_wall.models import BladeLeaf, ComposedFlower, Leaf, Leaflet, SprigLeaf

Rng = Callable[[], float]

# chance of the long accent blade, by role (shin, soe, hikae)
LONG_LEAF_CHANCE = (0.35, 0.55, 0.5)
SPRIG_CHANCE = 0.4
MIN_T = 0.2
LEAF_T_RANGE = (0.02, 0.98)


# ---------------------- Generation ----------------------
def _side(rng: Rng, previous: int | None) -> int:
    flip = 1 if rng() > 0.5 else -1
    return flip if previous is None else -previous


def _sprig(rng: Rng, t: float, side: int, opacity: float) -> SprigLeaf:
    length = 44 + rng() * 80
    count = 5 + int(math.floor(rng() * 4))
    leaflets = []
    for _ in range(count):
        at = clamp(0.22 + rng() * 0.7, 0.12, 0.95) * length
        ang = side * (35 + rng() * 40) * (1 if rng() > 0.22 else -1)
        leaflets.append(Leaflet(at=at, angle_deg=ang, length=7 + rng() * 10))
    return SprigLeaf(
        t=t,
        side=side,
        length=length,
        width=2.5 + rng() * 2.5,
        rotate_deg=(rng() - 0.5) * 14,
        offset=4 + rng() * 7,
        opacity=opacity * 0.85,
        leaflets=tuple(leaflets),
    )


def generate_leaves(rng: Rng, role: int) -> tuple[Leaf, ...]:
    """
    Leaves for one stem, in attachment order.

    Shin (role 0) is kept sparse with one or two extra leaves; soe and hikae
    get two or three. The first leaf picks its side from rng, every later
    leaf goes to the opposite side of the one before it.
    """
    leaves: list[Leaf] = []
    side: int | None = None

    if rng() < LONG_LEAF_CHANCE[role]:
        t = clamp(0.24 + rng() * 0.2, MIN_T, 0.55)
        side = _side(rng, side)
        leaves.append(
            BladeLeaf(
                t=t,
                side=side,
                length=90 + rng() * 140,
                width=8 + rng() * 9,
                rotate_deg=(rng() - 0.5) * 18,
                offset=5 + rng() * 8,
                opacity=0.22 + rng() * 0.12,
            )
        )

    extra = (1 if role == 0 else 2) + int(math.floor(rng() * 2))
    for _ in range(extra):
        side = _side(rng, side)
        t = clamp(0.32 + rng() * 0.54, MIN_T, 0.92)
        is_sprig = rng() < SPRIG_CHANCE
        opacity = 0.16 + rng() * 0.15
        if is_sprig:
            leaves.append(_sprig(rng, t, side, opacity))
        else:
            leaves.append(
                BladeLeaf(
                    t=t,
                    side=side,
                    length=36 + rng() * 88,
                    width=5 + rng() * 7,
                    rotate_deg=(rng() - 0.5) * 22,
                    offset=4 + rng() * 7,
                    opacity=opacity,
                )
            )
    return tuple(leaves)


# ---------------------- Geometry ----------------------
def leaf_frame(flower: ComposedFlower, leaf: Leaf) -> tuple[float, float, float]:
    """
    Attachment frame of a leaf: (x, y, angle_rad) in wall coordinates.

    The leaf sits on the stem at parameter t, pushed out along the side's
    normal by leaf.offset and turned away from the tangent by about 56 deg.
    """
    p0, p1, p2, p3 = flower.control_points()
    t = clamp(leaf.t, *LEAF_T_RANGE)
    pos = cubic_point(p0, p1, p2, p3, t)
    tan = cubic_tangent(p0, p1, p2, p3, t)
    ang = math.atan2(tan.y, tan.x)
    n_len = math.hypot(tan.x, tan.y) or 1.0
    nx = (-tan.y / n_len) * leaf.side
    ny = (tan.x / n_len) * leaf.side
    x = pos.x + nx * leaf.offset
    y = pos.y + ny * leaf.offset
    leaf_ang = ang + (leaf.side * math.pi / 2.0) * 0.62 + math.radians(leaf.rotate_deg)
    return x, y, leaf_ang


def _cubic_path(start, segments, close: bool = False) -> MplPath:
    verts = [start]
    codes = [MplPath.MOVETO]
    for c1, c2, end in segments:
        verts.extend([c1, c2, end])
        codes.extend([MplPath.CURVE4] * 3)
    if close:
        verts.append(start)
        codes.append(MplPath.CLOSEPOLY)
    return MplPath(verts, codes)


def blade_path(leaf: BladeLeaf, t: float) -> MplPath:
    """Closed lens-shaped outline, bent toward the leaf's side mid-stem."""
    L = leaf.length
    W = leaf.width
    bend = math.sin(clamp(t, *LEAF_T_RANGE) * math.pi) * leaf.side
    c0 = bend * W * 0.05
    c1 = bend * W * 0.22
    c2 = bend * W * 0.18
    c_tip = bend * W * 0.12
    tip = max(1.6, W * 0.28)
    return _cubic_path(
        (0.0, 0.0),
        [
            ((L * 0.16, c0 - W * 0.85), (L * 0.44, c1 - W * 1.25), (L * 0.72, c2 - W * 0.62)),
            ((L * 0.88, c2 - W * 0.28), (L * 0.96, c_tip - tip * 0.25), (L, c_tip)),
            ((L * 0.96, c_tip + tip * 0.25), (L * 0.88, c2 + W * 0.28), (L * 0.72, c2 + W * 0.62)),
            ((L * 0.44, c1 + W * 1.05), (L * 0.16, c0 + W * 0.75), (0.0, 0.0)),
        ],
        close=True,
    )


def vein_path(leaf: BladeLeaf, t: float) -> MplPath:
    """Centre vein from the attachment point to the blade tip."""
    L = leaf.length
    W = leaf.width
    bend = math.sin(clamp(t, *LEAF_T_RANGE) * math.pi) * leaf.side
    c0 = bend * W * 0.05
    c2 = bend * W * 0.18
    c_tip = bend * W * 0.12
    return _cubic_path((0.0, 0.0), [((L * 0.28, c0 - W * 0.08), (L * 0.62, c2 + W * 0.04), (L, c_tip))])


def sprig_paths(leaf: SprigLeaf) -> list[MplPath]:
    """Backbone curve followed by one straight segment per leaflet."""
    L = leaf.length
    W = leaf.width
    paths = [_cubic_path((0.0, 0.0), [((L * 0.42, -W * 0.8), (L * 0.76, W * 0.8), (L, 0.0))])]
    for lf in leaf.leaflets:
        a = math.radians(lf.angle_deg)
        end = (lf.at + math.cos(a) * lf.length, math.sin(a) * lf.length)
        paths.append(MplPath([(lf.at, 0.0), end], [MplPath.MOVETO, MplPath.LINETO]))
    return paths


def leaf_paths(leaf: Leaf) -> dict[str, list[MplPath]]:
    """
    All local paths of a leaf keyed by role: "fill", "vein" for blades,
    "line" for sprigs. Unknown leaf kinds are rejected.
    """
    match leaf:
        case BladeLeaf():
            return {"fill": [blade_path(leaf, leaf.t)], "vein": [vein_path(leaf, leaf.t)]}
        case SprigLeaf():
            return {"line": sprig_paths(leaf)}
        case _:
            raise TypeError(f"Unknown leaf kind: {type(leaf).__name__}")
