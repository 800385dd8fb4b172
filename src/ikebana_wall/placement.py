"""
Placement engine (Shin / Soe / Hikae)
-------------------------------------
Turns each posted flower into a composed one: stem base on the kenzan, tip
position, S-curved Bezier stem, stem colour/width, leaves and a small
decorative tilt. Three roles cycle through the composition:

    role 0  shin   tallest, thinnest, nearly vertical   (len 0.66, 12 deg)
    role 1  soe    medium, wide angle                   (len 0.50, 40 deg)
    role 2  hikae  shortest, angled to the other side   (len 0.38, 68 deg)

Angles are mirrored by `open_side`, chosen once per session on the first
flower, so the composition keeps one consistent front.

Role index policy: only the two most recent flowers count as context once
three or more are on the wall, so idx runs 0, 1, 2, 2, 2, ... The wall
itself keeps every flower; the window only feeds idx.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable

from ikebana_wall.geometry import clamp
from ikebana_wall.leaves import generate_leaves
from ikebana_wall.models import (
    DEFAULT_PLACEMENT_HEIGHT,
    ComposedFlower,
    PostedFlower,
    Stage,
)
from ikebana_wall.rng import create_rng, mix_seed

logger = logging.getLogger(__name__)

SLOT_SALT = 0x9E3779B9
CONTEXT_WINDOW = 2

ROLE_NAMES = ("shin", "soe", "hikae")
ROLE_LENGTH = (0.66, 0.5, 0.38)
ROLE_ANGLE_DEG = (-12.0, 40.0, -68.0)
ROLE_SPRITE_SCALE = (0.58, 0.72, 0.86)
ROLE_STEM_LIGHTNESS = (62.0, 54.0, 48.0)
ROLE_STEM_WIDTH = (2.4, 2.0, 1.8)

# tip margins inside the stage
MARGIN_X = 60.0
MARGIN_TOP = 70.0
MARGIN_BOTTOM = 210.0
KENZAN_LIFT = 86.0  # stem base distance above the stage bottom
MIN_LENGTH_RATIO = 0.42
HEIGHT_NUDGE = 110.0


def window_index(count: int) -> int:
    """Role slot for the next flower given how many are already placed."""
    return count if count < 3 else CONTEXT_WINDOW


def height_scale(height01: float) -> float:
    return 0.78 + height01 * 0.62


class PlacementEngine:
    """
    Stateful composer for one wall session.

    State: the composed flowers (append-only), `open_side` (+1/-1) and
    `has_side`. reset() is the only way anything is removed.
    """

    def __init__(self, stage: Stage | None = None, clock: Callable[[], float] = time.perf_counter):
        self.stage = stage or Stage()
        self.clock = clock
        self.open_side = 1
        self.has_side = False
        self._flowers: list[ComposedFlower] = []

    @property
    def flowers(self) -> tuple[ComposedFlower, ...]:
        return tuple(self._flowers)

    def __len__(self) -> int:
        return len(self._flowers)

    def resize(self, width: float | None, height: float | None) -> None:
        self.stage = Stage.from_size(width, height)

    def reset(self) -> None:
        """Clear the composition and forget the chosen open side."""
        n = len(self._flowers)
        self._flowers.clear()
        self.has_side = False
        self.open_side = 1
        logger.debug("composition reset (%d flowers removed)", n)

    def place(self, f: PostedFlower) -> ComposedFlower:
        """Compute geometry for f, append it and return the composed flower."""
        composed = self._compose(f, window_index(len(self._flowers)))
        self._flowers.append(composed)
        logger.debug(
            "placed %s as %s at (%.1f, %.1f)", f.id, ROLE_NAMES[composed.role], composed.x, composed.y
        )
        return composed

    # ---------------------- geometry ----------------------
    def _compose(self, f: PostedFlower, idx: int) -> ComposedFlower:
        width, height = self.stage.width, self.stage.height
        cx = width / 2.0
        rng = create_rng(mix_seed(f.seed, idx * SLOT_SALT))

        if not self.has_side:
            self.open_side = 1 if rng() > 0.5 else -1
            self.has_side = True
        side = self.open_side

        role = idx % 3
        role_len = ROLE_LENGTH[role]
        base_dir_deg = ROLE_ANGLE_DEG[role] * -side
        ph = DEFAULT_PLACEMENT_HEIGHT if f.placement_height is None else f.placement_height
        height01 = clamp(ph, 0.0, 1.0)
        h_scale = height_scale(height01)

        base_offset_x = (-2.0, 10.0 * -side, 8.0 * -side)[role]
        base_x = cx + base_offset_x + (rng() - 0.5) * 38 - side * 18
        base_y = height - KENZAN_LIFT + (rng() - 0.5) * 10

        nominal_length = height * role_len * (0.9 + rng() * 0.18) * h_scale
        dir_deg = base_dir_deg + (rng() - 0.5) * 16
        theta = math.radians(-90.0 + dir_deg)
        nom_ux, nom_uy = math.cos(theta), math.sin(theta)

        drop = f.drop
        x = drop.x if drop else base_x + nom_ux * nominal_length
        y = drop.y if drop else base_y + nom_uy * nominal_length
        x, y = self._clamp_tip(x, y)

        vx, vy = x - base_x, y - base_y
        v_len = math.hypot(vx, vy) or 1.0
        min_len = height * role_len * MIN_LENGTH_RATIO * h_scale
        stem_len = max(v_len, min_len) if drop else v_len
        ux, uy = (vx / v_len, vy / v_len) if drop else (nom_ux, nom_uy)

        if not drop:
            along = (height01 - DEFAULT_PLACEMENT_HEIGHT) * HEIGHT_NUDGE
            x, y = self._clamp_tip(x + ux * along, y + uy * along)
        elif stem_len != v_len:
            x, y = self._clamp_tip(base_x + ux * stem_len, base_y + uy * stem_len)

        # S-curve: c1 bows to one side, c2 partly back
        px, py = -uy, ux
        curve_sign = (1 if rng() > 0.5 else -1) * (-1 if role == 1 else 1)
        curve_amp = stem_len * (0.09 + rng() * 0.06) * curve_sign
        c1x = base_x + ux * (stem_len * 0.33) + px * curve_amp
        c1y = base_y + uy * (stem_len * 0.33) + py * curve_amp
        c2x = base_x + ux * (stem_len * 0.66) - px * curve_amp * 0.7
        c2y = base_y + uy * (stem_len * 0.66) - py * curve_amp * 0.7

        stem_lightness = ROLE_STEM_LIGHTNESS[role] + rng() * 10
        stem_width = ROLE_STEM_WIDTH[role] + rng() * 0.9
        scale = ROLE_SPRITE_SCALE[role] * (0.9 + rng() * 0.2)

        leaves = generate_leaves(rng, role)

        tilt_x = (rng() - 0.5) * 16
        tilt_y = (rng() - 0.5) * 22
        tilt_z = (rng() - 0.5) * 14

        return ComposedFlower(
            id=f.id,
            seed=f.seed,
            params=f.params,
            drop=f.drop,
            placement_height=f.placement_height,
            season=f.season,
            role=role,
            x=x,
            y=y,
            scale=scale,
            born=self.clock(),
            base_x=base_x,
            base_y=base_y,
            c1x=c1x,
            c1y=c1y,
            c2x=c2x,
            c2y=c2y,
            stem_width=stem_width,
            stem_hue=0.0,
            stem_saturation=0.0,
            stem_lightness=stem_lightness,
            leaves=leaves,
            tilt_x=tilt_x,
            tilt_y=tilt_y,
            tilt_z=tilt_z,
        )

    def _clamp_tip(self, x: float, y: float) -> tuple[float, float]:
        w, h = self.stage.width, self.stage.height
        return (
            clamp(x, MARGIN_X, w - MARGIN_X),
            clamp(y, MARGIN_TOP, h - MARGIN_BOTTOM),
        )
