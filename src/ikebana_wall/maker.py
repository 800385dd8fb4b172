"""
Flower maker
------------
State behind the design panel: the current FlowerParams, seed, placement
height and season, plus the actions bound to its controls. Committed flowers
leave through the FlowerBus, either by send() or by dragging the preview
onto the wall (begin_drag()).
"""

from __future__ import annotations

import logging
import math
import random
import time
import uuid
from dataclasses import replace

from ikebana_wall.bus import FlowerBus
from ikebana_wall.config import (
    DEFAULT_PARAMS,
    DEFAULT_SEASON,
    DEFAULT_SEED,
    PLACEMENT_HEIGHT_RANGE,
    theme_for,
)
from ikebana_wall.geometry import Rect, clamp, point_inside_rect
from ikebana_wall.models import (
    DEFAULT_PLACEMENT_HEIGHT,
    PARAM_RANGES,
    Drop,
    FlowerParams,
    PostedFlower,
    Season,
)

logger = logging.getLogger(__name__)

MAX_SEED = 1_000_000_000


def new_flower_id() -> str:
    """Millisecond timestamp plus a random suffix."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}"


def _parse_number(raw) -> float | None:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


class FlowerMaker:
    def __init__(
        self,
        bus: FlowerBus,
        season: Season = DEFAULT_SEASON,
        rng: random.Random | None = None,
        params: FlowerParams = DEFAULT_PARAMS,
        seed: int = DEFAULT_SEED,
    ):
        self.bus = bus
        self.rng = rng or random.Random()
        self.params = params.clamped()
        self.seed = seed
        self.placement_height = DEFAULT_PLACEMENT_HEIGHT
        self.season = season
        self.set_season(season)

    # ---------------------- controls ----------------------
    def set_param(self, name: str, raw) -> bool:
        """
        Apply a control value. Text that is not a finite number is ignored
        (returns False, previous value kept); numbers are clamped to the
        control's range. Unknown names raise KeyError.
        """
        if name != "placement_height" and name not in PARAM_RANGES:
            raise KeyError(f"Unknown flower parameter: {name}")
        value = _parse_number(raw)
        if value is None:
            logger.debug("ignored %s=%r", name, raw)
            return False
        if name == "placement_height":
            lo, hi, _ = PLACEMENT_HEIGHT_RANGE
            self.placement_height = clamp(value, lo, hi)
            return True
        lo, hi, _ = PARAM_RANGES[name]
        self.params = self.params.with_value(name, clamp(value, lo, hi))
        return True

    def set_season(self, season: Season | str) -> None:
        """Switch season; the flower hue jumps to the season's hue."""
        self.season = Season(season)
        self.params = replace(self.params, hue=theme_for(self.season).flower_hue)

    def set_seed(self, seed: int) -> None:
        self.seed = int(seed)

    def randomize_seed(self) -> int:
        self.seed = int(self.rng.random() * MAX_SEED)
        return self.seed

    def randomize_all(self) -> FlowerParams:
        """New random design around the current hue, and a new seed."""
        r = self.rng.random
        self.params = FlowerParams(
            petal_count=int(5 + r() * 14),
            radius=float(int(80 + r() * 70)),
            roundness=r() * 0.9,
            curl=r() * 0.75,
            hue=(self.params.hue + (r() - 0.5) * 40) % 360,
            saturation=r() * 80,
            lightness=float(int(55 + r() * 38)),
            sway_amp=float(int(r() * 18)),
            sway_freq=r(),
        ).clamped()
        self.randomize_seed()
        return self.params

    # ---------------------- posting ----------------------
    def build(self, drop: Drop | None = None) -> PostedFlower:
        return PostedFlower(
            id=new_flower_id(),
            seed=self.seed,
            params=self.params,
            drop=drop,
            placement_height=self.placement_height,
            season=self.season,
        )

    def send(self, drop: Drop | None = None) -> PostedFlower:
        """Broadcast the current design to the wall."""
        flower = self.build(drop)
        self.bus.post(flower)
        logger.debug("sent %s (seed=%d, drop=%s)", flower.id, flower.seed, drop)
        return flower

    def begin_drag(self, x: float, y: float, target: Rect | None) -> DragGesture:
        return DragGesture(self, target, x, y)


class DragGesture:
    """
    One pointer drag of the preview toward the wall.

    `valid` tracks whether the pointer is over the target. release() ends the
    gesture and posts at most once, with the drop point converted to
    target-local coordinates. After release (or cancel) the gesture is inert.
    """

    def __init__(self, maker: FlowerMaker, target: Rect | None, x: float, y: float):
        self.maker = maker
        self.target = target
        self.active = True
        self.x = x
        self.y = y
        self.valid = self._over_target(x, y)

    def _over_target(self, x: float, y: float) -> bool:
        return self.target is not None and point_inside_rect(x, y, self.target)

    def move(self, x: float, y: float) -> bool:
        if self.active:
            self.x, self.y = x, y
            self.valid = self._over_target(x, y)
        return self.valid

    def cancel(self) -> None:
        self.active = False
        self.valid = False

    def release(self, x: float, y: float) -> PostedFlower | None:
        if not self.active:
            return None
        self.active = False
        self.x, self.y = x, y
        self.valid = False
        if not self._over_target(x, y):
            return None
        t = self.target
        drop = Drop(
            x=clamp(x - t.left, 0.0, t.width),
            y=clamp(y - t.top, 0.0, t.height),
        )
        return self.maker.send(drop)
