"""
Data models
-----------
Value types flowing from the maker panel, over the bus, into the wall.

FlowerParams    slider state of one flower design
PostedFlower    what the maker broadcasts when a flower is committed
ComposedFlower  posted flower + placement geometry computed by the wall
BladeLeaf / SprigLeaf  the two leaf shapes (a closed union, see Leaf)

All records are frozen: once posted or composed they never change.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, replace
from enum import Enum

from ikebana_wall.geometry import Point, clamp

DEFAULT_PLACEMENT_HEIGHT = 0.62
DEFAULT_STAGE_WIDTH = 800.0
DEFAULT_STAGE_HEIGHT = 700.0


class Season(str, Enum):
    SPRING = "spring"
    SUMMER = "summer"
    AUTUMN = "autumn"
    WINTER = "winter"


# (min, max, step) as exposed by the maker sliders
PARAM_RANGES: dict[str, tuple[float, float, float]] = {
    "petal_count": (3, 24, 1),
    "radius": (60, 150, 1),
    "roundness": (0.0, 1.0, 0.01),
    "curl": (0.0, 1.0, 0.01),
    "hue": (0, 360, 1),
    "saturation": (0, 100, 1),
    "lightness": (0, 100, 1),
    "sway_amp": (0, 30, 1),
    "sway_freq": (0.0, 1.0, 0.01),
}


@dataclass(frozen=True)
class FlowerParams:
    """Shape and colour parameters for one flower."""

    petal_count: int = 7
    radius: float = 115.0
    roundness: float = 0.72
    curl: float = 0.22
    hue: float = 0.0
    saturation: float = 0.0
    lightness: float = 86.0
    sway_amp: float = 8.0  # degrees
    sway_freq: float = 0.25

    def clamped(self) -> FlowerParams:
        """Return a copy with every field pulled into its slider range."""
        vals = {}
        for name, (lo, hi, _step) in PARAM_RANGES.items():
            vals[name] = clamp(float(getattr(self, name)), lo, hi)
        vals["petal_count"] = int(round(vals["petal_count"]))
        return FlowerParams(**vals)

    def with_value(self, name: str, value: float) -> FlowerParams:
        if name not in PARAM_RANGES:
            raise KeyError(f"Unknown flower parameter: {name}")
        if name == "petal_count":
            value = int(round(value))
        return replace(self, **{name: value})

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class Drop:
    """Drop point in wall-local coordinates (origin top-left, y down)."""

    x: float
    y: float


@dataclass(frozen=True)
class PostedFlower:
    id: str
    seed: int
    params: FlowerParams
    drop: Drop | None = None
    placement_height: float | None = None
    season: Season | None = None


@dataclass(frozen=True)
class Leaflet:
    at: float  # distance along the sprig backbone
    angle_deg: float
    length: float


@dataclass(frozen=True)
class BladeLeaf:
    """A single leaf outline with a centre vein."""

    t: float  # Bezier parameter on the stem, not arc length
    side: int  # +1 / -1
    length: float
    width: float
    rotate_deg: float
    offset: float
    opacity: float
    kind: str = field(default="blade", init=False)


@dataclass(frozen=True)
class SprigLeaf:
    """A compound frond: curved backbone with fanned leaflets."""

    t: float
    side: int
    length: float
    width: float
    rotate_deg: float
    offset: float
    opacity: float
    leaflets: tuple[Leaflet, ...] = ()
    kind: str = field(default="sprig", init=False)


Leaf = BladeLeaf | SprigLeaf


@dataclass(frozen=True)
class Stage:
    """Size of the composition surface in pixels."""

    width: float = DEFAULT_STAGE_WIDTH
    height: float = DEFAULT_STAGE_HEIGHT

    @staticmethod
    def from_size(width: float | None, height: float | None) -> Stage:
        """Fall back to the default size for anything missing or degenerate."""
        w = width if width and math.isfinite(width) and width > 0 else DEFAULT_STAGE_WIDTH
        h = height if height and math.isfinite(height) and height > 0 else DEFAULT_STAGE_HEIGHT
        return Stage(float(w), float(h))


@dataclass(frozen=True)
class ComposedFlower:
    """A posted flower with its stem, leaves and sprite placement."""

    id: str
    seed: int
    params: FlowerParams
    drop: Drop | None
    placement_height: float | None
    season: Season | None
    role: int
    x: float
    y: float
    scale: float
    born: float
    base_x: float
    base_y: float
    c1x: float
    c1y: float
    c2x: float
    c2y: float
    stem_width: float
    stem_hue: float
    stem_saturation: float
    stem_lightness: float
    leaves: tuple[Leaf, ...]
    tilt_x: float
    tilt_y: float
    tilt_z: float

    def control_points(self) -> tuple[Point, Point, Point, Point]:
        """Stem Bezier as (base, c1, c2, tip)."""
        return (
            Point(self.base_x, self.base_y),
            Point(self.c1x, self.c1y),
            Point(self.c2x, self.c2y),
            Point(self.x, self.y),
        )
