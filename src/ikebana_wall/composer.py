"""
Flower composer
---------------
Arranges the petals of one flower radially around its centre and returns
the instantaneous raster for a given elapsed time. Only the global sway
angle depends on time; every other variation comes from seeded streams:

    petal i      size/roundness jitter from create_rng(seed + i)
                 outline jitter from create_rng(seed + i * 100)
    stamens      create_rng(seed ^ 0x5A5A5A5A)

The petal and stamen layers are drawn once per (params, seed, preset) and
kept in an LRU cache; a frame only rotates the petal layer by the sway.

SpriteAnimator keeps one redraw callback per flower id and drives them from
a single frame clock (matplotlib FuncAnimation in the app, explicit frame
times when exporting a GIF).
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache

import numpy as np
from PIL import Image

from ikebana_wall.canvas import Canvas, composite, rotate_layer
from ikebana_wall.geometry import clamp
from ikebana_wall.models import ComposedFlower, FlowerParams
from ikebana_wall.petals import draw_petal, draw_stamens
from ikebana_wall.rng import create_rng, mix_seed


STAMEN_SALT = 0x5A5A5A5A
LAYER_CACHE_SIZE = 64


@dataclass(frozen=True)
class RenderPreset:
    """How big a flower is drawn and how strongly it is shaded."""

    size: float  # canvas edge in px
    radius_scale: float  # petal radius = params.radius * radius_scale
    stamen_scale: float  # stamen radius = params.radius * stamen_scale
    depth: float
    sway: bool = True


PREVIEW = RenderPreset(size=320, radius_scale=1.2, stamen_scale=0.18, depth=0.7)
GHOST = RenderPreset(size=120, radius_scale=0.45, stamen_scale=0.11, depth=0.85, sway=False)


def sprite_preset(scale: float) -> RenderPreset:
    """Preset for a flower sitting on the wall at the given sprite scale."""
    return RenderPreset(
        size=160 * scale, radius_scale=0.6 * scale, stamen_scale=0.11 * scale, depth=1.15
    )


def sway_angle(params: FlowerParams, elapsed: float) -> float:
    """Global petal rotation (radians) at elapsed seconds."""
    return math.sin(elapsed * math.pi * 2.0 * params.sway_freq) * math.radians(params.sway_amp)


def draw_petals(ctx: Canvas, params: FlowerParams, seed: int, preset: RenderPreset) -> None:
    """Draw the petal ring, unswayed, around the current canvas origin."""
    count = int(params.petal_count)
    for i in range(count):
        rng = create_rng(seed + i)
        angle = (i / count) * math.pi * 2.0
        size_var = 0.95 + rng() * 0.1
        roundness_var = clamp(params.roundness + (rng() - 0.5) * 0.15, 0.0, 1.0)
        draw_petal(
            ctx,
            angle,
            params.radius * preset.radius_scale * size_var,
            roundness_var,
            params.curl,
            params.hue,
            params.saturation,
            params.lightness,
            create_rng(seed + i * 100),
            preset.depth,
        )


def _layer_canvas(preset: RenderPreset, pixel_ratio: float) -> Canvas:
    px = preset.size * pixel_ratio
    ctx = Canvas(px, px)
    ctx.set_transform(pixel_ratio, 0, 0, pixel_ratio, 0, 0)
    ctx.translate(preset.size / 2.0, preset.size / 2.0)
    return ctx


@lru_cache(maxsize=LAYER_CACHE_SIZE)
def flower_layers(
    params: FlowerParams, seed: int, preset: RenderPreset, pixel_ratio: float = 1.0
) -> tuple[Image.Image, Image.Image]:
    """
    (petals, stamens) layers of one flower at rest.

    Sway turns the whole petal ring rigidly about the centre, so frames only
    rotate the cached petal layer. Stamens never sway; their layer is drawn
    additively on transparent and added back on top.
    """
    petals = _layer_canvas(preset, pixel_ratio)
    draw_petals(petals, params, seed, preset)
    stamens = _layer_canvas(preset, pixel_ratio)
    draw_stamens(
        stamens,
        params.radius * preset.stamen_scale,
        params.lightness,
        create_rng(mix_seed(seed, STAMEN_SALT)),
    )
    return petals.image, stamens.image


def compose_flower(
    params: FlowerParams,
    seed: int,
    elapsed: float = 0.0,
    preset: RenderPreset = PREVIEW,
    pixel_ratio: float = 1.0,
) -> np.ndarray:
    """Render one flower to a straight-alpha RGBA uint8 array."""
    petals, stamens = flower_layers(params, seed, preset, float(pixel_ratio))
    sway = sway_angle(params, elapsed) if preset.sway else 0.0
    if sway:
        center = (petals.width / 2.0, petals.height / 2.0)
        petals = rotate_layer(petals, sway, center)
    return np.array(composite(petals, stamens, "lighter"))


def compose_sprite(flower: ComposedFlower, elapsed: float = 0.0) -> np.ndarray:
    """Raster of a placed flower at its sprite scale."""
    return compose_flower(flower.params, flower.seed, elapsed, sprite_preset(flower.scale))


# ---------------------- Redraw loop ----------------------
class SpriteAnimator:
    """
    Per-object redraw scheduling.

    Each key (a flower id) owns one draw callback and its own start time;
    tick(now) calls every live callback with the seconds since it was
    scheduled. A cancelled key is never called again.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, tuple[Callable[[float], None], float | None]] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def schedule(self, key: str, draw: Callable[[float], None], start: float | None = None) -> None:
        """Register (or replace) the redraw for key; start defaults to the next tick."""
        self._tasks[key] = (draw, start)

    def cancel(self, key: str) -> bool:
        return self._tasks.pop(key, None) is not None

    def cancel_all(self) -> None:
        self._tasks.clear()

    def tick(self, now: float) -> int:
        """Run one frame. Returns the number of callbacks invoked."""
        ran = 0
        for key in list(self._tasks):
            task = self._tasks.get(key)
            if task is None:  # cancelled by an earlier callback this frame
                continue
            draw, start = task
            if start is None:
                start = now
                self._tasks[key] = (draw, start)
            draw(now - start)
            ran += 1
        return ran
