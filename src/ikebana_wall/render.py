"""
Wall rendering (matplotlib)
---------------------------
Draws a composition onto a matplotlib Axes laid out in stage pixels
(origin top-left, y down):

    backdrop + vessel  ->  stems  ->  leaves  ->  flower sprites

Stems and leaves are vector PathPatches; flowers are rasters from the
composer placed with imshow(). The decorative tilt is applied as an
orthographic approximation: rotate about z, foreshorten by cos(tilt_x) and
cos(tilt_y).
"""

from __future__ import annotations

import math

import matplotlib.patches as mpatches
import matplotlib.pyplot as plt
from matplotlib.path import Path as MplPath
from matplotlib.transforms import Affine2D

from ikebana_wall.canvas import hsla
from ikebana_wall.composer import PREVIEW, SpriteAnimator, compose_flower, compose_sprite
from ikebana_wall.config import AMBIENT_PETALS, AMBIENT_SEED, EXPORT_DPI, theme_for
from ikebana_wall.leaves import leaf_frame, leaf_paths
from ikebana_wall.models import ComposedFlower, FlowerParams, Leaf, Season, Stage
from ikebana_wall.rng import create_rng

SPRITE_BASE = 160.0


def _pt(ax, px: float) -> float:
    """Pixel length -> points for linewidths."""
    return px * 72.0 / ax.figure.dpi


# ---------------------- Figures ----------------------
def new_wall_figure(stage: Stage, dpi: int = EXPORT_DPI, season: Season | None = None):
    """Figure whose single Axes maps 1:1 onto stage pixels."""
    theme = theme_for(season)
    fig = plt.figure(figsize=(stage.width / dpi, stage.height / dpi), dpi=dpi)
    fig.patch.set_facecolor(theme.backdrop)
    ax = fig.add_axes([0.0, 0.0, 1.0, 1.0])
    setup_wall_axes(ax, stage, season)
    return fig, ax


def setup_wall_axes(ax, stage: Stage, season: Season | None = None) -> None:
    theme = theme_for(season)
    ax.clear()
    ax.set_xlim(0, stage.width)
    ax.set_ylim(stage.height, 0)
    ax.set_aspect("equal")
    ax.set_facecolor(theme.backdrop)
    ax.set_xticks([])
    ax.set_yticks([])
    for spine in ax.spines.values():
        spine.set_visible(False)


# ---------------------- Backdrop ----------------------
def draw_backdrop(ax, stage: Stage, season: Season | None = None) -> None:
    """Ambient drifting petals and a low vessel with its kenzan."""
    theme = theme_for(season)
    for i in range(AMBIENT_PETALS):
        rng = create_rng(AMBIENT_SEED + i * 9973)
        x = rng() * stage.width
        y = rng() * stage.height
        ax.add_patch(
            mpatches.Ellipse(
                (x, y),
                width=6 + rng() * 6,
                height=3 + rng() * 3,
                angle=rng() * 360,
                facecolor=theme.particle,
                edgecolor="none",
                alpha=0.12 + rng() * 0.12,
                zorder=0,
            )
        )

    cx = stage.width / 2.0
    vessel_y = stage.height - 70.0
    vessel_w = min(stage.width * 0.42, 340.0)
    ax.add_patch(
        mpatches.FancyBboxPatch(
            (cx - vessel_w / 2.0, vessel_y),
            vessel_w,
            26.0,
            boxstyle="round,pad=0,rounding_size=10",
            facecolor="#1b1b1f",
            edgecolor="#3a3a40",
            lw=_pt(ax, 1.2),
            zorder=1,
        )
    )
    # waterline
    ax.plot(
        [cx - vessel_w / 2.0 + 10, cx + vessel_w / 2.0 - 10],
        [vessel_y + 3, vessel_y + 3],
        color="#6b7a86",
        lw=_pt(ax, 1.0),
        alpha=0.5,
        zorder=1,
    )


def draw_kenzan(ax, flowers) -> None:
    """Pin-holder dots where the stems stand."""
    for f in flowers:
        ax.add_patch(
            mpatches.Circle(
                (f.base_x, f.base_y), 3.2, facecolor="#2b2b30", edgecolor="#5c5c66", zorder=3
            )
        )


# ---------------------- Stems & leaves ----------------------
def stem_path(f: ComposedFlower):
    p0, p1, p2, p3 = f.control_points()
    return MplPath([p0, p1, p2, p3], [MplPath.MOVETO, MplPath.CURVE4, MplPath.CURVE4, MplPath.CURVE4])


def draw_stem(ax, f: ComposedFlower) -> mpatches.PathPatch:
    patch = mpatches.PathPatch(
        stem_path(f),
        facecolor="none",
        edgecolor=hsla(f.stem_hue, f.stem_saturation, f.stem_lightness, 0.85),
        lw=_pt(ax, f.stem_width),
        capstyle="round",
        joinstyle="round",
        zorder=2,
    )
    ax.add_patch(patch)
    return patch


def draw_leaf(ax, f: ComposedFlower, leaf: Leaf, season: Season | None = None) -> list:
    """Draw one leaf in its stem frame; returns the patches added."""
    theme = theme_for(f.season or season)
    x, y, ang = leaf_frame(f, leaf)
    tr = Affine2D().rotate(ang).translate(x, y) + ax.transData
    patches = []
    paths = leaf_paths(leaf)
    for path in paths.get("fill", []):
        patches.append(
            mpatches.PathPatch(
                path,
                facecolor=theme.leaf_face,
                edgecolor="none",
                alpha=leaf.opacity,
                transform=tr,
                zorder=2.5,
            )
        )
    for path in paths.get("vein", []):
        patches.append(
            mpatches.PathPatch(
                path,
                facecolor="none",
                edgecolor=theme.leaf_vein,
                lw=_pt(ax, 0.8),
                alpha=min(1.0, leaf.opacity * 1.6),
                transform=tr,
                zorder=2.6,
            )
        )
    for path in paths.get("line", []):
        patches.append(
            mpatches.PathPatch(
                path,
                facecolor="none",
                edgecolor=theme.sprig,
                lw=_pt(ax, max(0.8, leaf.width * 0.45)),
                capstyle="round",
                alpha=leaf.opacity,
                transform=tr,
                zorder=2.5,
            )
        )
    for p in patches:
        ax.add_patch(p)
    return patches


# ---------------------- Flowers ----------------------
def sprite_transform(ax, f: ComposedFlower):
    """Tilt about the sprite centre, then into data coordinates."""
    fx = math.cos(math.radians(f.tilt_y))
    fy = math.cos(math.radians(f.tilt_x))
    return (
        Affine2D()
        .translate(-f.x, -f.y)
        .scale(fx, fy)
        .rotate_deg(f.tilt_z)
        .translate(f.x, f.y)
        + ax.transData
    )


def draw_flower_sprite(ax, f: ComposedFlower, elapsed: float = 0.0):
    img = compose_sprite(f, elapsed)
    half = SPRITE_BASE * f.scale / 2.0
    im = ax.imshow(
        img,
        extent=(f.x - half, f.x + half, f.y + half, f.y - half),
        origin="upper",
        interpolation="bilinear",
        zorder=4,
    )
    im.set_transform(sprite_transform(ax, f))
    return im


# ---------------------- Whole views ----------------------
def draw_wall(
    ax,
    flowers,
    stage: Stage,
    season: Season | None = None,
    elapsed: float = 0.0,
    show_meta: bool = True,
) -> dict:
    """Draw a full composition onto ax (cleared first). Returns sprite images by flower id."""
    setup_wall_axes(ax, stage, season)
    draw_backdrop(ax, stage, season)
    for f in flowers:
        draw_stem(ax, f)
    for f in flowers:
        for leaf in f.leaves:
            draw_leaf(ax, f, leaf, season)
    draw_kenzan(ax, flowers)
    images = {f.id: draw_flower_sprite(ax, f, elapsed) for f in flowers}
    if show_meta:
        ax.text(
            12,
            stage.height - 12,
            f"Flowers: {len(flowers)}",
            color="#cfcfd6",
            fontsize=9,
            va="bottom",
            zorder=5,
        )
    # imshow resets limits; pin the stage again
    ax.set_xlim(0, stage.width)
    ax.set_ylim(stage.height, 0)
    return images


def render_wall(flowers, stage: Stage, season: Season | None = None, elapsed: float = 0.0, dpi: int = EXPORT_DPI):
    """New figure holding the composition; caller saves or shows it."""
    fig, ax = new_wall_figure(stage, dpi=dpi, season=season)
    draw_wall(ax, flowers, stage, season, elapsed)
    return fig


def draw_preview(ax, params: FlowerParams, seed: int, elapsed: float = 0.0, preset=PREVIEW):
    """Maker preview: one flower centred in ax."""
    img = compose_flower(params, seed, elapsed, preset)
    ax.clear()
    ax.set_facecolor("#0b0b10")
    ax.set_xticks([])
    ax.set_yticks([])
    im = ax.imshow(img, extent=(0, preset.size, preset.size, 0), interpolation="bilinear")
    ax.set_xlim(0, preset.size)
    ax.set_ylim(preset.size, 0)
    return im


def render_preview(params: FlowerParams, seed: int, elapsed: float = 0.0, dpi: int = EXPORT_DPI):
    size = PREVIEW.size
    fig = plt.figure(figsize=(size / dpi, size / dpi), dpi=dpi)
    ax = fig.add_axes([0.0, 0.0, 1.0, 1.0])
    draw_preview(ax, params, seed, elapsed)
    return fig


def schedule_sprites(animator: SpriteAnimator, images: dict, flowers) -> None:
    """Register a sway redraw for every placed flower's sprite image."""
    for f in flowers:
        im = images.get(f.id)
        if im is None:
            continue

        def redraw(elapsed: float, f=f, im=im) -> None:
            im.set_data(compose_sprite(f, elapsed))

        animator.schedule(f.id, redraw)
