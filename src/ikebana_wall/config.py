"""
Defaults and themes
-------------------
Module-level defaults for the maker and the wall, the seasonal themes, and
small output-path helpers used by the CLI and the exporters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime

from ikebana_wall.models import FlowerParams, Season

# ---------------------- Maker defaults ----------------------
DEFAULT_SEED = 1
DEFAULT_PARAMS = FlowerParams()
DEFAULT_SEASON = Season.SPRING
PLACEMENT_HEIGHT_RANGE = (0.0, 1.0, 0.01)

# ---------------------- Wall / export ----------------------
EXPORT_DPI = 100
EXPORT_SCALE = 2  # wall PNG is written at 2x the stage size
AMBIENT_PETALS = 18
AMBIENT_SEED = 0x51F012AB


# ---------------------- Seasonal themes ----------------------
@dataclass(frozen=True)
class SeasonTheme:
    """Colours a season applies to the maker hue and the wall foliage."""

    label: str
    flower_hue: float
    leaf_face: str
    leaf_vein: str
    sprig: str
    backdrop: str
    particle: str


SEASON_THEMES: dict[Season, SeasonTheme] = {
    Season.SPRING: SeasonTheme(
        label="Spring",
        flower_hue=330,  # pink
        leaf_face="#b7d9a8",
        leaf_vein="#eaf5e4",
        sprig="#9cc78a",
        backdrop="#07060a",
        particle="#f4c6d8",
    ),
    Season.SUMMER: SeasonTheme(
        label="Summer",
        flower_hue=200,  # sky blue
        leaf_face="#7fb77e",
        leaf_vein="#d9eed5",
        sprig="#5e9c5b",
        backdrop="#05080b",
        particle="#d7ecf7",
    ),
    Season.AUTUMN: SeasonTheme(
        label="Autumn",
        flower_hue=30,  # orange / red
        leaf_face="#c98b4b",
        leaf_vein="#f1d6b4",
        sprig="#a8683a",
        backdrop="#0a0705",
        particle="#e8b07a",
    ),
    Season.WINTER: SeasonTheme(
        label="Winter",
        flower_hue=180,  # icy cyan / white
        leaf_face="#c6d3d6",
        leaf_vein="#f3f7f8",
        sprig="#a9b9bd",
        backdrop="#04060a",
        particle="#eef6fb",
    ),
}


def theme_for(season: Season | str | None) -> SeasonTheme:
    """Theme for a season; None falls back to the default season."""
    if season is None:
        return SEASON_THEMES[DEFAULT_SEASON]
    return SEASON_THEMES[Season(season)]


# ---------------------- Output paths ----------------------
def unique_suffix() -> str:
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def ensure_output_dir(path: str) -> None:
    """Create the output directory if needed."""
    os.makedirs(path, exist_ok=True)


def out(output_dir: str, name: str) -> str:
    """Resolve a filename under output_dir."""
    return os.path.join(output_dir, name)

