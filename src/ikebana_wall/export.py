"""PNG and CSV export of the wall and the maker preview."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import asdict

import matplotlib.pyplot as plt
import pandas as pd

from ikebana_wall.config import EXPORT_SCALE
from ikebana_wall.models import ComposedFlower, Stage

logger = logging.getLogger(__name__)

SCREENSHOT_UNSUPPORTED = "Screenshot not supported."
TREE_NOT_FOUND = "Tree not found."
PREVIEW_NOT_FOUND = "Preview not found."

Alert = Callable[[str], None]


def log_alert(message: str) -> None:
    logger.warning(message)


def export_png(
    render: Callable[[], object],
    path: str,
    alert: Alert | None = None,
    missing: str = TREE_NOT_FOUND,
    scale: float = EXPORT_SCALE,
) -> str | None:
    """
    Save the figure produced by render() to path.

    render returns a matplotlib Figure, or None when there is nothing to
    capture. Failures go to alert and the export is abandoned; returns the
    written path or None.
    """
    alert = alert or log_alert
    fig = render()
    if fig is None:
        alert(missing)
        return None
    try:
        fig.savefig(path, dpi=fig.dpi * scale, facecolor=fig.get_facecolor())
    except (OSError, ValueError, RuntimeError) as exc:
        logger.debug("png export to %s failed: %s", path, exc)
        alert(SCREENSHOT_UNSUPPORTED)
        return None
    finally:
        plt.close(fig)
    logger.debug("wrote %s", path)
    return path


def _leaves_json(f: ComposedFlower) -> str:
    return json.dumps([asdict(leaf) for leaf in f.leaves])


def export_composition_csv(flowers, stage: Stage, path: str) -> str:
    """One row per flower: placement, stem geometry, params and leaves."""
    rows = []
    for order, f in enumerate(flowers):
        row = {
            "order": order,
            "id": f.id,
            "seed": f.seed,
            "role": f.role,
            "season": f.season.value if f.season else "",
            "placement_height": f.placement_height,
            "drop_x": f.drop.x if f.drop else None,
            "drop_y": f.drop.y if f.drop else None,
            "x": f.x,
            "y": f.y,
            "scale": f.scale,
            "base_x": f.base_x,
            "base_y": f.base_y,
            "c1x": f.c1x,
            "c1y": f.c1y,
            "c2x": f.c2x,
            "c2y": f.c2y,
            "stem_width": f.stem_width,
            "stem_lightness": f.stem_lightness,
            "tilt_x": f.tilt_x,
            "tilt_y": f.tilt_y,
            "tilt_z": f.tilt_z,
            "leaf_count": len(f.leaves),
            "leaves": _leaves_json(f),
            "stage_width": stage.width,
            "stage_height": stage.height,
        }
        row.update(f.params.to_dict())
        rows.append(row)
    pd.DataFrame(rows).to_csv(path, index=False)
    logger.debug("wrote %d flower row(s) to %s", len(rows), path)
    return path
