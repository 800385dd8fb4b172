"""
Interactive window
------------------
One matplotlib figure with the maker panel on the left (preview, sliders,
season selector, buttons) and the wall on the right. Dragging the preview
onto the wall sends the flower with a drop point; Send places it by the
composition rules alone.
"""

from __future__ import annotations

import logging
import time

import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation
from matplotlib.widgets import Button, RadioButtons, Slider

from ikebana_wall.composer import GHOST, PREVIEW, SpriteAnimator, compose_flower
from ikebana_wall.config import PLACEMENT_HEIGHT_RANGE, ensure_output_dir, out, unique_suffix
from ikebana_wall.export import PREVIEW_NOT_FOUND, export_png
from ikebana_wall.geometry import Rect
from ikebana_wall.maker import FlowerMaker
from ikebana_wall.models import PARAM_RANGES, ComposedFlower, Season
from ikebana_wall.render import draw_preview, draw_wall, render_preview, schedule_sprites
from ikebana_wall.wall import CompositionWall

logger = logging.getLogger(__name__)

SLIDER_LABELS = {
    "petal_count": "Petals",
    "radius": "Radius",
    "roundness": "Roundness",
    "curl": "Curl",
    "hue": "Hue",
    "saturation": "Saturation",
    "lightness": "Lightness",
    "sway_amp": "Sway Amp",
    "sway_freq": "Sway Freq",
    "placement_height": "Height",
}
FRAME_MS = 66


class IkebanaApp:
    def __init__(self, wall: CompositionWall, maker: FlowerMaker, output_dir: str = "."):
        self.wall = wall
        self.maker = maker
        self.output_dir = output_dir
        self.animator = SpriteAnimator()
        self.t0 = time.perf_counter()
        self.drag = None
        self.ghost = None
        self.preview_im = None

        self.fig = plt.figure(figsize=(14, 8))
        self.fig.canvas.manager.set_window_title("Ikebana Wall")
        self.preview_ax = self.fig.add_axes([0.03, 0.56, 0.26, 0.40])
        self.wall_ax = self.fig.add_axes([0.40, 0.04, 0.58, 0.92])

        self.sliders: dict[str, Slider] = {}
        y = 0.50
        for name, label in SLIDER_LABELS.items():
            lo, hi, step = PLACEMENT_HEIGHT_RANGE if name == "placement_height" else PARAM_RANGES[name]
            ax = self.fig.add_axes([0.08, y, 0.20, 0.022])
            s = Slider(ax, label, lo, hi, valinit=self._current(name), valstep=step)
            s.on_changed(lambda v, name=name: self.on_slider(name, v))
            self.sliders[name] = s
            y -= 0.032

        season_ax = self.fig.add_axes([0.30, 0.56, 0.08, 0.16])
        labels = [s.value.title() for s in Season]
        self.season_radio = RadioButtons(season_ax, labels, active=labels.index(maker.season.value.title()))
        self.season_radio.on_clicked(self.on_season)

        self.buttons = {}
        actions = [
            ("Randomize Seed", self.on_randomize_seed),
            ("Randomize All", self.on_randomize_all),
            ("Send", self.on_send),
            ("Download PNG", self.on_download_png),
            ("Reset", self.on_reset),
            ("Download Tree", self.on_download_tree),
        ]
        for i, (label, cb) in enumerate(actions):
            col, row = i % 2, i // 2
            ax = self.fig.add_axes([0.03 + col * 0.135, 0.12 - row * 0.045, 0.125, 0.038])
            b = Button(ax, label)
            b.on_clicked(cb)
            self.buttons[label] = b

        wall.on_placed(self.on_placed)
        self.fig.canvas.mpl_connect("button_press_event", self.on_press)
        self.fig.canvas.mpl_connect("motion_notify_event", self.on_motion)
        self.fig.canvas.mpl_connect("button_release_event", self.on_release)
        self.fig.canvas.mpl_connect("close_event", self.on_close)

        self.redraw_preview()
        self.redraw_wall()
        self.anim = FuncAnimation(self.fig, self.frame, interval=FRAME_MS, cache_frame_data=False)

    def _current(self, name: str) -> float:
        if name == "placement_height":
            return self.maker.placement_height
        return float(getattr(self.maker.params, name))

    def _sync_sliders(self) -> None:
        for name, s in self.sliders.items():
            s.eventson = False
            s.set_val(self._current(name))
            s.eventson = True

    # ---------------------- drawing ----------------------
    def redraw_preview(self, elapsed: float = 0.0) -> None:
        self.preview_im = draw_preview(self.preview_ax, self.maker.params, self.maker.seed, elapsed)
        self.preview_ax.set_title(f"seed {self.maker.seed}", fontsize=9)

    def redraw_wall(self) -> None:
        self.animator.cancel_all()
        self.ghost = None
        images = draw_wall(self.wall_ax, self.wall.flowers, self.wall.stage, self.wall.season)
        schedule_sprites(self.animator, images, self.wall.flowers)
        self.fig.canvas.draw_idle()

    def frame(self, _i):
        now = time.perf_counter()
        self.animator.tick(now)
        if self.preview_im is not None:
            self.preview_im.set_data(
                compose_flower(self.maker.params, self.maker.seed, now - self.t0, PREVIEW)
            )
        return []

    # ---------------------- controls ----------------------
    def on_slider(self, name: str, value: float) -> None:
        self.maker.set_param(name, value)
        self.redraw_preview()

    def on_season(self, label: str) -> None:
        self.maker.set_season(label.lower())
        self.wall.season = self.maker.season
        self._sync_sliders()
        self.redraw_preview()
        self.redraw_wall()

    def on_randomize_seed(self, _event) -> None:
        self.maker.randomize_seed()
        self.redraw_preview()

    def on_randomize_all(self, _event) -> None:
        self.maker.randomize_all()
        self._sync_sliders()
        self.redraw_preview()

    def on_send(self, _event) -> None:
        self.maker.send()

    def on_placed(self, _flower: ComposedFlower) -> None:
        self.redraw_wall()

    def on_reset(self, _event) -> None:
        if self.wall.reset():
            self.redraw_wall()

    def _path(self, kind: str) -> str:
        ensure_output_dir(self.output_dir)
        return out(self.output_dir, f"{kind}_{unique_suffix()}.png")

    def on_download_png(self, _event) -> None:
        params, seed = self.maker.params, self.maker.seed
        path = export_png(
            lambda: render_preview(params, seed),
            self._path("flower"),
            self.wall.alert,
            missing=PREVIEW_NOT_FOUND,
            scale=1,
        )
        if path:
            print(f"[export] {path}")

    def on_download_tree(self, _event) -> None:
        path = self.wall.export_png(self._path("ikebana"))
        if path:
            print(f"[export] {path}")

    # ---------------------- drag & drop ----------------------
    def _stage_point(self, event) -> tuple[float, float]:
        """Pointer position in wall stage coordinates (may lie outside)."""
        x, y = self.wall_ax.transData.inverted().transform((event.x, event.y))
        return float(x), float(y)

    def _target(self) -> Rect:
        st = self.wall.stage
        return Rect(0.0, 0.0, st.width, st.height)

    def on_press(self, event) -> None:
        if event.button != 1 or event.inaxes is not self.preview_ax:
            return
        x, y = self._stage_point(event)
        self.drag = self.maker.begin_drag(x, y, self._target())
        img = compose_flower(self.maker.params, self.maker.seed, 0.0, GHOST)
        half = GHOST.size / 2.0
        self.ghost = self.wall_ax.imshow(
            img, extent=(x - half, x + half, y + half, y - half), alpha=0.35, zorder=6
        )
        self.wall_ax.set_xlim(0, self.wall.stage.width)
        self.wall_ax.set_ylim(self.wall.stage.height, 0)

    def on_motion(self, event) -> None:
        if self.drag is None or not self.drag.active:
            return
        x, y = self._stage_point(event)
        valid = self.drag.move(x, y)
        if self.ghost is not None:
            half = GHOST.size / 2.0
            self.ghost.set_extent((x - half, x + half, y + half, y - half))
            self.ghost.set_alpha(0.8 if valid else 0.35)
            self.fig.canvas.draw_idle()

    def on_release(self, event) -> None:
        if self.drag is None:
            return
        drag, self.drag = self.drag, None
        if self.ghost is not None:
            self.ghost.remove()
            self.ghost = None
        x, y = self._stage_point(event)
        # a successful drop triggers on_placed, which redraws
        if drag.release(x, y) is None:
            self.fig.canvas.draw_idle()

    def on_close(self, _event) -> None:
        self.animator.cancel_all()
        self.anim.event_source.stop()
        self.wall.close()
        logger.debug("window closed")


def run(wall: CompositionWall, maker: FlowerMaker, output_dir: str = ".") -> IkebanaApp:
    app = IkebanaApp(wall, maker, output_dir)
    plt.show()
    return app
