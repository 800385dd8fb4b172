"""
Composition wall
----------------
The consumer side of the bus. A CompositionWall subscribes to a FlowerBus
when created, places every posted flower through its PlacementEngine and
keeps the resulting composition until reset().
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from ikebana_wall.bus import FlowerBus
from ikebana_wall.config import DEFAULT_SEASON, EXPORT_DPI
from ikebana_wall.export import Alert, export_composition_csv, export_png, log_alert
from ikebana_wall.models import ComposedFlower, PostedFlower, Season, Stage
from ikebana_wall.placement import PlacementEngine
from ikebana_wall.render import render_wall

logger = logging.getLogger(__name__)


class CompositionWall:
    def __init__(
        self,
        bus: FlowerBus,
        stage: Stage | None = None,
        season: Season = DEFAULT_SEASON,
        alert: Alert | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.engine = PlacementEngine(stage, clock=clock)
        self.season = season
        self.alert = alert or log_alert
        self._listeners: list[Callable[[ComposedFlower], None]] = []
        self._unsubscribe = bus.subscribe(self.receive)

    @property
    def stage(self) -> Stage:
        return self.engine.stage

    @property
    def flowers(self) -> tuple[ComposedFlower, ...]:
        return self.engine.flowers

    def __len__(self) -> int:
        return len(self.engine)

    def close(self) -> None:
        """Stop listening to the bus. Safe to call more than once."""
        self._unsubscribe()

    def on_placed(self, callback: Callable[[ComposedFlower], None]) -> None:
        """Call callback with every flower placed from now on (view hook)."""
        self._listeners.append(callback)

    def receive(self, posted: PostedFlower) -> ComposedFlower:
        composed = self.engine.place(posted)
        for cb in list(self._listeners):
            cb(composed)
        return composed

    def resize(self, width: float | None, height: float | None) -> None:
        self.engine.resize(width, height)

    def reset(self, confirm: Callable[[], bool] | None = None) -> bool:
        """
        Clear the composition. Returns False when there was nothing to clear
        or confirm() declined.
        """
        if not len(self.engine):
            return False
        if confirm is not None and not confirm():
            logger.debug("reset declined")
            return False
        self.engine.reset()
        return True

    # ---------------------- Exports ----------------------
    def render(self, elapsed: float = 0.0, dpi: int = EXPORT_DPI):
        return render_wall(self.flowers, self.stage, self.season, elapsed, dpi=dpi)

    def export_png(self, path: str, elapsed: float = 0.0) -> str | None:
        return export_png(lambda: self.render(elapsed), path, self.alert)

    def export_csv(self, path: str) -> str:
        return export_composition_csv(self.flowers, self.stage, path)
