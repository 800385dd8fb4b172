import json

import matplotlib.pyplot as plt
import pandas as pd

from ikebana_wall.bus import FlowerBus
from ikebana_wall.composer import SpriteAnimator
from ikebana_wall.export import (
    PREVIEW_NOT_FOUND,
    SCREENSHOT_UNSUPPORTED,
    TREE_NOT_FOUND,
    export_png,
)
from ikebana_wall.models import Drop, FlowerParams, Season, Stage
from ikebana_wall.render import draw_wall, new_wall_figure, render_preview, schedule_sprites
from ikebana_wall.wall import CompositionWall


def new_wall(**kw):
    bus = FlowerBus()
    alerts = []
    wall = CompositionWall(bus, alert=alerts.append, clock=lambda: 0.0, **kw)
    return bus, wall, alerts


def test_wall_places_posted_flowers(posted):
    bus, wall, _ = new_wall()
    placed = []
    wall.on_placed(placed.append)
    for s in range(4):
        bus.post(posted(seed=s))
    assert len(wall) == 4
    assert [f.role for f in wall.flowers] == [0, 1, 2, 2]
    assert placed == list(wall.flowers)


def test_close_unsubscribes(posted):
    bus, wall, _ = new_wall()
    wall.close()
    wall.close()
    bus.post(posted())
    assert len(wall) == 0 and len(bus) == 0


def test_reset(posted):
    bus, wall, _ = new_wall()
    assert wall.reset() is False
    bus.post(posted())
    assert wall.reset(confirm=lambda: False) is False
    assert len(wall) == 1
    assert wall.reset(confirm=lambda: True) is True
    assert len(wall) == 0


def test_resize_falls_back(posted):
    _, wall, _ = new_wall()
    wall.resize(None, -1)
    assert wall.stage == Stage(800, 700)
    wall.resize(640, 480)
    assert wall.stage == Stage(640, 480)


def test_export_png(tmp_path, posted):
    bus, wall, alerts = new_wall(stage=Stage(320, 300), season=Season.AUTUMN)
    bus.post(posted(seed=3, season=Season.AUTUMN))
    bus.post(posted(seed=4, drop=Drop(100, 80)))
    p = tmp_path / "wall.png"
    assert wall.export_png(str(p)) == str(p)
    assert p.exists() and p.stat().st_size > 0
    assert alerts == []


def test_export_png_failure_alerts(tmp_path):
    _, wall, alerts = new_wall(stage=Stage(200, 200))
    assert wall.export_png(str(tmp_path / "missing" / "wall.png")) is None
    assert wall.export_png(str(tmp_path / "wall.notaformat")) is None
    assert alerts == [SCREENSHOT_UNSUPPORTED, SCREENSHOT_UNSUPPORTED]


def test_export_png_missing_target(tmp_path):
    alerts = []
    assert export_png(lambda: None, str(tmp_path / "x.png"), alerts.append) is None
    assert export_png(
        lambda: None, str(tmp_path / "y.png"), alerts.append, missing=PREVIEW_NOT_FOUND
    ) is None
    assert alerts == [TREE_NOT_FOUND, PREVIEW_NOT_FOUND]


def test_preview_export(tmp_path):
    p = tmp_path / "flower.png"
    out = export_png(lambda: render_preview(FlowerParams(petal_count=5), 8), str(p), scale=1)
    assert out == str(p) and p.exists()


def test_export_csv(tmp_path, posted):
    bus, wall, _ = new_wall()
    for s in range(3):
        bus.post(posted(seed=s, season=Season.WINTER))
    p = tmp_path / "composition.csv"
    wall.export_csv(str(p))
    df = pd.read_csv(p)
    assert len(df) == 3
    for col in ("id", "seed", "role", "x", "y", "c1x", "c2y", "petal_count", "leaves"):
        assert col in df.columns
    assert list(df["role"]) == [0, 1, 2]
    assert (df["season"] == "winter").all()
    leaves = json.loads(df["leaves"].iloc[0])
    assert len(leaves) == df["leaf_count"].iloc[0]
    assert all(leaf["kind"] in ("blade", "sprig") for leaf in leaves)


def test_draw_wall_and_sprite_animation(posted):
    bus, wall, _ = new_wall(stage=Stage(300, 300))
    for s in range(2):
        bus.post(posted(seed=s))
    fig, ax = new_wall_figure(wall.stage)
    images = draw_wall(ax, wall.flowers, wall.stage)
    assert set(images) == {f.id for f in wall.flowers}
    assert ax.get_ylim() == (300, 0)

    anim = SpriteAnimator()
    schedule_sprites(anim, images, wall.flowers)
    before = {k: im.get_array().copy() for k, im in images.items()}
    assert anim.tick(0.0) == 2
    assert anim.tick(1.0) == 2
    changed = [k for k, im in images.items() if (im.get_array() != before[k]).any()]
    assert changed
    plt.close(fig)
