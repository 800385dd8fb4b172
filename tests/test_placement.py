import dataclasses
import math
import random

import pytest

from ikebana_wall.leaves import MIN_T
from ikebana_wall.models import Drop, Stage
from ikebana_wall.placement import (
    MARGIN_BOTTOM,
    MARGIN_TOP,
    MARGIN_X,
    PlacementEngine,
    height_scale,
    window_index,
)


def engine(**kw):
    return PlacementEngine(clock=lambda: 42.0, **kw)


def test_window_index_sequence():
    assert [window_index(n) for n in range(6)] == [0, 1, 2, 2, 2, 2]


def test_roles_follow_window(posted):
    e = engine()
    roles = [e.place(posted(seed=s)).role for s in range(6)]
    assert roles == [0, 1, 2, 2, 2, 2]


def test_append_only(posted):
    e = engine()
    first = [e.place(posted(seed=s)) for s in range(3)]
    snapshot = [dataclasses.asdict(f) for f in first]
    for s in range(3, 8):
        e.place(posted(seed=s))
    assert len(e) == 8
    assert list(e.flowers[:3]) == first
    assert all(a is b for a, b in zip(e.flowers[:3], first, strict=True))
    assert [dataclasses.asdict(f) for f in e.flowers[:3]] == snapshot


def test_composed_records_are_frozen(posted):
    f = engine().place(posted())
    with pytest.raises(dataclasses.FrozenInstanceError):
        f.x = 0.0


def test_flowers_view_is_a_copy(posted):
    e = engine()
    e.place(posted())
    view = e.flowers
    e.place(posted())
    assert len(view) == 1 and len(e.flowers) == 2


def test_deterministic_geometry(posted):
    a, b = engine(), engine()
    fa = a.place(posted(seed=99))
    fb = b.place(posted(seed=99))
    assert dataclasses.replace(fa, id="x") == dataclasses.replace(fb, id="x")
    assert fa.born == 42.0


def test_tips_stay_inside_margins(posted):
    stage = Stage(800, 700)
    e = engine(stage=stage)
    for s in range(60):
        for ph in (0.0, 0.62, 1.0):
            f = e.place(posted(seed=s * 7919, placement_height=ph))
            assert MARGIN_X <= f.x <= stage.width - MARGIN_X
            assert MARGIN_TOP <= f.y <= stage.height - MARGIN_BOTTOM


def test_random_drops_keep_tips_inside_margins(posted):
    rnd = random.Random(2024)
    for width, height in ((800, 700), (400, 320), (1200, 900)):
        stage = Stage(width, height)
        e = engine(stage=stage)
        for _ in range(500):
            drop = Drop(rnd.uniform(0, width), rnd.uniform(0, height))
            f = e.place(
                posted(seed=rnd.randrange(2**32), drop=drop, placement_height=rnd.random())
            )
            assert MARGIN_X <= f.x <= width - MARGIN_X
            assert MARGIN_TOP <= f.y <= height - MARGIN_BOTTOM


def test_first_flower_geometry_is_stable(posted):
    f = engine(stage=Stage(800, 700)).place(posted(seed=1))
    assert f.role == 0
    assert f.x == pytest.approx(554.3728594414905)
    assert f.y == pytest.approx(70.0)
    assert f.base_x == pytest.approx(361.1039574048482)


def test_far_drop_is_clamped(posted):
    f = engine().place(posted(drop=Drop(10_000, -50)))
    assert f.x == pytest.approx(800 - MARGIN_X)
    assert f.y == pytest.approx(MARGIN_TOP)


def test_drop_sets_tip_and_direction(posted):
    f = engine().place(posted(seed=3, drop=Drop(300, 200)))
    assert (f.x, f.y) == pytest.approx((300, 200))
    # control points lie near the base->drop line
    ux, uy = f.x - f.base_x, f.y - f.base_y
    n = math.hypot(ux, uy)
    ux, uy = ux / n, uy / n
    mid_x = (f.c1x + f.c2x) / 2 - f.base_x
    mid_y = (f.c1y + f.c2y) / 2 - f.base_y
    along = mid_x * ux + mid_y * uy
    assert along == pytest.approx(n * 0.495, rel=1e-6)


def test_short_drop_extends_to_min_length(posted):
    e = engine()
    probe = engine().place(posted(seed=11))
    # a drop right next to the stem base
    f = e.place(posted(seed=11, drop=Drop(probe.base_x, probe.base_y - 5)))
    stem = math.hypot(f.x - f.base_x, f.y - f.base_y)
    assert stem >= 700 * 0.66 * 0.42 * height_scale(0.62) - 1e-6


def test_open_side_chosen_once(posted):
    e = engine()
    assert not e.has_side
    e.place(posted(seed=1))
    side = e.open_side
    assert e.has_side and side in (1, -1)
    for s in range(2, 10):
        e.place(posted(seed=s))
        assert e.open_side == side


def test_reset(posted):
    e = engine()
    for s in range(4):
        e.place(posted(seed=s))
    e.reset()
    assert len(e) == 0
    assert e.flowers == ()
    assert e.has_side is False
    assert e.open_side == 1
    assert e.place(posted()).role == 0


def test_stage_fallback():
    assert engine(stage=Stage.from_size(0, None)).stage == Stage(800, 700)
    e = engine()
    e.resize(1200, float("nan"))
    assert e.stage == Stage(1200, 700)


def test_stem_attributes(posted):
    e = engine()
    for s in range(3):
        f = e.place(posted(seed=s))
        assert f.stem_hue == 0 and f.stem_saturation == 0
        assert 0.0 < f.scale < 1.0
        assert abs(f.tilt_x) <= 8 and abs(f.tilt_y) <= 11 and abs(f.tilt_z) <= 7
        assert all(leaf.t >= MIN_T for leaf in f.leaves)


def test_taller_placement_height_reaches_higher(posted):
    low = engine().place(posted(seed=5, placement_height=0.0))
    high = engine().place(posted(seed=5, placement_height=1.0))
    assert high.y <= low.y
