import random

import pytest

from ikebana_wall.bus import FlowerBus
from ikebana_wall.geometry import Rect
from ikebana_wall.maker import MAX_SEED, FlowerMaker
from ikebana_wall.models import DEFAULT_PLACEMENT_HEIGHT, PARAM_RANGES, Drop, Season


def maker_with_inbox(**kw):
    bus = FlowerBus()
    inbox = []
    bus.subscribe(inbox.append)
    return FlowerMaker(bus, rng=random.Random(0), **kw), inbox


def test_season_sets_hue():
    m, _ = maker_with_inbox()
    assert m.season is Season.SPRING and m.params.hue == 330
    for season, hue in (("summer", 200), ("autumn", 30), (Season.WINTER, 180)):
        m.set_season(season)
        assert m.params.hue == hue


@pytest.mark.parametrize("raw", ["abc", "", None, "nan", float("inf"), "-inf"])
def test_malformed_input_is_ignored(raw):
    m, _ = maker_with_inbox()
    before = m.params
    assert m.set_param("radius", raw) is False
    assert m.params == before


def test_values_are_clamped():
    m, _ = maker_with_inbox()
    assert m.set_param("radius", "999")
    assert m.params.radius == 150
    assert m.set_param("petal_count", 7.6)
    assert m.params.petal_count == 8 and isinstance(m.params.petal_count, int)
    assert m.set_param("placement_height", -3)
    assert m.placement_height == 0.0


def test_unknown_param_raises():
    m, _ = maker_with_inbox()
    with pytest.raises(KeyError):
        m.set_param("stem_colour", 1)


def test_randomize_all_stays_in_range():
    m, _ = maker_with_inbox()
    for _ in range(50):
        p = m.randomize_all()
        for name, (lo, hi, _step) in PARAM_RANGES.items():
            assert lo <= getattr(p, name) <= hi
        assert 5 <= p.petal_count <= 18
        assert 0 <= m.seed < MAX_SEED


def test_randomize_seed_keeps_params():
    m, _ = maker_with_inbox()
    before = m.params
    m.randomize_seed()
    assert m.params == before


def test_send_posts_current_design():
    m, inbox = maker_with_inbox(seed=77)
    m.set_param("placement_height", 0.9)
    f = m.send()
    assert inbox == [f]
    assert f.seed == 77 and f.params == m.params
    assert f.placement_height == 0.9 and f.season is Season.SPRING
    assert f.drop is None
    assert m.send().id != f.id


def test_default_placement_height():
    m, _ = maker_with_inbox()
    assert m.build().placement_height == DEFAULT_PLACEMENT_HEIGHT


def test_drag_release_over_target_posts_local_drop():
    m, inbox = maker_with_inbox()
    target = Rect(100, 50, 800, 700)
    g = m.begin_drag(10, 10, target)
    assert g.valid is False
    assert g.move(300, 250) is True
    f = g.release(300, 250)
    assert f.drop == Drop(200, 200)
    assert inbox == [f]
    # second release is inert
    assert g.release(300, 250) is None
    assert len(inbox) == 1


def test_drag_release_outside_posts_nothing():
    m, inbox = maker_with_inbox()
    g = m.begin_drag(300, 250, Rect(100, 50, 800, 700))
    assert g.valid
    assert g.release(5, 5) is None
    assert inbox == [] and not g.active


def test_drag_without_target():
    m, inbox = maker_with_inbox()
    g = m.begin_drag(1, 1, None)
    assert g.move(2, 2) is False
    assert g.release(2, 2) is None
    assert inbox == []


def test_drop_on_edge_is_inside():
    m, inbox = maker_with_inbox()
    f = m.begin_drag(0, 0, Rect(0, 0, 100, 100)).release(100, 100)
    assert f.drop == Drop(100, 100)


class ScriptedRandom:
    """random() returns the same value every time."""

    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


def test_randomize_all_wraps_hue_below_zero():
    m = FlowerMaker(FlowerBus(), rng=ScriptedRandom(0.0))
    m.set_param("hue", 5)
    p = m.randomize_all()
    # 5 - 20 wraps round the colour wheel instead of pinning to red
    assert p.hue == pytest.approx(345.0)


def test_randomize_all_wraps_hue_above_360():
    m = FlowerMaker(FlowerBus(), rng=ScriptedRandom(0.999))
    m.set_param("hue", 355)
    assert m.randomize_all().hue == pytest.approx((355 + 0.499 * 40) % 360)
