import pytest

from ikebana_wall.config import SEASON_THEMES, theme_for
from ikebana_wall.models import FlowerParams, Season, Stage


def test_clamped_pulls_fields_into_range():
    p = FlowerParams(petal_count=40, radius=10, roundness=-1, hue=400, sway_freq=2.5).clamped()
    assert p.petal_count == 24 and isinstance(p.petal_count, int)
    assert p.radius == 60
    assert p.roundness == 0.0
    assert p.hue == 360
    assert p.sway_freq == 1.0


def test_with_value():
    p = FlowerParams().with_value("petal_count", 4.4)
    assert p.petal_count == 4
    with pytest.raises(KeyError):
        FlowerParams().with_value("colour", 1)


def test_to_dict_has_every_field():
    assert set(FlowerParams().to_dict()) == {
        "petal_count",
        "radius",
        "roundness",
        "curl",
        "hue",
        "saturation",
        "lightness",
        "sway_amp",
        "sway_freq",
    }


def test_stage_from_size():
    assert Stage.from_size(None, None) == Stage(800, 700)
    assert Stage.from_size(1024, 0) == Stage(1024, 700)
    assert Stage.from_size(float("inf"), 600) == Stage(800, 600)


def test_season_themes():
    assert set(SEASON_THEMES) == set(Season)
    assert theme_for(None) is SEASON_THEMES[Season.SPRING]
    assert [theme_for(s).flower_hue for s in ("spring", "summer", "autumn", "winter")] == [
        330,
        200,
        30,
        180,
    ]
