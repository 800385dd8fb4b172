import itertools

import matplotlib

matplotlib.use("Agg")

import pytest  # noqa: E402

from ikebana_wall.models import FlowerParams, PostedFlower  # noqa: E402

_ids = itertools.count()


@pytest.fixture
def posted():
    """Factory for PostedFlower records with unique ids."""

    def make(seed=1, drop=None, placement_height=None, season=None, params=None):
        return PostedFlower(
            id=f"f{next(_ids)}",
            seed=seed,
            params=params or FlowerParams(),
            drop=drop,
            placement_height=placement_height,
            season=season,
        )

    return make
