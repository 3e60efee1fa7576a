import pytest

from village_economy.core.factory.village_size import get_village_size
from village_economy.core.model.model import VillageSize


@pytest.mark.parametrize("coordinates, expected", [
    ((0, 0), VillageSize.XXXXL),
    ((3, 4), VillageSize.XXXXL),
    ((0, 27), VillageSize.MD),
    ((-35, 0), VillageSize.SM),
    ((0, -44), VillageSize.XS),
    ((50, 0), VillageSize.XXS),
    ((60, 60), VillageSize.XXS),
])
def test_village_size_by_distance_from_centre(coordinates, expected):
    assert get_village_size(100, coordinates) == expected


def test_village_size_shrinks_outwards():
    sizes = list(VillageSize)
    ranks = [sizes.index(get_village_size(100, (0, y))) for y in range(0, 51, 5)]

    assert ranks == sorted(ranks, reverse=True)


def test_map_size_must_be_positive():
    with pytest.raises(ValueError):
        get_village_size(0, (0, 0))
