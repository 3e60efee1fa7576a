import math

from village_economy.core.model.model import VillageSize

# (max distance from the map centre as a share of the map radius, size)
_SIZE_BANDS: list[tuple[float, VillageSize]] = [
    (0.1, VillageSize.XXXXL),
    (0.2, VillageSize.XXXL),
    (0.3, VillageSize.XXL),
    (0.4, VillageSize.XL),
    (0.5, VillageSize.LG),
    (0.6, VillageSize.MD),
    (0.75, VillageSize.SM),
    (0.9, VillageSize.XS),
]


def get_village_size(map_size: int, coordinates: tuple[int, int]) -> VillageSize:
    """Villages grow larger the closer they are to the centre of the map."""
    if map_size <= 0:
        raise ValueError(f"map_size must be positive, got: {map_size}")
    x, y = coordinates
    share = math.hypot(x, y) / (map_size / 2)
    for limit, size in _SIZE_BANDS:
        if share <= limit:
            return size
    return VillageSize.XXS
