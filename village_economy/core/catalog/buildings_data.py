import math

from village_economy.core.catalog.catalog import BuildingCatalog, BuildingDefinition, BuildingLevel
from village_economy.core.model.model import BuildingCategory, ResourceType, Resources


class TimeT3:
    def __init__(self, a, k=1.16, b=None):
        self.a = a
        self.k = k
        if b is None:
            self.b = 1875 * k
        else:
            self.b = b

    def value_at(self, lvl):
        return self.a * math.pow(self.k, lvl - 1) - self.b


# Hourly production of one resource field by level, at speed 1
FIELD_PRODUCTION = [3, 7, 13, 21, 31, 46, 70, 98, 140, 203, 280,
                    392, 525, 691, 889, 1120, 1400, 1820, 2240, 2800, 3430]

# Warehouse / granary capacity by level; level 0 is the capacity without the building
STORAGE_CAPACITY = [800, 1200, 1700, 2300, 3100, 4000, 5000, 6300, 7800, 9600, 11800,
                    14400, 17600, 21400, 25900, 31300, 37900, 45700, 55100, 66400, 80000]

RESOURCE_FIELD = BuildingCategory.RESOURCE_FIELD
VILLAGE_STRUCTURE = BuildingCategory.VILLAGE_STRUCTURE

# "population" and "culture_points" are the values at level 1
BUILDINGS_DATA = [
    {"id": "WOODCUTTER", "name": "Woodcutter", "category": RESOURCE_FIELD, "produces": ResourceType.WOOD,
     "cost": [40, 100, 50, 60], "k": 1.67, "time": TimeT3(1780 / 3, 1.6, 1000 / 3), "max_level": 20,
     "population": 2, "culture_points": 1},
    {"id": "CLAY_PIT", "name": "Clay Pit", "category": RESOURCE_FIELD, "produces": ResourceType.CLAY,
     "cost": [80, 40, 80, 50], "k": 1.67, "time": TimeT3(1660 / 3, 1.6, 1000 / 3), "max_level": 20,
     "population": 2, "culture_points": 1},
    {"id": "IRON_MINE", "name": "Iron Mine", "category": RESOURCE_FIELD, "produces": ResourceType.IRON,
     "cost": [100, 80, 30, 60], "k": 1.67, "time": TimeT3(2350 / 3, 1.6, 1000 / 3), "max_level": 20,
     "population": 3, "culture_points": 1},
    {"id": "WHEAT_FIELD", "name": "Wheat Field", "category": RESOURCE_FIELD, "produces": ResourceType.WHEAT,
     "cost": [70, 90, 70, 20], "k": 1.67, "time": TimeT3(1450 / 3, 1.6, 1000 / 3), "max_level": 20,
     "population": 0, "culture_points": 1},

    {"id": "SAWMILL", "name": "Sawmill", "cost": [520, 380, 290, 90], "k": 1.80,
     "time": TimeT3(5400, 1.5, 2400), "max_level": 5, "population": 4, "culture_points": 1},
    {"id": "BRICKYARD", "name": "Brickyard", "cost": [440, 480, 320, 50], "k": 1.80,
     "time": TimeT3(5240, 1.5, 2400), "max_level": 5, "population": 3, "culture_points": 1},
    {"id": "IRON_FOUNDRY", "name": "Iron Foundry", "cost": [200, 450, 510, 120], "k": 1.80,
     "time": TimeT3(6480, 1.5, 2400), "max_level": 5, "population": 6, "culture_points": 1},
    {"id": "GRAIN_MILL", "name": "Grain Mill", "cost": [500, 440, 380, 1240], "k": 1.80,
     "time": TimeT3(4240, 1.5, 2400), "max_level": 5, "population": 3, "culture_points": 1},
    {"id": "BAKERY", "name": "Bakery", "cost": [1200, 1480, 870, 1600], "k": 1.80,
     "time": TimeT3(6080, 1.5, 2400), "max_level": 5, "population": 4, "culture_points": 1},

    {"id": "WAREHOUSE", "name": "Warehouse", "cost": [130, 160, 90, 40], "k": 1.28,
     "time": TimeT3(3875), "max_level": 20, "population": 1, "culture_points": 1, "capacity": True},
    {"id": "GRANARY", "name": "Granary", "cost": [80, 100, 70, 20], "k": 1.28,
     "time": TimeT3(3475), "max_level": 20, "population": 1, "culture_points": 1, "capacity": True},
    {"id": "SMITHY", "name": "Smithy", "cost": [180, 250, 500, 160], "k": 1.28,
     "time": TimeT3(3875), "max_level": 20, "population": 4, "culture_points": 2},
    {"id": "MAIN_BUILDING", "name": "Main Building", "cost": [70, 40, 60, 20], "k": 1.28,
     "time": TimeT3(3875), "max_level": 20, "population": 2, "culture_points": 2},
    {"id": "RALLY_POINT", "name": "Rally Point", "cost": [110, 160, 90, 70], "k": 1.28,
     "time": TimeT3(3875), "max_level": 20, "population": 1, "culture_points": 1},
    {"id": "MARKETPLACE", "name": "Marketplace", "cost": [80, 70, 120, 70], "k": 1.28,
     "time": TimeT3(3675), "max_level": 20, "population": 4, "culture_points": 3},
    {"id": "EMBASSY", "name": "Embassy", "cost": [180, 130, 150, 80], "k": 1.28,
     "time": TimeT3(3875), "max_level": 20, "population": 3, "culture_points": 4},
    {"id": "BARRACKS", "name": "Barracks", "cost": [210, 140, 260, 120], "k": 1.28,
     "time": TimeT3(3875), "max_level": 20, "population": 4, "culture_points": 1},
    {"id": "STABLE", "name": "Stable", "cost": [260, 140, 220, 100], "k": 1.28,
     "time": TimeT3(4075), "max_level": 20, "population": 5, "culture_points": 2},
    {"id": "WORKSHOP", "name": "Workshop", "cost": [460, 510, 600, 320], "k": 1.28,
     "time": TimeT3(4875), "max_level": 20, "population": 3, "culture_points": 3},
    {"id": "ACADEMY", "name": "Academy", "cost": [220, 160, 90, 40], "k": 1.28,
     "time": TimeT3(3875), "max_level": 20, "population": 4, "culture_points": 4},
    {"id": "CRANNY", "name": "Cranny", "cost": [40, 50, 30, 10], "k": 1.28,
     "time": TimeT3(2625), "max_level": 10, "population": 0, "culture_points": 1},
    {"id": "TOWN_HALL", "name": "Town Hall", "cost": [1250, 1110, 1260, 600], "k": 1.28,
     "time": TimeT3(14375), "max_level": 20, "population": 4, "culture_points": 5},
    {"id": "RESIDENCE", "name": "Residence", "cost": [580, 460, 350, 180], "k": 1.28,
     "time": TimeT3(3875), "max_level": 20, "population": 1, "culture_points": 2},

    {"id": "CITY_WALL", "name": "City Wall", "cost": [70, 90, 170, 70], "k": 1.28,
     "time": TimeT3(3875), "max_level": 20, "population": 0, "culture_points": 1},
    {"id": "EARTH_WALL", "name": "Earth Wall", "cost": [120, 200, 0, 80], "k": 1.28,
     "time": TimeT3(3875), "max_level": 20, "population": 0, "culture_points": 1},
    {"id": "PALISADE", "name": "Palisade", "cost": [160, 100, 80, 60], "k": 1.28,
     "time": TimeT3(3875), "max_level": 20, "population": 0, "culture_points": 1},
    {"id": "MAKESHIFT_WALL", "name": "Makeshift Wall", "cost": [50, 80, 40, 30], "k": 1.28,
     "time": TimeT3(3875), "max_level": 20, "population": 0, "culture_points": 1},
    {"id": "STONE_WALL", "name": "Stone Wall", "cost": [110, 160, 70, 60], "k": 1.28,
     "time": TimeT3(3875), "max_level": 20, "population": 0, "culture_points": 1},
    {"id": "DEFENSIVE_WALL", "name": "Defensive Wall", "cost": [240, 110, 275, 100], "k": 1.28,
     "time": TimeT3(2800, 1.16, 0), "max_level": 20, "population": 0, "culture_points": 1},
    {"id": "BARRICADE", "name": "Barricade", "cost": [110, 170, 70, 50], "k": 1.28,
     "time": TimeT3(3875), "max_level": 20, "population": 0, "culture_points": 1},
]


def round_mul(v, n):
    return round(v / n) * n


def _cost_at(b: dict, level: int) -> Resources:
    if level == 0:
        return Resources()
    wood, clay, iron, wheat = (round_mul(v * math.pow(b["k"], level - 1), 5) for v in b["cost"])
    return Resources(wood=wood, clay=clay, iron=iron, wheat=wheat)


def _time_at(b: dict, level: int, speed: int) -> int:
    if level == 0:
        return 0
    return max(1, round(b["time"].value_at(level) / speed))


def _population_at(b: dict, level: int) -> int:
    # every level after the first adds one more inhabitant, except for buildings without upkeep
    if level == 0 or b["population"] == 0:
        return 0
    return b["population"] + level - 1


def _culture_points_at(b: dict, level: int) -> int:
    if level == 0:
        return 0
    return round(b["culture_points"] * math.pow(1.2, level - 1))


def _level_row(b: dict, level: int, speed: int) -> BuildingLevel:
    return BuildingLevel(
        cost=_cost_at(b, level),
        duration_seconds=_time_at(b, level, speed),
        population=_population_at(b, level),
        culture_points=_culture_points_at(b, level),
        production=FIELD_PRODUCTION[level] * speed if b.get("produces") else 0,
        capacity=STORAGE_CAPACITY[level] if b.get("capacity") else 0,
    )


def create_building_definition(b: dict, speed: int = 1) -> BuildingDefinition:
    return BuildingDefinition(
        id=b["id"],
        name=b["name"],
        category=b.get("category", VILLAGE_STRUCTURE),
        produces=b.get("produces"),
        levels=tuple(_level_row(b, level, speed) for level in range(b["max_level"] + 1)),
    )


def create_default_catalog(speed: int = 1) -> BuildingCatalog:
    """Build the game catalog for a server running at `speed`."""
    if speed < 1:
        raise ValueError(f"Server speed must be at least 1, got: {speed}")
    return BuildingCatalog(create_building_definition(b, speed) for b in BUILDINGS_DATA)
