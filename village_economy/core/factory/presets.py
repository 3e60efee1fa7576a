"""Building field layouts and the preset ids NPC villages defer them behind.

Building field ids 1-18 are resource fields, 19-40 village structures
(39 is the rally point, 40 the wall).
"""

from typing import Iterable

from village_economy.core.catalog.catalog import BuildingCatalog
from village_economy.core.errors import InvalidPlacement
from village_economy.core.model.model import (
    BuildingField, DeferredLayout, MaterializedLayout, ResourceType, VillageLayout, VillageSize,
)

RESOURCE_FIELD_IDS = range(1, 19)
VILLAGE_STRUCTURE_IDS = range(19, 41)
MAIN_BUILDING_FIELD_ID = 38
RALLY_POINT_FIELD_ID = 39
WALL_FIELD_ID = 40

# wood, clay, iron, wheat slot counts
RESOURCE_FIELD_COMPOSITIONS: dict[str, tuple[int, int, int, int]] = {
    "4446": (4, 4, 4, 6),
    "5436": (5, 4, 3, 6),
    "5346": (5, 3, 4, 6),
    "4536": (4, 5, 3, 6),
    "4356": (4, 3, 5, 6),
    "3546": (3, 5, 4, 6),
    "3456": (3, 4, 5, 6),
    "4437": (4, 4, 3, 7),
    "4347": (4, 3, 4, 7),
    "3447": (3, 4, 4, 7),
    "3339": (3, 3, 3, 9),
    "11115": (1, 1, 1, 15),
    "00018": (0, 0, 0, 18),
}

RESOURCE_TYPE_TO_BUILDING_ID: dict[ResourceType, str] = {
    ResourceType.WOOD: "WOODCUTTER",
    ResourceType.CLAY: "CLAY_PIT",
    ResourceType.IRON: "IRON_MINE",
    ResourceType.WHEAT: "WHEAT_FIELD",
}

PLAYER_VILLAGE_BUILDING_FIELDS: list[tuple[int, str, int]] = [
    (MAIN_BUILDING_FIELD_ID, "MAIN_BUILDING", 1),
    (RALLY_POINT_FIELD_ID, "RALLY_POINT", 1),
]

VILLAGE_SIZE_TO_RESOURCE_FIELD_LEVEL: dict[VillageSize, int] = {
    VillageSize.XXS: 0,
    VillageSize.XS: 1,
    VillageSize.SM: 3,
    VillageSize.MD: 5,
    VillageSize.LG: 7,
    VillageSize.XL: 8,
    VillageSize.XXL: 9,
    VillageSize.XXXL: 10,
    VillageSize.XXXXL: 10,
}

# NPC village structures, in the order they appear as villages grow
NPC_VILLAGE_STRUCTURES: list[tuple[int, str]] = [
    (MAIN_BUILDING_FIELD_ID, "MAIN_BUILDING"),
    (RALLY_POINT_FIELD_ID, "RALLY_POINT"),
    (19, "WAREHOUSE"),
    (20, "GRANARY"),
    (21, "CRANNY"),
    (22, "MARKETPLACE"),
    (23, "BARRACKS"),
    (24, "RESIDENCE"),
    (25, "ACADEMY"),
    (26, "SMITHY"),
    (27, "STABLE"),
    (28, "TOWN_HALL"),
    (29, "WORKSHOP"),
]

# (number of structures from NPC_VILLAGE_STRUCTURES, their level)
VILLAGE_SIZE_TO_STRUCTURE_PRESET: dict[VillageSize, tuple[int, int]] = {
    VillageSize.XXS: (2, 1),
    VillageSize.XS: (4, 3),
    VillageSize.SM: (6, 5),
    VillageSize.MD: (8, 8),
    VillageSize.LG: (10, 10),
    VillageSize.XL: (11, 12),
    VillageSize.XXL: (12, 15),
    VillageSize.XXXL: (13, 18),
    VillageSize.XXXXL: (13, 20),
}

RESOURCES_PRESET_PREFIX = "resources-"
VILLAGE_PRESET_PREFIX = "village-"


def resources_preset_id(size: VillageSize) -> str:
    return f"{RESOURCES_PRESET_PREFIX}{size.value}"


def village_preset_id(size: VillageSize) -> str:
    return f"{VILLAGE_PRESET_PREFIX}{size.value}"


def resource_field_slots(composition: str) -> list[ResourceType]:
    """Resource type of each of the 18 resource field slots, in field id order."""
    try:
        counts = RESOURCE_FIELD_COMPOSITIONS[composition]
    except KeyError:
        raise InvalidPlacement(f"Unknown resource field composition {composition!r}") from None
    slots = []
    for resource_type, count in zip(ResourceType, counts):
        slots.extend([resource_type] * count)
    return slots


def create_resource_fields(composition: str, level: int = 0) -> list[BuildingField]:
    return [
        BuildingField(id=field_id, building_id=RESOURCE_TYPE_TO_BUILDING_ID[resource_type], level=level)
        for field_id, resource_type in zip(RESOURCE_FIELD_IDS, resource_field_slots(composition))
    ]


def create_player_village_building_fields() -> list[BuildingField]:
    return [BuildingField(id=i, building_id=b, level=lvl) for i, b, lvl in PLAYER_VILLAGE_BUILDING_FIELDS]


def expand_preset(preset_id: str, composition: str, catalog: BuildingCatalog) -> list[BuildingField]:
    """Materialize the building fields a preset id stands for."""
    if preset_id.startswith(RESOURCES_PRESET_PREFIX):
        size = _parse_size(preset_id, RESOURCES_PRESET_PREFIX)
        fields = create_resource_fields(composition, VILLAGE_SIZE_TO_RESOURCE_FIELD_LEVEL[size])
    elif preset_id.startswith(VILLAGE_PRESET_PREFIX):
        size = _parse_size(preset_id, VILLAGE_PRESET_PREFIX)
        count, level = VILLAGE_SIZE_TO_STRUCTURE_PRESET[size]
        fields = [
            BuildingField(id=field_id, building_id=building_id, level=min(level, catalog.max_level(building_id)))
            for field_id, building_id in NPC_VILLAGE_STRUCTURES[:count]
        ]
    else:
        raise InvalidPlacement(f"Unknown village preset {preset_id!r}")

    validate_building_fields(fields, catalog)
    return fields


def expand_layout(layout: VillageLayout, composition: str, catalog: BuildingCatalog) -> MaterializedLayout:
    if isinstance(layout, MaterializedLayout):
        return layout
    fields = [BuildingField(id=f.id, building_id=f.building_id, level=f.level) for f in layout.fields]
    for preset_id in layout.preset_ids:
        fields.extend(expand_preset(preset_id, composition, catalog))
    fields.sort(key=lambda f: f.id)
    validate_building_fields(fields, catalog)
    return MaterializedLayout(fields=fields)


def validate_building_fields(building_fields: Iterable[BuildingField], catalog: BuildingCatalog) -> None:
    seen: set[int] = set()
    for building_field in building_fields:
        if building_field.id in seen:
            raise InvalidPlacement(f"Building field {building_field.id} is used twice")
        seen.add(building_field.id)

        definition = catalog.definition(building_field.building_id)
        if building_field.id in RESOURCE_FIELD_IDS and not definition.is_resource_field:
            raise InvalidPlacement(f"{definition.id} cannot be placed on resource field {building_field.id}")
        if building_field.id in VILLAGE_STRUCTURE_IDS and definition.is_resource_field:
            raise InvalidPlacement(f"{definition.id} cannot be placed on village field {building_field.id}")
        if building_field.id not in RESOURCE_FIELD_IDS and building_field.id not in VILLAGE_STRUCTURE_IDS:
            raise InvalidPlacement(f"Building field {building_field.id} does not exist")
        if not 0 <= building_field.level <= definition.max_level:
            raise InvalidPlacement(
                f"{definition.id} on field {building_field.id} has level {building_field.level}, "
                f"max is {definition.max_level}"
            )


def _parse_size(preset_id: str, prefix: str) -> VillageSize:
    try:
        return VillageSize(preset_id.removeprefix(prefix))
    except ValueError:
        raise InvalidPlacement(f"Unknown village preset {preset_id!r}") from None
