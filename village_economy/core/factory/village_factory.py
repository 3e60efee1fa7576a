import logging
from datetime import datetime

from village_economy.core.calculator.calculator import calculate_population
from village_economy.core.catalog.catalog import BuildingCatalog
from village_economy.core.factory.presets import (
    WALL_FIELD_ID, create_player_village_building_fields, create_resource_fields, expand_layout,
    resources_preset_id, validate_building_fields, village_preset_id,
)
from village_economy.core.factory.village_size import get_village_size
from village_economy.core.model.model import (
    PLAYER_OWNER, BuildingField, DeferredLayout, MaterializedLayout, Player, Resources, Tile, Village, VillageSize,
)
from village_economy.core.model.tribe import Tribe
from village_economy.domain.config import EconomyConfig

logger = logging.getLogger(__name__)

VILLAGE_SIZE_TO_RESOURCE_AMOUNT: dict[VillageSize, int] = {
    VillageSize.XXS: 6_300,
    VillageSize.XS: 6_300,
    VillageSize.SM: 31_300,
    VillageSize.MD: 80_000,
    VillageSize.LG: 160_000,
    VillageSize.XL: 160_000,
    VillageSize.XXL: 160_000,
    VillageSize.XXXL: 160_000,
    VillageSize.XXXXL: 160_000,
}

VILLAGE_SIZE_TO_WALL_LEVEL: dict[VillageSize | str, int] = {
    PLAYER_OWNER: 0,
    VillageSize.XXS: 5,
    VillageSize.XS: 5,
    VillageSize.SM: 10,
    VillageSize.MD: 15,
    VillageSize.LG: 20,
    VillageSize.XL: 20,
    VillageSize.XXL: 20,
    VillageSize.XXXL: 20,
    VillageSize.XXXXL: 20,
}


def create_village_resources(village_size: VillageSize) -> Resources:
    return Resources.uniform(VILLAGE_SIZE_TO_RESOURCE_AMOUNT[village_size])


def create_wall_building_field(tribe: Tribe, village_size: VillageSize | str) -> BuildingField:
    return BuildingField(
        id=WALL_FIELD_ID,
        building_id=tribe.wall_building_id,
        level=VILLAGE_SIZE_TO_WALL_LEVEL[village_size],
    )


def user_village_factory(
    tile: Tile,
    player: Player,
    catalog: BuildingCatalog,
    config: EconomyConfig,
    now: datetime,
) -> Village:
    building_fields = [
        *create_resource_fields(tile.resource_field_composition),
        *create_player_village_building_fields(),
        create_wall_building_field(player.tribe, PLAYER_OWNER),
    ]
    validate_building_fields(building_fields, catalog)

    village = Village(
        id=tile.id,
        name=f"{player.name}'s village",
        coordinates=tile.coordinates,
        player_id=player.id,
        tribe=player.tribe,
        resources=Resources.uniform(config.player_starting_resources),
        last_updated_at=now,
        resource_field_composition=tile.resource_field_composition,
        layout=MaterializedLayout(fields=building_fields),
        wheat_upkeep=config.player_wheat_upkeep,
        is_capital=False,
    )
    logger.info("Created village %s for %s at %s", village.id, player.name, tile.coordinates)
    return village


def npc_village_factory(
    tile: Tile,
    player: Player,
    catalog: BuildingCatalog,
    config: EconomyConfig,
    now: datetime,
) -> Village:
    village_size = get_village_size(config.map_size, tile.coordinates)
    wall = create_wall_building_field(player.tribe, village_size)
    validate_building_fields([wall], catalog)

    layout = DeferredLayout(
        preset_ids=(resources_preset_id(village_size), village_preset_id(village_size)),
        fields=[wall],
    )

    wheat_upkeep = config.npc_wheat_upkeep
    if wheat_upkeep is None:
        expanded = expand_layout(layout, tile.resource_field_composition, catalog)
        wheat_upkeep = calculate_population(expanded.fields, catalog)

    village = Village(
        id=tile.id,
        name=f"{player.name}'s village",
        coordinates=tile.coordinates,
        player_id=player.id,
        tribe=player.tribe,
        resources=create_village_resources(village_size),
        last_updated_at=now,
        resource_field_composition=tile.resource_field_composition,
        layout=layout,
        wheat_upkeep=wheat_upkeep,
        is_capital=False,
    )
    logger.debug("Created %s NPC village %s for %s", village_size.value, village.id, player.name)
    return village


def materialize_village(village: Village, catalog: BuildingCatalog) -> Village:
    """Replace a deferred layout with its expanded building fields, in place."""
    if village.is_deferred:
        village.layout = expand_layout(village.layout, village.resource_field_composition, catalog)
        logger.debug("Materialized village %s with %d building fields", village.id, len(village.building_fields))
    return village


def generate_villages(
    tiles: list[Tile],
    players: list[Player],
    catalog: BuildingCatalog,
    config: EconomyConfig,
    now: datetime,
) -> list[Village]:
    players_by_id = {p.id: p for p in players}
    villages = []
    for tile in tiles:
        if tile.owned_by == PLAYER_OWNER:
            continue
        try:
            player = players_by_id[tile.owned_by]
        except KeyError:
            raise ValueError(f"Tile {tile.id} is owned by unknown player {tile.owned_by}") from None
        villages.append(npc_village_factory(tile, player, catalog, config, now))
    logger.info("Generated %d NPC villages", len(villages))
    return villages
