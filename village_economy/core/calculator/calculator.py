"""Pure aggregations over a village's building fields.

None of these functions mutate the fields they are given, and all of them let
catalog errors propagate to the caller.
"""

from dataclasses import dataclass
from typing import Iterable

from village_economy.core.catalog.buildings_data import STORAGE_CAPACITY
from village_economy.core.catalog.catalog import BuildingCatalog
from village_economy.core.model.model import BuildingField, Resources

WAREHOUSE_ID = "WAREHOUSE"
GRANARY_ID = "GRANARY"


@dataclass(frozen=True)
class StorageCapacity:
    warehouse: int
    granary: int


def calculate_resource_production(building_fields: Iterable[BuildingField], catalog: BuildingCatalog) -> Resources:
    """Hourly production of every resource field, summed per resource.

    Level 0 fields still produce the baseline amount of their level 0 row.
    """
    production = Resources()
    for building_field in building_fields:
        definition = catalog.definition(building_field.building_id)
        if not definition.is_resource_field:
            continue
        row = catalog.level_row(building_field.building_id, building_field.level)
        production += Resources.of(definition.produces, row.production)
    return production


def calculate_population(building_fields: Iterable[BuildingField], catalog: BuildingCatalog) -> int:
    return sum(
        catalog.level_row(f.building_id, f.level).population
        for f in building_fields
        if f.level > 0
    )


def calculate_culture_points(building_fields: Iterable[BuildingField], catalog: BuildingCatalog) -> int:
    return sum(
        catalog.level_row(f.building_id, f.level).culture_points
        for f in building_fields
        if f.level > 0
    )


def calculate_storage_capacity(building_fields: Iterable[BuildingField], catalog: BuildingCatalog) -> StorageCapacity:
    building_fields = list(building_fields)
    return StorageCapacity(
        warehouse=_capacity_of(building_fields, catalog, WAREHOUSE_ID),
        granary=_capacity_of(building_fields, catalog, GRANARY_ID),
    )


def _capacity_of(building_fields: list[BuildingField], catalog: BuildingCatalog, building_id: str) -> int:
    built = [f for f in building_fields if f.building_id == building_id and f.level > 0]
    if not built:
        return STORAGE_CAPACITY[0]
    # several warehouses (or granaries) add up, the base capacity is replaced
    return sum(catalog.level_row(f.building_id, f.level).capacity for f in built)
