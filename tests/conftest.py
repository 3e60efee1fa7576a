from datetime import datetime

import pytest

from village_economy.core.catalog.catalog import BuildingCatalog, BuildingDefinition, BuildingLevel
from village_economy.core.model.model import (
    BuildingCategory, BuildingField, MaterializedLayout, ResourceType, Resources, Village,
)
from village_economy.core.model.tribe import Tribe

NOW = datetime(2024, 1, 1, 12, 0, 0)

CLAY_PIT_DURATIONS = [0, 120, 240, 360]
MAIN_BUILDING_DURATIONS = [0, 1000, 1500, 2000, 2500]


def make_definition(
    building_id: str,
    category: BuildingCategory,
    durations: list[int],
    produces: ResourceType | None = None,
    production: list[int] | None = None,
    population: list[int] | None = None,
    culture_points: list[int] | None = None,
) -> BuildingDefinition:
    levels = tuple(
        BuildingLevel(
            cost=Resources.uniform(10 * level),
            duration_seconds=duration,
            population=population[level] if population else 0,
            culture_points=culture_points[level] if culture_points else 0,
            production=production[level] if production else 0,
        )
        for level, duration in enumerate(durations)
    )
    return BuildingDefinition(id=building_id, name=building_id.title(), category=category,
                              levels=levels, produces=produces)


def _resource_field(building_id: str, produces: ResourceType, durations: list[int]) -> BuildingDefinition:
    return make_definition(
        building_id,
        BuildingCategory.RESOURCE_FIELD,
        durations,
        produces=produces,
        production=[3, 7, 13, 21],
        population=[0, 2, 3, 4],
        culture_points=[0, 1, 1, 2],
    )


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def fixture_catalog() -> BuildingCatalog:
    """Small catalog with round numbers so expectations can be read off directly."""
    return BuildingCatalog([
        _resource_field("WOODCUTTER", ResourceType.WOOD, [0, 100, 200, 300]),
        _resource_field("CLAY_PIT", ResourceType.CLAY, CLAY_PIT_DURATIONS),
        _resource_field("IRON_MINE", ResourceType.IRON, [0, 100, 200, 300]),
        _resource_field("WHEAT_FIELD", ResourceType.WHEAT, [0, 100, 200, 300]),
        make_definition(
            "MAIN_BUILDING",
            BuildingCategory.VILLAGE_STRUCTURE,
            MAIN_BUILDING_DURATIONS,
            population=[0, 2, 3, 4, 5],
            culture_points=[0, 2, 3, 4, 5],
        ),
        make_definition("CITY_WALL", BuildingCategory.VILLAGE_STRUCTURE, [0, 500, 600],
                        culture_points=[0, 1, 1]),
        make_definition("PALISADE", BuildingCategory.VILLAGE_STRUCTURE, [0, 500, 600],
                        culture_points=[0, 1, 1]),
    ])


@pytest.fixture
def village_factory():
    """Return a factory that builds a materialized village around the given fields.

    Usage:
        village = village_factory(fields=[BuildingField(5, "CLAY_PIT", 0)], tribe=Tribe.ROMANS)
    """

    def _factory(
        fields: list[BuildingField] | None = None,
        tribe: Tribe = Tribe.GAULS,
        resources: Resources | None = None,
        village_id: int = 1,
    ) -> Village:
        return Village(
            id=village_id,
            name="Test Village",
            coordinates=(0, 0),
            player_id=1,
            tribe=tribe,
            resources=resources if resources is not None else Resources.uniform(1000),
            last_updated_at=NOW,
            resource_field_composition="4446",
            layout=MaterializedLayout(fields=fields if fields is not None else [
                BuildingField(id=5, building_id="CLAY_PIT", level=0),
                BuildingField(id=38, building_id="MAIN_BUILDING", level=0),
            ]),
        )

    return _factory
