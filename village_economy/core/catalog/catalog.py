"""Read-only building catalog.

The catalog is built once and injected into every calculator, so tests can run
against small fixture catalogs instead of the full game tables.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from village_economy.core.errors import AlreadyMaxLevel, LevelOutOfRange, UnknownBuilding
from village_economy.core.model.model import BuildingCategory, ResourceType, Resources

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildingLevel:
    """Row `L` of a building table.

    `cost` and `duration_seconds` describe the upgrade *to* level L, the other
    values describe the building while it stands at level L.
    """
    cost: Resources = field(default_factory=Resources)
    duration_seconds: int = 0
    population: int = 0
    culture_points: int = 0
    production: int = 0
    capacity: int = 0


@dataclass(frozen=True)
class BuildingDefinition:
    id: str
    name: str
    category: BuildingCategory
    levels: tuple[BuildingLevel, ...]
    produces: ResourceType | None = None

    def __post_init__(self):
        if not self.levels:
            raise ValueError(f"Building {self.id} has no level table")
        if (self.category == BuildingCategory.RESOURCE_FIELD) != (self.produces is not None):
            raise ValueError(f"Building {self.id}: only resource fields produce a resource")

    @property
    def max_level(self) -> int:
        return len(self.levels) - 1

    @property
    def is_resource_field(self) -> bool:
        return self.category == BuildingCategory.RESOURCE_FIELD


@dataclass
class BuildingCost:
    target_level: int
    resources: Resources
    total: int
    time_seconds: int
    time_formatted: str


class BuildingCatalog:
    def __init__(self, definitions: Iterable[BuildingDefinition]) -> None:
        self._definitions: dict[str, BuildingDefinition] = {}
        for definition in definitions:
            if definition.id in self._definitions:
                raise ValueError(f"Building {definition.id} is defined twice")
            self._definitions[definition.id] = definition
        logger.debug("Building catalog created with %d buildings", len(self._definitions))

    def __contains__(self, building_id: str) -> bool:
        return building_id in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    @property
    def building_ids(self) -> list[str]:
        return list(self._definitions)

    def definition(self, building_id: str) -> BuildingDefinition:
        try:
            return self._definitions[building_id]
        except KeyError:
            raise UnknownBuilding(building_id) from None

    def level_row(self, building_id: str, level: int) -> BuildingLevel:
        definition = self.definition(building_id)
        if not 0 <= level <= definition.max_level:
            raise LevelOutOfRange(building_id, level, definition.max_level)
        return definition.levels[level]

    def category(self, building_id: str) -> BuildingCategory:
        return self.definition(building_id).category

    def max_level(self, building_id: str) -> int:
        return self.definition(building_id).max_level

    def duration(self, building_id: str, level: int) -> int:
        return self.level_row(building_id, level).duration_seconds

    def upgrade_details(self, building_id: str, current_level: int) -> BuildingCost:
        """Cost and duration of the next level of a building standing at `current_level`."""
        definition = self.definition(building_id)
        if current_level >= definition.max_level:
            raise AlreadyMaxLevel(building_id, definition.max_level)

        row = self.level_row(building_id, current_level + 1)
        return BuildingCost(
            target_level=current_level + 1,
            resources=row.cost,
            total=row.cost.total(),
            time_seconds=row.duration_seconds,
            time_formatted=format_time(row.duration_seconds),
        )


def format_time(seconds: int) -> str:
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    seconds = seconds % 60
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
