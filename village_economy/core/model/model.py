import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from village_economy.core.errors import InvalidEventTransition, InvalidPlacement, UnknownField
from village_economy.core.model.tribe import Tribe

logger = logging.getLogger(__name__)


class ResourceType(Enum):
    WOOD = "wood"
    CLAY = "clay"
    IRON = "iron"
    WHEAT = "wheat"


@dataclass
class Resources:
    wood: int = 0
    clay: int = 0
    iron: int = 0
    wheat: int = 0

    @classmethod
    def of(cls, resource_type: ResourceType, amount: int) -> "Resources":
        return cls(**{resource_type.value: amount})

    @classmethod
    def uniform(cls, amount: int) -> "Resources":
        return cls(wood=amount, clay=amount, iron=amount, wheat=amount)

    def __add__(self, other: "Resources") -> "Resources":
        return Resources(
            wood=self.wood + other.wood,
            clay=self.clay + other.clay,
            iron=self.iron + other.iron,
            wheat=self.wheat + other.wheat,
        )

    def __sub__(self, other: "Resources") -> "Resources":
        return Resources(
            wood=self.wood - other.wood,
            clay=self.clay - other.clay,
            iron=self.iron - other.iron,
            wheat=self.wheat - other.wheat,
        )

    def get(self, resource_type: ResourceType) -> int:
        return getattr(self, resource_type.value)

    def total(self) -> int:
        return self.wood + self.clay + self.iron + self.wheat

    def covers(self, cost: "Resources") -> bool:
        """Return True if every component is at least the matching cost component."""
        return all(self.get(t) >= cost.get(t) for t in ResourceType)

    def is_non_negative(self) -> bool:
        return all(self.get(t) >= 0 for t in ResourceType)

    def shortage(self, cost: "Resources") -> "Resources":
        """Return how much is missing to pay `cost`, floored at 0 per resource."""
        return Resources(**{t.value: max(0, cost.get(t) - self.get(t)) for t in ResourceType})


class BuildingCategory(Enum):
    RESOURCE_FIELD = "resource_field"
    VILLAGE_STRUCTURE = "village_structure"


@dataclass
class BuildingField:
    id: int
    building_id: str
    level: int = 0


@dataclass(frozen=True)
class MaterializedLayout:
    fields: list[BuildingField]


# NPC villages keep their large default layouts as preset ids and only carry the
# placements that must exist from the start (the wall).
@dataclass(frozen=True)
class DeferredLayout:
    preset_ids: tuple[str, ...]
    fields: list[BuildingField] = field(default_factory=list)


VillageLayout = MaterializedLayout | DeferredLayout


@dataclass
class Village:
    id: int
    name: str
    coordinates: tuple[int, int]
    player_id: int
    tribe: Tribe
    resources: Resources
    last_updated_at: datetime
    resource_field_composition: str
    layout: VillageLayout
    wheat_upkeep: int = 0
    is_capital: bool = False

    @property
    def building_fields(self) -> list[BuildingField]:
        return self.layout.fields

    @property
    def is_deferred(self) -> bool:
        return isinstance(self.layout, DeferredLayout)

    def get_building_field(self, building_field_id: int) -> BuildingField:
        found = next((f for f in self.building_fields if f.id == building_field_id), None)
        if found is None:
            raise UnknownField(self.id, building_field_id)
        return found

    def add_building_field(self, building_field: BuildingField) -> None:
        if any(f.id == building_field.id for f in self.building_fields):
            raise InvalidPlacement(f"Village {self.id} already has a building on field {building_field.id}")
        self.building_fields.append(building_field)

    def upgrade_building_field(self, building_field_id: int, level: int) -> None:
        building_field = self.get_building_field(building_field_id)
        if level != building_field.level + 1:
            raise InvalidPlacement(
                f"Field {building_field_id} of village {self.id} is level {building_field.level}, "
                f"cannot apply level {level}"
            )
        building_field.level = level
        logger.debug("Village %s field %s (%s) is now level %s",
                      self.id, building_field_id, building_field.building_id, level)


class EventStatus(Enum):
    QUEUED = "queued"
    RESOLVED = "resolved"
    CANCELLED = "cancelled"


@dataclass(kw_only=True)
class ConstructionEvent:
    village_id: int
    building_id: str
    building_field_id: int
    level: int
    resolves_at: datetime
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: EventStatus = EventStatus.QUEUED

    def is_queued(self) -> bool:
        return self.status == EventStatus.QUEUED

    def resolve(self) -> None:
        self._transition(EventStatus.RESOLVED)

    def cancel(self) -> None:
        self._transition(EventStatus.CANCELLED)

    def _transition(self, status: EventStatus) -> None:
        if not self.is_queued():
            raise InvalidEventTransition(f"Event {self.id} is {self.status.value}, cannot become {status.value}")
        self.status = status


@dataclass
class Player:
    id: int
    name: str
    tribe: Tribe


PLAYER_OWNER = "player"


@dataclass
class Tile:
    id: int
    coordinates: tuple[int, int]
    resource_field_composition: str
    # Either PLAYER_OWNER or the id of the NPC player holding the tile
    owned_by: str | int


class VillageSize(Enum):
    XXS = "xxs"
    XS = "xs"
    SM = "sm"
    MD = "md"
    LG = "lg"
    XL = "xl"
    XXL = "2xl"
    XXXL = "3xl"
    XXXXL = "4xl"
