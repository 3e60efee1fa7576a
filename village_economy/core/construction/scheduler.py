import logging
from datetime import datetime, timedelta
from typing import Sequence

from village_economy.core.catalog.catalog import BuildingCatalog
from village_economy.core.construction.policy import ConstructionPolicy, policy_for_tribe
from village_economy.core.errors import AlreadyMaxLevel
from village_economy.core.model.model import ConstructionEvent, Village
from village_economy.core.model.tribe import Tribe

logger = logging.getLogger(__name__)


class ConstructionScheduler:
    """Computes when a newly queued upgrade resolves.

    The scheduler is stateless: the event store owns the lifecycle of the
    events and must record `resolves_at` exactly as returned here.
    """

    def __init__(self, catalog: BuildingCatalog, policy: ConstructionPolicy) -> None:
        self.catalog = catalog
        self.policy = policy

    @classmethod
    def for_tribe(cls, catalog: BuildingCatalog, tribe: Tribe) -> "ConstructionScheduler":
        return cls(catalog, policy_for_tribe(tribe))

    def effective_level(self, village: Village, building_field_id: int, pending: Sequence[ConstructionEvent]) -> int:
        """Stored level plus every queued upgrade of the same building on the same field."""
        building_field = village.get_building_field(building_field_id)
        queued = [
            e for e in pending
            if e.building_field_id == building_field_id and e.building_id == building_field.building_id
        ]
        return building_field.level + len(queued)

    def calculate_resolves_at(
        self,
        village: Village,
        building_field_id: int,
        pending: Sequence[ConstructionEvent],
        now: datetime,
    ) -> datetime:
        building_id = village.get_building_field(building_field_id).building_id
        definition = self.catalog.definition(building_id)

        current_level = self.effective_level(village, building_field_id, pending)
        if current_level >= definition.max_level:
            raise AlreadyMaxLevel(building_id, definition.max_level)

        duration = timedelta(seconds=self.catalog.duration(building_id, current_level + 1))
        relevant = self.policy.relevant_events(pending, definition.category, self.catalog)

        if not relevant:
            return now + duration
        # Each queued event already includes its predecessors, so only the tail matters
        return relevant[-1].resolves_at + duration

    def create_event(
        self,
        village: Village,
        building_field_id: int,
        pending: Sequence[ConstructionEvent],
        now: datetime,
    ) -> ConstructionEvent:
        resolves_at = self.calculate_resolves_at(village, building_field_id, pending, now)
        building_field = village.get_building_field(building_field_id)
        event = ConstructionEvent(
            village_id=village.id,
            building_id=building_field.building_id,
            building_field_id=building_field_id,
            level=self.effective_level(village, building_field_id, pending) + 1,
            resolves_at=resolves_at,
        )
        logger.info("Scheduled %s on field %s of village %s to level %s at %s",
                    event.building_id, building_field_id, village.id, event.level, resolves_at)
        return event
