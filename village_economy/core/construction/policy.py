"""Construction concurrency policies.

Romans have a special ability to build in parallel:
- One timeline for village structures (building fields 19-40)
- One timeline for resource fields (building fields 1-18)

Other tribes serialize every upgrade on a single shared timeline.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from village_economy.core.catalog.catalog import BuildingCatalog
from village_economy.core.model.model import BuildingCategory, ConstructionEvent
from village_economy.core.model.tribe import Tribe


class ConstructionPolicy(ABC):
    """Selects the pending events a new upgrade has to wait for."""

    @abstractmethod
    def relevant_events(
        self,
        pending: Sequence[ConstructionEvent],
        category: BuildingCategory,
        catalog: BuildingCatalog,
    ) -> list[ConstructionEvent]:
        pass


class SerialConstructionPolicy(ConstructionPolicy):
    def relevant_events(self, pending, category, catalog):
        return list(pending)


class ParallelConstructionPolicy(ConstructionPolicy):
    def relevant_events(self, pending, category, catalog):
        return [event for event in pending if catalog.category(event.building_id) == category]


def policy_for_tribe(tribe: Tribe) -> ConstructionPolicy:
    if tribe.builds_in_parallel:
        return ParallelConstructionPolicy()
    return SerialConstructionPolicy()
