import logging
from datetime import datetime

from village_economy.core.accrual.clock import AccrualClock, AccrualState, ResourceReading, last_tick_at
from village_economy.core.accrual.wakeup_scheduler import WakeupScheduler
from village_economy.core.calculator.calculator import StorageCapacity
from village_economy.core.errors import InsufficientResources
from village_economy.core.model.model import ResourceType, Resources, Village

logger = logging.getLogger(__name__)


class VillageStock:
    """Live stock of one village: one accrual clock per resource.

    Wood, clay and iron are capped by the warehouse, wheat by the granary.
    The village keeps the last known amounts; the clocks only hold the
    projection on top of them until the stock is rebased. Each clock counts
    its ticks from its own anchor, the last completed tick boundary, so a
    payment or a level change never discards a partially produced unit.
    """

    def __init__(self, village: Village, scheduler: WakeupScheduler) -> None:
        self.village = village
        self.scheduler = scheduler
        self.production = Resources()
        self.capacity = StorageCapacity(warehouse=0, granary=0)
        self.clocks: dict[ResourceType, AccrualClock] = {
            t: AccrualClock(t, scheduler) for t in ResourceType
        }
        self._anchors: dict[ResourceType, datetime] = {}

    def start(self, production: Resources, capacity: StorageCapacity, now: datetime) -> None:
        self.production = production
        self.capacity = capacity
        for resource_type, clock in self.clocks.items():
            clock.start(self._reading(resource_type), now)

    def stop(self) -> None:
        for clock in self.clocks.values():
            clock.cancel()

    @property
    def resources(self) -> Resources:
        return Resources(**{t.value: clock.amount for t, clock in self.clocks.items()})

    def projected_resources(self, now: datetime) -> Resources:
        return Resources(**{t.value: clock.projected_amount(now) for t, clock in self.clocks.items()})

    def is_full(self, resource_type: ResourceType) -> bool:
        return self.clocks[resource_type].state == AccrualState.SATURATED

    def rebase(self, production: Resources, capacity: StorageCapacity, now: datetime) -> None:
        """Store the live amounts on the village and restart with new rates."""
        self._store(self.projected_resources(now), now)
        self.start(production, capacity, now)

    def consume(self, cost: Resources, now: datetime) -> None:
        available = self.projected_resources(now)
        if not available.covers(cost):
            raise InsufficientResources(
                f"Village {self.village.id} is missing {available.shortage(cost)} to pay {cost}"
            )
        self._store(available - cost, now)
        self.start(self.production, self.capacity, now)

    def storage_capacity_of(self, resource_type: ResourceType) -> int:
        if resource_type == ResourceType.WHEAT:
            return self.capacity.granary
        return self.capacity.warehouse

    def _reading(self, resource_type: ResourceType) -> ResourceReading:
        return ResourceReading(
            last_known_amount=self.village.resources.get(resource_type),
            updated_at=self._anchors.get(resource_type, self.village.last_updated_at),
            hourly_production=self.production.get(resource_type),
            storage_capacity=self.storage_capacity_of(resource_type),
        )

    def _store(self, resources: Resources, now: datetime) -> None:
        for resource_type, clock in self.clocks.items():
            reading = clock.reading
            if reading is None or clock.projected_amount(now) >= reading.storage_capacity:
                # a full storage has no tick in progress
                self._anchors[resource_type] = now
            else:
                self._anchors[resource_type] = last_tick_at(reading, now)
        self.village.resources = resources
        self.village.last_updated_at = now
        logger.debug("Village %s stock stored at %s: %s", self.village.id, now, resources)
