import logging
import signal
import time
from dataclasses import dataclass
from datetime import datetime
from types import FrameType
from typing import Callable

import schedule

from village_economy.core.accrual.village_stock import VillageStock
from village_economy.core.accrual.wakeup_scheduler import WakeupScheduler
from village_economy.core.calculator.calculator import (
    StorageCapacity, calculate_culture_points, calculate_population, calculate_resource_production,
    calculate_storage_capacity,
)
from village_economy.core.catalog.catalog import BuildingCatalog
from village_economy.core.construction.scheduler import ConstructionScheduler
from village_economy.core.factory.village_factory import materialize_village
from village_economy.core.model.model import ConstructionEvent, Resources, Village
from village_economy.core.protocols.event_store_protocol import EventStoreProtocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VillageSummary:
    resources: Resources
    hourly_production: Resources
    storage_capacity: StorageCapacity
    population: int
    culture_points: int
    pending_events: int


class Simulation:
    """Runs the economy of one village: construction queue plus live stock."""

    TICK_CHECK_INTERVAL: int = 1  # seconds (fallback)

    def __init__(
        self,
        village: Village,
        catalog: BuildingCatalog,
        event_store: EventStoreProtocol,
        clock: Callable[[], datetime] = datetime.now,
        tick_check_interval: int = TICK_CHECK_INTERVAL,
    ) -> None:
        self.village = village
        self.catalog = catalog
        self.event_store = event_store
        self.clock = clock
        self.tick_check_interval = tick_check_interval
        self.wakeups = WakeupScheduler()
        self.construction_scheduler = ConstructionScheduler.for_tribe(catalog, village.tribe)
        self.stock = VillageStock(village, self.wakeups)
        self._running: bool = False
        self._tick_job = None

        event_store.register_village(village)

    def start(self, now: datetime) -> None:
        materialize_village(self.village, self.catalog)
        self.stock.start(self.hourly_production(), self.storage_capacity(), now)
        logger.info("Simulation of village %s started at %s", self.village.id, now)

    def stop(self) -> None:
        self.stock.stop()

    def hourly_production(self) -> Resources:
        production = calculate_resource_production(self.village.building_fields, self.catalog)
        net_wheat = production.wheat - self.village.wheat_upkeep
        if net_wheat < 0:
            logger.warning("Village %s consumes %s more wheat than it produces, accrual stops at 0",
                           self.village.id, -net_wheat)
        production.wheat = max(0, net_wheat)
        return production

    def storage_capacity(self) -> StorageCapacity:
        return calculate_storage_capacity(self.village.building_fields, self.catalog)

    def request_upgrade(self, building_field_id: int, now: datetime) -> ConstructionEvent:
        """Schedule, pay for and enqueue the next level of a building field."""
        self.advance(now)
        pending = self.event_store.pending_events(self.village.id)
        event = self.construction_scheduler.create_event(self.village, building_field_id, pending, now)
        cost = self.catalog.level_row(event.building_id, event.level).cost
        self.stock.consume(cost, now)
        self.event_store.enqueue(event)
        return event

    def cancel_upgrade(self, event_id: str) -> ConstructionEvent:
        return self.event_store.cancel(event_id)

    def advance(self, now: datetime) -> list[ConstructionEvent]:
        """Bring the village up to `now`, applying resolutions at their own timestamps."""
        resolved: list[ConstructionEvent] = []
        while (next_time := self.event_store.next_resolution_time()) is not None and next_time <= now:
            self.wakeups.run_due(next_time)
            try:
                resolved.extend(self.event_store.resolve_due(next_time))
            finally:
                # production and storage may have changed with the new levels
                self.stock.rebase(self.hourly_production(), self.storage_capacity(), next_time)
        self.wakeups.run_due(now)
        return resolved

    def summary(self) -> VillageSummary:
        fields = self.village.building_fields
        return VillageSummary(
            resources=self.stock.resources,
            hourly_production=self.stock.production,
            storage_capacity=self.stock.capacity,
            population=calculate_population(fields, self.catalog),
            culture_points=calculate_culture_points(fields, self.catalog),
            pending_events=len(self.event_store.pending_events(self.village.id)),
        )

    def _advance_to_now(self) -> None:
        try:
            for event in self.advance(self.clock()):
                logger.info("%s reached level %s", event.building_id, event.level)
        except Exception as e:
            logger.error(f"Advancing village {self.village.id} failed: {e}", exc_info=True)
            self._running = False

    def _setup_signal_handlers(self) -> None:
        """Setup graceful shutdown handlers for SIGINT and SIGTERM."""
        signal.signal(signal.SIGINT, self._shutdown_handler)
        signal.signal(signal.SIGTERM, self._shutdown_handler)

    def _shutdown_handler(self, signum: int, frame: FrameType | None) -> None:
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        self._running = False

    def run(self) -> None:
        """Advance the village in real time until interrupted."""
        self._setup_signal_handlers()
        self._running = True
        self.start(self.clock())
        self._tick_job = schedule.every(self.tick_check_interval).seconds.do(self._advance_to_now)

        while self._running:
            schedule.run_pending()
            time.sleep(0.1)  # Small sleep to prevent CPU spinning

        self._cleanup()

    def _cleanup(self) -> None:
        logger.info("Cleaning up...")
        if self._tick_job is not None:
            schedule.cancel_job(self._tick_job)
            self._tick_job = None
        self.stop()
        summary = self.summary()
        logger.info("Shutdown complete. Stock %s, %d pending events.", summary.resources, summary.pending_events)
