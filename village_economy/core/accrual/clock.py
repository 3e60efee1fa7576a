"""Continuous resource accrual.

A resource grows by one unit every `1 hour / hourly_production` until it
reaches the storage capacity. `project_amount` is the pure projection, the
`AccrualClock` state machine keeps a live amount in step with it through
wakeups registered on a `WakeupScheduler`:

    IDLE -> CATCHING_UP -> TICKING -> SATURATED

`start` catches up on the ticks missed since the last reading and arms the
first wakeup at the next tick boundary; every wakeup applies exactly one unit
and re-arms at the following boundary until the clock saturates. Boundaries
are counted in integer microseconds from the reading, so rounding never drifts.
`cancel` returns the clock to IDLE from any state.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable

from village_economy.core.accrual.wakeup_scheduler import Wakeup, WakeupScheduler
from village_economy.core.model.model import ResourceType

logger = logging.getLogger(__name__)

ONE_HOUR = timedelta(hours=1)
ONE_MICROSECOND = timedelta(microseconds=1)
MICROSECONDS_PER_HOUR = ONE_HOUR // ONE_MICROSECOND


@dataclass(frozen=True)
class ResourceReading:
    last_known_amount: int
    updated_at: datetime
    hourly_production: int
    storage_capacity: int

    def __post_init__(self):
        if self.last_known_amount < 0:
            raise ValueError(f"Resource amount cannot be negative, got: {self.last_known_amount}")
        # TODO: support consumption (negative production) once wheat starvation is modelled
        if self.hourly_production < 0:
            raise ValueError(f"Hourly production cannot be negative, got: {self.hourly_production}")
        if self.storage_capacity < 0:
            raise ValueError(f"Storage capacity cannot be negative, got: {self.storage_capacity}")

    @property
    def tick_interval(self) -> timedelta | None:
        """Nominal interval between units, rounded to microseconds; tick boundaries use `tick_at`."""
        if self.hourly_production == 0:
            return None
        return ONE_HOUR / self.hourly_production


def _elapsed(reading: ResourceReading, now: datetime) -> timedelta:
    return max(now - reading.updated_at, timedelta(0))


def whole_ticks(reading: ResourceReading, now: datetime) -> int:
    """Units produced between the reading and `now`, counted in exact integer microseconds."""
    elapsed_us = _elapsed(reading, now) // ONE_MICROSECOND
    return elapsed_us * reading.hourly_production // MICROSECONDS_PER_HOUR


def tick_at(reading: ResourceReading, tick: int) -> datetime:
    """Earliest instant at which `tick` whole units have been produced."""
    # ceiling division, so the boundary never lands before the unit is complete
    offset_us = -(-tick * MICROSECONDS_PER_HOUR // reading.hourly_production)
    return reading.updated_at + timedelta(microseconds=offset_us)


def project_amount(reading: ResourceReading, now: datetime) -> int:
    """Amount at `now`: last known amount plus one unit per whole tick, capped by storage."""
    if reading.hourly_production == 0:
        return min(reading.storage_capacity, reading.last_known_amount)
    return min(reading.storage_capacity, reading.last_known_amount + whole_ticks(reading, now))


def next_tick_at(reading: ResourceReading, now: datetime) -> datetime | None:
    if reading.hourly_production == 0:
        return None
    return tick_at(reading, whole_ticks(reading, now) + 1)


def last_tick_at(reading: ResourceReading, now: datetime) -> datetime:
    """Boundary of the last completed tick, so a restart keeps the partial tick in progress."""
    if reading.hourly_production == 0:
        return max(now, reading.updated_at)
    return tick_at(reading, whole_ticks(reading, now))


def time_until_next_tick(reading: ResourceReading, now: datetime) -> timedelta | None:
    deadline = next_tick_at(reading, now)
    if deadline is None:
        return None
    return deadline - now


class AccrualState(Enum):
    IDLE = "idle"
    CATCHING_UP = "catching_up"
    TICKING = "ticking"
    SATURATED = "saturated"


class AccrualClock:
    def __init__(
        self,
        resource_type: ResourceType,
        scheduler: WakeupScheduler,
        on_change: Callable[[ResourceType, int], None] | None = None,
    ) -> None:
        self.resource_type = resource_type
        self.scheduler = scheduler
        self.on_change = on_change
        self.state: AccrualState = AccrualState.IDLE
        self.amount: int = 0
        self.next_deadline: datetime | None = None
        self._reading: ResourceReading | None = None
        self._wakeup: Wakeup | None = None

    @property
    def reading(self) -> ResourceReading | None:
        return self._reading

    def start(self, reading: ResourceReading, now: datetime) -> None:
        self.cancel()
        self._reading = reading
        self.state = AccrualState.CATCHING_UP
        self._set_amount(project_amount(reading, now))

        if self.amount >= reading.storage_capacity:
            self._saturate()
            return

        deadline = next_tick_at(reading, now)
        if deadline is None:
            # nothing is produced, so there is nothing to tick
            self.state = AccrualState.IDLE
            return
        self._arm(deadline)

    def reset(self, reading: ResourceReading, now: datetime) -> None:
        """Restart from a new reading after consumption or a capacity change."""
        self.start(reading, now)

    def cancel(self) -> None:
        if self._wakeup is not None:
            self.scheduler.cancel(self._wakeup)
            self._wakeup = None
        self.next_deadline = None
        self.state = AccrualState.IDLE

    def projected_amount(self, now: datetime) -> int:
        if self._reading is None:
            return self.amount
        return project_amount(self._reading, now)

    def _on_deadline(self, deadline: datetime) -> None:
        if self.state not in (AccrualState.CATCHING_UP, AccrualState.TICKING):
            return
        self._wakeup = None
        try:
            self._tick(deadline)
        except Exception:
            logger.exception("Accrual of %s failed at %s, ticking stopped until reset",
                             self.resource_type.value, deadline)
            self.cancel()

    def _tick(self, deadline: datetime) -> None:
        capacity = self._reading.storage_capacity
        self._set_amount(min(capacity, self.amount + 1))
        if self.amount >= capacity:
            self._saturate()
            return
        self.state = AccrualState.TICKING
        self._arm(next_tick_at(self._reading, deadline))

    def _arm(self, deadline: datetime) -> None:
        self.next_deadline = deadline
        self._wakeup = self.scheduler.schedule(deadline, self._on_deadline)

    def _saturate(self) -> None:
        self.next_deadline = None
        self.state = AccrualState.SATURATED
        logger.debug("%s storage is full at %s", self.resource_type.value, self.amount)

    def _set_amount(self, amount: int) -> None:
        self.amount = amount
        if self.on_change is not None:
            self.on_change(self.resource_type, amount)
