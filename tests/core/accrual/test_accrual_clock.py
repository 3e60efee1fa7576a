"""Tests for resource projection and the AccrualClock state machine."""

import logging
from datetime import timedelta

import pytest

from village_economy.core.accrual.clock import (
    AccrualClock, AccrualState, ResourceReading, last_tick_at, project_amount, tick_at, time_until_next_tick,
)
from village_economy.core.accrual.wakeup_scheduler import WakeupScheduler
from village_economy.core.catalog.buildings_data import FIELD_PRODUCTION
from village_economy.core.model.model import ResourceType

# 12 per hour is one unit every 5 minutes
TICK = timedelta(minutes=5)


def _reading(now, amount=100, production=12, capacity=1000):
    return ResourceReading(
        last_known_amount=amount,
        updated_at=now,
        hourly_production=production,
        storage_capacity=capacity,
    )


def test_tick_interval(now):
    assert _reading(now).tick_interval == TICK
    assert _reading(now, production=3600).tick_interval == timedelta(seconds=1)
    assert _reading(now, production=0).tick_interval is None


def test_projection_counts_whole_ticks(now):
    reading = _reading(now)

    assert project_amount(reading, now) == 100
    assert project_amount(reading, now + timedelta(minutes=4, seconds=59)) == 100
    assert project_amount(reading, now + timedelta(minutes=14)) == 102
    assert project_amount(reading, now + timedelta(hours=1)) == 112


def test_projection_is_idempotent(now):
    reading = _reading(now)
    later = now + timedelta(minutes=37)

    assert project_amount(reading, later) == project_amount(reading, later)


def test_projection_saturates_at_capacity(now):
    reading = _reading(now, amount=995)

    assert project_amount(reading, now + timedelta(hours=1)) == 1000
    assert project_amount(reading, now + timedelta(days=30)) == 1000


def test_projection_without_production_stays_put(now):
    assert project_amount(_reading(now, production=0), now + timedelta(days=1)) == 100


def test_projection_before_reading_does_not_go_back(now):
    assert project_amount(_reading(now), now - timedelta(hours=1)) == 100


def test_time_until_next_tick_is_rest_of_current_interval(now):
    reading = _reading(now)

    assert time_until_next_tick(reading, now + timedelta(minutes=14)) == timedelta(minutes=1)
    assert time_until_next_tick(reading, now + timedelta(minutes=10)) == TICK
    assert time_until_next_tick(_reading(now, production=0), now) is None


@pytest.mark.parametrize("kwargs", [{"amount": -1}, {"production": -5}, {"capacity": -1}])
def test_negative_readings_are_rejected(now, kwargs):
    with pytest.raises(ValueError):
        _reading(now, **kwargs)


def test_start_catches_up_and_arms_next_boundary(now):
    scheduler = WakeupScheduler()
    clock = AccrualClock(ResourceType.WOOD, scheduler)

    clock.start(_reading(now), now + timedelta(minutes=14))

    assert clock.amount == 102
    assert clock.state == AccrualState.CATCHING_UP
    assert clock.next_deadline == now + timedelta(minutes=15)


def test_wakeups_apply_one_unit_per_interval(now):
    scheduler = WakeupScheduler()
    clock = AccrualClock(ResourceType.WOOD, scheduler)
    clock.start(_reading(now), now + timedelta(minutes=14))

    scheduler.run_due(now + timedelta(minutes=15))

    assert clock.amount == 103
    assert clock.state == AccrualState.TICKING
    assert clock.next_deadline == now + timedelta(minutes=20)

    scheduler.run_due(now + timedelta(minutes=32))

    assert clock.amount == 105
    assert clock.next_deadline == now + timedelta(minutes=35)


def test_live_amount_matches_projection(now):
    scheduler = WakeupScheduler()
    clock = AccrualClock(ResourceType.CLAY, scheduler)
    reading = _reading(now)
    clock.start(reading, now + timedelta(minutes=3))

    later = now + timedelta(hours=2, minutes=1)
    scheduler.run_due(later)

    assert clock.amount == project_amount(reading, later) == clock.projected_amount(later)


def test_clock_saturates_and_stops_ticking(now):
    scheduler = WakeupScheduler()
    clock = AccrualClock(ResourceType.IRON, scheduler)
    clock.start(_reading(now, amount=998), now)

    scheduler.run_due(now + timedelta(hours=1))

    assert clock.amount == 1000
    assert clock.state == AccrualState.SATURATED
    assert clock.next_deadline is None
    assert len(scheduler) == 0


def test_full_storage_saturates_on_start(now):
    clock = AccrualClock(ResourceType.WHEAT, WakeupScheduler())

    clock.start(_reading(now, amount=1000), now)

    assert clock.state == AccrualState.SATURATED
    assert clock.amount == 1000


def test_clock_without_production_does_not_tick(now):
    scheduler = WakeupScheduler()
    clock = AccrualClock(ResourceType.WHEAT, scheduler)

    clock.start(_reading(now, production=0), now + timedelta(hours=5))

    assert clock.state == AccrualState.IDLE
    assert clock.amount == 100
    assert scheduler.peek_next_deadline() is None


def test_cancel_stops_further_mutation(now):
    scheduler = WakeupScheduler()
    changes = []
    clock = AccrualClock(ResourceType.WOOD, scheduler, on_change=lambda t, amount: changes.append(amount))
    clock.start(_reading(now), now)

    clock.cancel()
    scheduler.run_due(now + timedelta(hours=1))

    assert clock.state == AccrualState.IDLE
    assert clock.amount == 100
    assert changes == [100]


def test_reset_restarts_from_new_reading(now):
    scheduler = WakeupScheduler()
    clock = AccrualClock(ResourceType.WOOD, scheduler)
    clock.start(_reading(now, amount=998), now)
    scheduler.run_due(now + timedelta(minutes=10))
    assert clock.state == AccrualState.SATURATED

    consumed_at = now + timedelta(minutes=10)
    clock.reset(_reading(consumed_at, amount=500), consumed_at)
    scheduler.run_due(consumed_at + timedelta(minutes=5))

    assert clock.amount == 501
    assert clock.state == AccrualState.TICKING


def test_failing_wakeup_stops_only_its_own_clock(now, caplog):
    scheduler = WakeupScheduler()

    def fail_after_start(resource_type, amount):
        if amount > 100:
            raise RuntimeError("listener broke")

    broken = AccrualClock(ResourceType.WOOD, scheduler, on_change=fail_after_start)
    healthy = AccrualClock(ResourceType.CLAY, scheduler)
    broken.start(_reading(now), now)
    healthy.start(_reading(now), now)

    with caplog.at_level(logging.ERROR):
        scheduler.run_due(now + timedelta(minutes=20))

    assert broken.state == AccrualState.IDLE
    assert broken.next_deadline is None
    assert healthy.amount == 104
    assert healthy.state == AccrualState.TICKING
    assert "ticking stopped" in caplog.text


@pytest.mark.parametrize("hours", [1, 5])
def test_uneven_rate_counts_every_unit_on_the_hour(now, hours):
    reading = _reading(now, amount=0, production=13, capacity=10_000)

    assert project_amount(reading, now + timedelta(hours=hours)) == 13 * hours


def test_every_field_rate_is_exact_after_an_hour(now):
    for production in FIELD_PRODUCTION[1:]:
        reading = _reading(now, amount=0, production=production, capacity=100_000)

        assert project_amount(reading, now + timedelta(hours=1)) == production


def test_next_tick_of_uneven_rate_rounds_up(now):
    reading = _reading(now, amount=0, production=13, capacity=10_000)

    # 3_600_000_000 / 13 = 276_923_076.9 microseconds
    assert time_until_next_tick(reading, now) == timedelta(microseconds=276_923_077)
    assert tick_at(reading, 13) == now + timedelta(hours=1)


def test_clock_on_uneven_rate_stays_in_step_with_projection(now):
    scheduler = WakeupScheduler()
    clock = AccrualClock(ResourceType.WHEAT, scheduler)
    reading = _reading(now, amount=0, production=13, capacity=10_000)
    clock.start(reading, now)

    scheduler.run_due(now + timedelta(hours=5))

    assert clock.amount == 65
    assert clock.next_deadline == tick_at(reading, 66)


def test_last_tick_keeps_partial_progress(now):
    reading = _reading(now)

    assert last_tick_at(reading, now + timedelta(minutes=7)) == now + timedelta(minutes=5)
    assert last_tick_at(_reading(now, production=0), now + timedelta(minutes=7)) == now + timedelta(minutes=7)
