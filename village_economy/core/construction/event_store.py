import logging
from datetime import datetime

from village_economy.core.model.model import ConstructionEvent, Village

logger = logging.getLogger(__name__)


class InMemoryEventStore:
    """Keeps queued construction events per village in submission order."""

    def __init__(self, villages: list[Village] | None = None) -> None:
        self._villages: dict[int, Village] = {}
        self._events: list[ConstructionEvent] = []
        for village in villages or []:
            self.register_village(village)

    def register_village(self, village: Village) -> None:
        self._villages[village.id] = village

    def pending_events(self, village_id: int) -> list[ConstructionEvent]:
        return [e for e in self._events if e.village_id == village_id]

    def enqueue(self, event: ConstructionEvent) -> None:
        if event.village_id not in self._villages:
            raise KeyError(f"Village {event.village_id} is not registered in the event store")
        self._events.append(event)
        logger.debug("Enqueued event %s (%s level %s)", event.id, event.building_id, event.level)

    def resolve(self, event_id: str) -> ConstructionEvent:
        event = self._get(event_id)
        village = self._villages[event.village_id]
        # the level is applied before the transition so a failing upgrade leaves the event queued
        village.upgrade_building_field(event.building_field_id, event.level)
        event.resolve()
        self._events.remove(event)
        logger.info("Resolved %s on field %s of village %s, now level %s",
                    event.building_id, event.building_field_id, event.village_id, event.level)
        return event

    def cancel(self, event_id: str) -> ConstructionEvent:
        """Cancel an event together with the later upgrades of the same field that build on it."""
        event = self._get(event_id)
        dependants = [
            e for e in self._events
            if e.village_id == event.village_id
            and e.building_field_id == event.building_field_id
            and e.building_id == event.building_id
            and e.level > event.level
        ]
        for cancelled in (event, *dependants):
            cancelled.cancel()
            self._events.remove(cancelled)
            logger.info("Cancelled event %s (%s level %s)", cancelled.id, cancelled.building_id, cancelled.level)
        return event

    def resolve_due(self, now: datetime) -> list[ConstructionEvent]:
        """Resolve every event whose `resolves_at` has passed, in submission order."""
        due = [e for e in self._events if e.resolves_at <= now]
        return [self.resolve(e.id) for e in due]

    def next_resolution_time(self) -> datetime | None:
        if not self._events:
            return None
        return min(e.resolves_at for e in self._events)

    def _get(self, event_id: str) -> ConstructionEvent:
        event = next((e for e in self._events if e.id == event_id), None)
        if event is None:
            raise KeyError(f"No queued event with id {event_id}")
        return event

    def __len__(self) -> int:
        return len(self._events)
