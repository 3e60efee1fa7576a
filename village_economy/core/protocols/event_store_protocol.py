from __future__ import annotations

from datetime import datetime
from typing import Protocol

from village_economy.core.model.model import ConstructionEvent, Village


class EventStoreProtocol(Protocol):
    """System of record for construction events.

    The scheduler only computes `resolves_at`; stores keep events in
    submission order and own every lifecycle transition.
    """

    def pending_events(self, village_id: int) -> list[ConstructionEvent]:
        """Return the queued events of a village in submission order."""

    def enqueue(self, event: ConstructionEvent) -> None:
        """Append a queued event, keeping its `resolves_at` unmodified."""

    def resolve(self, event_id: str) -> ConstructionEvent:
        """Apply the event's level to its building field and remove the event."""

    def cancel(self, event_id: str) -> ConstructionEvent:
        """Remove the event, and the later upgrades of the same field built on it, without touching the village."""

    def register_village(self, village: Village) -> None:
        """Make a village's building fields available to `resolve`."""

    def resolve_due(self, now: datetime) -> list[ConstructionEvent]:
        """Resolve every event with `resolves_at <= now`, in submission order."""

    def next_resolution_time(self) -> datetime | None:
        ...
