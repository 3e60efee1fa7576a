import heapq
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Wakeup:
    deadline: datetime
    callback: Callable[[datetime], None]
    cancelled: bool = field(default=False)

    def cancel(self) -> None:
        self.cancelled = True


class WakeupScheduler:
    """Heap of future callbacks, run cooperatively by `run_due`.

    Registering a wakeup never blocks. A cancelled wakeup is skipped when its
    deadline comes up, so it can never run after `cancel` returns.
    """

    def __init__(self) -> None:
        self._heap: list[tuple[datetime, int, Wakeup]] = []
        self._sequence: int = 0

    def schedule(self, deadline: datetime, callback: Callable[[datetime], None]) -> Wakeup:
        self._sequence += 1
        wakeup = Wakeup(deadline=deadline, callback=callback)
        heapq.heappush(self._heap, (deadline, self._sequence, wakeup))
        return wakeup

    def cancel(self, wakeup: Wakeup) -> None:
        wakeup.cancel()

    def pop_due(self, now: datetime) -> Wakeup | None:
        while self._heap:
            deadline, _, wakeup = self._heap[0]
            if wakeup.cancelled:
                heapq.heappop(self._heap)
                continue
            if deadline > now:
                return None
            heapq.heappop(self._heap)
            return wakeup
        return None

    def run_due(self, now: datetime) -> int:
        """Run every wakeup due at `now`, including ones re-armed by earlier callbacks."""
        ran = 0
        while (wakeup := self.pop_due(now)) is not None:
            wakeup.callback(wakeup.deadline)
            ran += 1
        return ran

    def peek_next_deadline(self) -> datetime | None:
        while self._heap and self._heap[0][2].cancelled:
            heapq.heappop(self._heap)
        if not self._heap:
            return None
        return self._heap[0][0]

    def __len__(self) -> int:
        return sum(1 for _, _, w in self._heap if not w.cancelled)
