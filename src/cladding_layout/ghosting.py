"""Deferred ghost-to-solid appearance switching.

Freshly created elements can be shown as provisional "ghosts" and turned
solid one after another. The schedule is a plain task queue keyed on a
virtual clock: the thread that owns the scene drains it with ``advance``,
so layout computation never waits on it.
"""

from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass, field
from typing import Callable, List

logger = logging.getLogger(__name__)

GHOST_APPEARANCE = "ghost"
GHOST_ALPHA = 0.3


@dataclass(order=True)
class GhostTask:
    due: float
    sequence: int
    action: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)


class GhostSchedule:
    """Cancellable queue of appearance swaps, ordered by due time."""

    def __init__(self):
        self._queue: List[GhostTask] = []
        self._sequence = 0
        self.clock = 0.0

    def schedule(self, delay: float, action: Callable[[], None]) -> GhostTask:
        """Run *action* once the clock has advanced *delay* seconds from now."""
        task = GhostTask(due=self.clock + max(float(delay), 0.0), sequence=self._sequence,
                         action=action)
        self._sequence += 1
        heapq.heappush(self._queue, task)
        return task

    def advance(self, elapsed: float) -> int:
        """Move the clock forward and run every task that has come due.

        Returns the number of tasks executed.
        """
        self.clock += max(float(elapsed), 0.0)
        executed = 0
        while self._queue and self._queue[0].due <= self.clock:
            task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            task.action()
            executed += 1
        return executed

    def flush(self) -> int:
        """Run everything still pending, regardless of due time."""
        if not self._queue:
            return 0
        latest = max(task.due for task in self._queue)
        return self.advance(max(latest - self.clock, 0.0))

    def cancel(self) -> int:
        """Drop all pending tasks. Returns how many were cancelled."""
        cancelled = 0
        for task in self._queue:
            if not task.cancelled:
                task.cancelled = True
                cancelled += 1
        self._queue.clear()
        if cancelled:
            logger.debug("Cancelled %d pending ghost tasks", cancelled)
        return cancelled

    @property
    def pending(self) -> int:
        return sum(1 for task in self._queue if not task.cancelled)
