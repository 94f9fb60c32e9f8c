"""Deterministic time sources for timer and autosave tests.

ManualScheduler implements the Scheduler protocol against a virtual clock:
nothing fires until the test calls ``advance()``. FakeClock stands in for
``utc_now`` so lastModified values are predictable.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

EPOCH = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class ManualHandle:
    """Handle returned by ManualScheduler.call_later()."""

    def __init__(self, when: float, seq: int, callback: Callable[[], None]):
        self.when = when
        self.seq = seq
        self.callback = callback
        self._cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler:
    """Scheduler driven explicitly by the test."""

    def __init__(self):
        self.now = 0.0
        self._seq = 0
        self._handles: List[ManualHandle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        self._seq += 1
        handle = ManualHandle(self.now + max(0.0, delay), self._seq, callback)
        self._handles.append(handle)
        return handle

    @property
    def pending(self) -> List[ManualHandle]:
        """Live handles in firing order."""
        live = [h for h in self._handles if not h.cancelled() and not h.fired]
        return sorted(live, key=lambda h: (h.when, h.seq))

    def _next_due(self, until: float) -> Optional[ManualHandle]:
        for handle in self.pending:
            if handle.when <= until:
                return handle
            break
        return None

    def advance(self, seconds: float) -> int:
        """Move the virtual clock forward, firing due callbacks in order.

        Returns the number of callbacks that fired.
        """
        target = self.now + seconds
        fired = 0
        while True:
            handle = self._next_due(target)
            if handle is None:
                break
            self.now = handle.when
            handle.fired = True
            handle.callback()
            fired += 1
        self.now = target
        self._handles = [h for h in self._handles if not h.cancelled() and not h.fired]
        return fired


class FakeClock:
    """Callable clock returning a controllable UTC time."""

    def __init__(self, start: datetime = EPOCH):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def tick(self, seconds: float = 1.0) -> datetime:
        self.current = self.current + timedelta(seconds=seconds)
        return self.current
