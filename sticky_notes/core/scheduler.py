"""
Scheduler - delayed callbacks on the single UI thread.

Note timers and the autosave debounce never touch threads; they hand a
callback to a Scheduler and keep the returned handle so the callback can
be cancelled. The asyncio event loop is the production scheduler; tests
drive a virtual clock instead.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional, Protocol

from sticky_notes.core.logging_utils import get_module_logger

logger = get_module_logger("Scheduler")


class ScheduledHandle(Protocol):
    """Handle returned by Scheduler.call_later()."""

    def cancel(self) -> None:
        ...

    def cancelled(self) -> bool:
        ...


class Scheduler(Protocol):
    """Anything that can run a callback later on the UI thread."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledHandle:
        ...


class AsyncioScheduler:
    """Scheduler backed by ``loop.call_later`` on the running event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, float(delay)), callback)


def cancel_quietly(handle: Optional[ScheduledHandle]) -> None:
    """Cancel a scheduled callback; a handle that already fired or was cancelled is fine."""
    if handle is None:
        return
    try:
        handle.cancel()
    except Exception as e:  # pragma: no cover - asyncio handles never raise here
        logger.debug("Ignoring cancel failure: %s", e)


__all__ = ["AsyncioScheduler", "ScheduledHandle", "Scheduler", "cancel_quietly"]
