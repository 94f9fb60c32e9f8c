"""Background tasks on the UI loop whose failures are logged, never lost.

Autosaves run fire-and-forget. The owner passes a ``pending`` set so it can
wait for every write still in flight before the final save on shutdown.
"""

from __future__ import annotations

import asyncio
from typing import Any, Coroutine, Optional

from .logging_utils import LoggerLike, ensure_structured_logger


def create_logged_task(
    coro: Coroutine[Any, Any, Any],
    *,
    logger: LoggerLike = None,
    context: str = "background task",
    pending: Optional[set[asyncio.Task[Any]]] = None,
) -> asyncio.Task[Any]:
    """Schedule ``coro`` on the running loop; its exception, if any, is logged."""
    task_logger = ensure_structured_logger(logger, fallback_name="Tasks")
    task = asyncio.get_running_loop().create_task(coro, name=context)

    def _on_done(done: asyncio.Task[Any]) -> None:
        if pending is not None:
            pending.discard(done)
        if done.cancelled():
            task_logger.debug("%s cancelled", context)
            return
        error = done.exception()
        if error is not None:
            task_logger.error("Unhandled exception in %s: %s", context, error, exc_info=error)

    if pending is not None:
        pending.add(task)
    task.add_done_callback(_on_done)
    return task


__all__ = ["create_logged_task"]
