"""Commands exposed to the presentation layer: an action plus an enablement predicate."""

from __future__ import annotations

from typing import Callable, Optional


class NoteCommand:
    """Bindable command.

    ``can_execute()`` is recomputed on every call, so the presentation layer
    can re-query it whenever it receives a change notification.
    """

    __slots__ = ("name", "_execute", "_can_execute")

    def __init__(
        self,
        name: str,
        execute: Callable[[], object],
        can_execute: Optional[Callable[[], bool]] = None,
    ) -> None:
        self.name = name
        self._execute = execute
        self._can_execute = can_execute

    def can_execute(self) -> bool:
        if self._can_execute is None:
            return True
        return bool(self._can_execute())

    def execute(self) -> bool:
        """Run the action if enabled; returns whether it ran."""
        if not self.can_execute():
            return False
        self._execute()
        return True

    def __repr__(self) -> str:
        return f"NoteCommand({self.name!r}, enabled={self.can_execute()})"


__all__ = ["NoteCommand"]
