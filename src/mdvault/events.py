"""Editor events and the handler table that dispatches them.

The host editor delivers two kinds of events.  Handlers are plain functions
``handler(session, event)`` registered per event type and run synchronously,
in registration order.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from mdvault.session import Session


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BufferEntered:
    path: Path
    buffer: Any


@dataclass(frozen=True)
class BufferWritePre:
    """A buffer is about to be written; *text* is its full current content."""

    path: Path
    buffer: Any
    text: str


Event = Union[BufferEntered, BufferWritePre]
Handler = Callable[["Session", Any], None]


# ---------------------------------------------------------------------------
# Host protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class EditorHost(Protocol):
    """What the core needs from the editor."""

    def replace_lines(self, buffer: Any, start: int, end: int, new_lines: list[str]) -> None:
        """Replace lines ``[start, end)`` of *buffer* in one step."""
        ...


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------


class Dispatcher:
    def __init__(self) -> None:
        self._handlers: dict[type, list[Handler]] = {}

    def register(self, event_type: type, handler: Handler) -> None:
        handlers = self._handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    def handlers(self, event_type: type) -> list[Handler]:
        return list(self._handlers.get(event_type, []))

    def dispatch(self, session: "Session", event: Event) -> None:
        """Call every handler registered for ``type(event)``."""
        for handler in self.handlers(type(event)):
            handler(session, event)

    def clear(self) -> None:
        self._handlers.clear()
