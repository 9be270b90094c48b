"""Handler registry dispatching node events."""

from __future__ import annotations

from typing import Dict

from .events import GenericEvent, NodeCreated, NodeDeleted, NodeEvent, NodeUpdated
from .handlers import EventHandler


class HandlerRegistry:
    """Dispatch node events to registered handlers."""

    def __init__(self) -> None:
        self._handlers: Dict[str, EventHandler] = {}

    def register(self, name: str, handler: EventHandler) -> None:
        if name in self._handlers:
            raise ValueError(f"handler '{name}' already registered")
        self._handlers[name] = handler

    def unregister(self, name: str) -> None:
        self._handlers.pop(name, None)

    def handle(self, event: NodeEvent) -> None:
        if isinstance(event, NodeCreated):
            for handler in self._handlers.values():
                handler.create(event)
        elif isinstance(event, NodeDeleted):
            for handler in self._handlers.values():
                handler.delete(event)
        elif isinstance(event, NodeUpdated):
            for handler in self._handlers.values():
                handler.update(event)
        elif isinstance(event, GenericEvent):
            for handler in self._handlers.values():
                handler.generic(event)
        else:
            raise TypeError(f"Unsupported event type: {type(event)!r}")
