"""Abstract interface for node event handlers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..events import GenericEvent, NodeCreated, NodeDeleted, NodeUpdated


class EventHandler(ABC):
    """Base class for handlers managed by :class:`HandlerRegistry`."""

    @abstractmethod
    def create(self, event: NodeCreated) -> None:
        """React to a node being created."""

    @abstractmethod
    def delete(self, event: NodeDeleted) -> None:
        """React to a node being deleted."""

    @abstractmethod
    def update(self, event: NodeUpdated) -> None:
        """React to a node being updated."""

    @abstractmethod
    def generic(self, event: GenericEvent) -> None:
        """React to an unknown or synthetic event."""
