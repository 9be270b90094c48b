"""Event handlers exposed to the registry."""

from .base import EventHandler  # noqa: F401
from .node import EnqueueRequestsForNodeEvent, build_node_handler  # noqa: F401

__all__ = [
    "EnqueueRequestsForNodeEvent",
    "EventHandler",
    "build_node_handler",
]
