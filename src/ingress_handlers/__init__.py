"""Node event plumbing for the impact resolver.

Watchers decode raw notifications into the event types of
:mod:`ingress_handlers.events` and hand them to a :class:`HandlerRegistry`,
which fans them out to the registered handlers.
"""

from .events import GenericEvent, NodeCreated, NodeDeleted, NodeUpdated  # noqa: F401
from .registry import HandlerRegistry  # noqa: F401

__all__ = [
    "GenericEvent",
    "HandlerRegistry",
    "NodeCreated",
    "NodeDeleted",
    "NodeUpdated",
]
