"""Node change events consumed by the handler registry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from node_impact.models import Node


@dataclass(frozen=True)
class NodeCreated:
    """A node appeared in the cluster."""

    node: Node


@dataclass(frozen=True)
class NodeDeleted:
    """A node was removed from the cluster."""

    node: Node


@dataclass(frozen=True)
class NodeUpdated:
    """A node changed; ``old`` and ``new`` are the snapshots either side."""

    old: Node
    new: Node


@dataclass(frozen=True)
class GenericEvent:
    """An event of unknown type or a synthetic trigger."""

    obj: Optional[Any] = None


NodeEvent = Union[NodeCreated, NodeDeleted, NodeUpdated, GenericEvent]
