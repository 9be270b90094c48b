"""Enqueue ingresses impacted by node eligibility changes."""

from __future__ import annotations

import logging
from typing import Callable

from node_impact.eligibility import is_node_suitable_as_traffic_proxy
from node_impact.models import Node
from node_impact.resolver import ImpactResolver

from ..events import GenericEvent, NodeCreated, NodeDeleted, NodeUpdated
from .base import EventHandler

LOG = logging.getLogger(__name__)


class EnqueueRequestsForNodeEvent(EventHandler):
    """Trigger impact resolution when a node's eligibility changes.

    Creation and deletion matter only for eligible nodes; an ineligible node
    never carried traffic.  Updates matter only when eligibility flips.
    """

    def __init__(
        self,
        resolver: ImpactResolver,
        *,
        is_eligible: Callable[[Node], bool] = is_node_suitable_as_traffic_proxy,
    ) -> None:
        self._resolver = resolver
        self._is_eligible = is_eligible

    @property
    def resolver(self) -> ImpactResolver:
        return self._resolver

    def create(self, event: NodeCreated) -> None:
        if self._is_eligible(event.node):
            LOG.debug("eligible node %s created", event.node.name)
            self._resolver.enqueue_impacted_ingresses()

    def delete(self, event: NodeDeleted) -> None:
        if self._is_eligible(event.node):
            LOG.debug("eligible node %s deleted", event.node.name)
            self._resolver.enqueue_impacted_ingresses()

    def update(self, event: NodeUpdated) -> None:
        was_eligible = self._is_eligible(event.old)
        is_eligible = self._is_eligible(event.new)
        if was_eligible != is_eligible:
            LOG.debug(
                "node %s eligibility changed from %s to %s",
                event.new.name,
                was_eligible,
                is_eligible,
            )
            self._resolver.enqueue_impacted_ingresses()

    def generic(self, event: GenericEvent) -> None:
        pass


def build_node_handler(
    resolver: ImpactResolver,
    *,
    is_eligible: Callable[[Node], bool] = is_node_suitable_as_traffic_proxy,
) -> EnqueueRequestsForNodeEvent:
    """Helper mirroring the builder used when wiring handlers at start-up."""

    return EnqueueRequestsForNodeEvent(resolver, is_eligible=is_eligible)
