"""Kubernetes node watcher translating watch events into node events."""

from __future__ import annotations

import logging
from threading import Event, Thread
from typing import Any, Dict, Mapping, Optional

from kubernetes import client, watch
from kubernetes.client.rest import ApiException

from ingress_handlers import HandlerRegistry
from ingress_handlers.events import (
    GenericEvent,
    NodeCreated,
    NodeDeleted,
    NodeEvent,
    NodeUpdated,
)
from node_impact.models import Node

LOG = logging.getLogger(__name__)


class NodeEventTranslator:
    """Turn raw watch notifications into :mod:`ingress_handlers.events` values.

    The last snapshot of every node is kept so ``MODIFIED`` notifications can
    be paired with the state they replace.
    """

    def __init__(self) -> None:
        self._nodes: Dict[str, Node] = {}

    def translate(self, event_type: str, manifest: Mapping[str, Any]) -> NodeEvent:
        if event_type not in ("ADDED", "MODIFIED", "DELETED"):
            return GenericEvent(manifest)

        node = Node.from_manifest(manifest)
        previous = self._nodes.get(node.name)

        if event_type == "DELETED":
            self._nodes.pop(node.name, None)
            return NodeDeleted(node)

        self._nodes[node.name] = node
        if previous is None:
            # A MODIFIED for an unseen node (e.g. after a relist) is a creation
            # from our point of view.
            return NodeCreated(node)
        return NodeUpdated(previous, node)


class KubernetesNodeWatcher(Thread):
    """Stream node changes from the API server into the handler registry."""

    def __init__(
        self,
        registry: HandlerRegistry,
        *,
        interval: float,
        stop_event: Event,
        core_api: Optional[client.CoreV1Api] = None,
        timeout_seconds: int = 60,
    ) -> None:
        super().__init__(daemon=True)
        self._registry = registry
        self._interval = interval
        self._stop = stop_event
        self._core = core_api or client.CoreV1Api()
        self._timeout_seconds = timeout_seconds
        self._translator = NodeEventTranslator()
        self._api_client = client.ApiClient()

    def run(self) -> None:
        LOG.info("Starting Kubernetes node watcher")
        while not self._stop.is_set():
            try:
                self.stream_once()
            except ApiException as exc:
                LOG.warning("node watch failed: %s", exc.reason)
            except Exception:  # pragma: no cover - logged below
                LOG.exception("node watcher encountered an error")
            self._stop.wait(self._interval)
        LOG.info("Stopping Kubernetes node watcher")

    def stream_once(self) -> None:
        """Consume one watch session until it times out or we are stopped."""

        watcher = watch.Watch()
        try:
            for raw in watcher.stream(
                self._core.list_node, timeout_seconds=self._timeout_seconds
            ):
                if self._stop.is_set():
                    break
                self.dispatch(raw["type"], raw["object"])
        finally:
            watcher.stop()

    def dispatch(self, event_type: str, obj: Any) -> None:
        if isinstance(obj, Mapping):
            manifest = obj
        else:
            manifest = self._api_client.sanitize_for_serialization(obj)
        event = self._translator.translate(event_type, manifest)
        LOG.debug("node watch event %s -> %s", event_type, type(event).__name__)
        # Handler errors stay local to the event; the session keeps streaming.
        try:
            self._registry.handle(event)
        except Exception:
            LOG.exception("failed to handle node watch event %s", event_type)
