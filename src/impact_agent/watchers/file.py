"""File-based cluster snapshot watcher."""

from __future__ import annotations

import logging
from pathlib import Path
from threading import Event, Thread
from typing import Dict

import yaml

from ingress_handlers import HandlerRegistry
from ingress_handlers.events import NodeCreated, NodeDeleted, NodeUpdated
from node_impact.models import Node
from node_impact.reader import ClusterSnapshot, SnapshotReader

LOG = logging.getLogger(__name__)


class FileClusterWatcher(Thread):
    """Poll a YAML cluster snapshot and publish node events.

    Every poll installs the new snapshot in ``reader`` before any event is
    dispatched, so handlers resolve impact against the state that triggered
    them.
    """

    def __init__(
        self,
        registry: HandlerRegistry,
        reader: SnapshotReader,
        path: Path,
        interval: float,
        stop_event: Event,
    ) -> None:
        super().__init__(daemon=True)
        self._registry = registry
        self._reader = reader
        self._path = Path(path)
        self._interval = interval
        self._stop_event = stop_event
        self._nodes: Dict[str, Node] = {}

    def run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.poll()
            except Exception:  # pragma: no cover - logged below
                LOG.exception("file watcher encountered an error")
            self._stop_event.wait(self._interval)

    def poll(self) -> None:
        if not self._path.exists():
            LOG.debug("snapshot file %s does not exist yet", self._path)
            return

        try:
            snapshot = ClusterSnapshot.load(self._path)
        except yaml.YAMLError as exc:
            LOG.warning("failed to parse snapshot file %s: %s", self._path, exc)
            return
        except ValueError as exc:
            LOG.warning("invalid snapshot file %s: %s", self._path, exc)
            return

        self._reader.replace(snapshot)
        desired = dict(snapshot.nodes)

        for name, node in desired.items():
            previous = self._nodes.get(name)
            if previous is None:
                LOG.debug("node %s created", name)
                self._registry.handle(NodeCreated(node))
            elif previous != node:
                LOG.debug("node %s updated", name)
                self._registry.handle(NodeUpdated(previous, node))

        for name in set(self._nodes) - set(desired):
            LOG.debug("node %s removed", name)
            self._registry.handle(NodeDeleted(self._nodes[name]))

        self._nodes = desired
