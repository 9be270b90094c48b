"""Read-only access to cluster objects.

:class:`ClusterReader` is the contract the resolver consumes.  The
:class:`SnapshotReader` implementation keeps an in-memory copy of the
relevant objects and is what tests, the offline tooling and the file based
watcher use.  A Kubernetes API backed reader lives in
:mod:`impact_agent.kube`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Iterable, List, Mapping, Sequence

import yaml

from .exceptions import ResourceNotFound
from .models import Ingress, NamespacedName, Node, Service

LOG = logging.getLogger(__name__)


class ClusterReader(ABC):
    """Read access to the cluster object cache.

    Implementations must be safe for concurrent use.  Failures are reported
    as :class:`~node_impact.exceptions.ClusterReadError` and missing objects
    as :class:`~node_impact.exceptions.ResourceNotFound`.
    """

    @abstractmethod
    def list_ingresses(self) -> Sequence[Ingress]:
        """Return every ingress in the cluster."""

    @abstractmethod
    def get_ingress(self, namespace: str, name: str) -> Ingress:
        """Return the ingress ``namespace/name``."""

    @abstractmethod
    def get_service(self, namespace: str, name: str) -> Service:
        """Return the service ``namespace/name``."""

    @abstractmethod
    def list_nodes(self) -> Sequence[Node]:
        """Return every node in the cluster."""


@dataclass(frozen=True)
class ClusterSnapshot:
    """Immutable view of the objects a :class:`SnapshotReader` serves."""

    nodes: Mapping[str, Node] = field(default_factory=dict)
    ingresses: Mapping[NamespacedName, Ingress] = field(default_factory=dict)
    services: Mapping[NamespacedName, Service] = field(default_factory=dict)

    @classmethod
    def from_manifests(cls, manifests: Iterable[Mapping[str, Any]]) -> "ClusterSnapshot":
        nodes: Dict[str, Node] = {}
        ingresses: Dict[NamespacedName, Ingress] = {}
        services: Dict[NamespacedName, Service] = {}

        for manifest in _flatten(manifests):
            kind = manifest.get("kind")
            if kind == "Node":
                node = Node.from_manifest(manifest)
                nodes[node.name] = node
            elif kind == "Ingress":
                ingress = Ingress.from_manifest(manifest)
                ingresses[ingress.namespaced_name] = ingress
            elif kind == "Service":
                service = Service.from_manifest(manifest)
                services[service.namespaced_name] = service
            else:
                LOG.debug("ignoring manifest of kind %s", kind)

        return cls(nodes=nodes, ingresses=ingresses, services=services)

    @classmethod
    def load(cls, path: Path) -> "ClusterSnapshot":
        documents = [doc for doc in yaml.safe_load_all(Path(path).read_text()) if doc]
        for doc in documents:
            if not isinstance(doc, dict):
                raise ValueError(f"snapshot {path} contains a non-mapping document")
        return cls.from_manifests(documents)


def _flatten(manifests: Iterable[Mapping[str, Any]]) -> Iterable[Mapping[str, Any]]:
    for manifest in manifests:
        if manifest.get("kind") == "List" or (
            "items" in manifest and "kind" not in manifest
        ):
            yield from _flatten(manifest.get("items") or [])
        else:
            yield manifest


class SnapshotReader(ClusterReader):
    """Serve reads from an in-memory :class:`ClusterSnapshot`.

    The snapshot is swapped atomically through :meth:`replace`, so a reader
    shared with concurrently running resolvers always answers from one
    consistent snapshot per call.
    """

    def __init__(self, snapshot: ClusterSnapshot | None = None) -> None:
        self._snapshot = snapshot or ClusterSnapshot()
        self._lock = Lock()

    @classmethod
    def from_manifests(cls, manifests: Iterable[Mapping[str, Any]]) -> "SnapshotReader":
        return cls(ClusterSnapshot.from_manifests(manifests))

    @property
    def snapshot(self) -> ClusterSnapshot:
        with self._lock:
            return self._snapshot

    def replace(self, snapshot: ClusterSnapshot) -> ClusterSnapshot:
        """Install ``snapshot`` and return the one it replaced."""

        with self._lock:
            previous, self._snapshot = self._snapshot, snapshot
        return previous

    def list_ingresses(self) -> List[Ingress]:
        return list(self.snapshot.ingresses.values())

    def get_ingress(self, namespace: str, name: str) -> Ingress:
        key = NamespacedName(namespace, name)
        try:
            return self.snapshot.ingresses[key]
        except KeyError:
            raise ResourceNotFound("ingress", str(key)) from None

    def get_service(self, namespace: str, name: str) -> Service:
        key = NamespacedName(namespace, name)
        try:
            return self.snapshot.services[key]
        except KeyError:
            raise ResourceNotFound("service", str(key)) from None

    def list_nodes(self) -> List[Node]:
        return list(self.snapshot.nodes.values())
