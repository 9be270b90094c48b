"""Resource models consumed by the impact resolver.

These light-weight dataclasses mirror the handful of Kubernetes fields the
resolver actually inspects.  They are built from plain manifests (the dict
form returned by ``kubectl get -o yaml`` or by the API client's
serialisation helpers) so the core never depends on a specific client
library.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Union

from .exceptions import InvalidAnnotation


class TargetMode(Enum):
    """How load balancer targets are selected for an ingress.

    ``INSTANCE`` registers nodes (traffic enters through node ports) while
    ``IP`` registers pod addresses directly.
    """

    INSTANCE = "instance"
    IP = "ip"

    @classmethod
    def parse(cls, value: str) -> "TargetMode":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidAnnotation(f"unknown target type '{value}'") from None


class ServiceType(Enum):
    CLUSTER_IP = "ClusterIP"
    NODE_PORT = "NodePort"
    LOAD_BALANCER = "LoadBalancer"
    EXTERNAL_NAME = "ExternalName"


@dataclass(frozen=True, order=True)
class NamespacedName:
    """Namespace/name pair identifying a namespaced object."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"

    @classmethod
    def parse(cls, key: str) -> "NamespacedName":
        namespace, sep, name = key.partition("/")
        if not sep or not namespace or not name or "/" in name:
            raise ValueError(f"malformed key '{key}', expected namespace/name")
        return cls(namespace, name)


def _metadata(manifest: Mapping[str, Any]) -> Mapping[str, Any]:
    metadata = manifest.get("metadata") or {}
    if not metadata.get("name"):
        raise ValueError("manifest is missing metadata.name")
    return metadata


@dataclass(frozen=True)
class NodeCondition:
    type: str
    status: str


@dataclass(frozen=True)
class Node:
    """Snapshot of a cluster node.

    Attributes
    ----------
    name:
        Node name (nodes are cluster scoped).
    labels:
        Node labels; used to exclude control-plane and opted-out nodes.
    conditions:
        Status conditions as reported by the kubelet.
    """

    name: str
    labels: Mapping[str, str] = field(default_factory=dict)
    conditions: Sequence[NodeCondition] = ()

    def condition(self, type_: str) -> Optional[NodeCondition]:
        return next((c for c in self.conditions if c.type == type_), None)

    @classmethod
    def from_manifest(cls, manifest: Mapping[str, Any]) -> "Node":
        metadata = _metadata(manifest)
        status = manifest.get("status") or {}
        conditions = tuple(
            NodeCondition(type=str(c.get("type")), status=str(c.get("status")))
            for c in status.get("conditions") or []
        )
        return cls(
            name=str(metadata["name"]),
            labels=dict(metadata.get("labels") or {}),
            conditions=conditions,
        )


@dataclass(frozen=True)
class Service:
    namespace: str
    name: str
    type: ServiceType = ServiceType.CLUSTER_IP

    @property
    def namespaced_name(self) -> NamespacedName:
        return NamespacedName(self.namespace, self.name)

    @classmethod
    def from_manifest(cls, manifest: Mapping[str, Any]) -> "Service":
        metadata = _metadata(manifest)
        spec = manifest.get("spec") or {}
        raw_type = spec.get("type") or ServiceType.CLUSTER_IP.value
        try:
            service_type = ServiceType(raw_type)
        except ValueError:
            raise ValueError(f"unsupported service type '{raw_type}'") from None
        return cls(
            namespace=str(metadata.get("namespace") or "default"),
            name=str(metadata["name"]),
            type=service_type,
        )


@dataclass(frozen=True)
class ServiceRef:
    """Backend reference to a service in the ingress' own namespace."""

    name: str
    port: Union[int, str, None] = None


def _parse_backend(backend: Optional[Mapping[str, Any]]) -> Optional[ServiceRef]:
    if not backend:
        return None
    # extensions/v1beta1 and networking.k8s.io/v1beta1
    if backend.get("serviceName"):
        return ServiceRef(str(backend["serviceName"]), backend.get("servicePort"))
    # networking.k8s.io/v1
    service = backend.get("service") or {}
    if service.get("name"):
        port = service.get("port") or {}
        return ServiceRef(str(service["name"]), port.get("number", port.get("name")))
    return None


@dataclass(frozen=True)
class Ingress:
    """Snapshot of an ingress resource."""

    namespace: str
    name: str
    annotations: Mapping[str, str] = field(default_factory=dict)
    class_name: Optional[str] = None
    default_backend: Optional[ServiceRef] = None
    rule_backends: Sequence[ServiceRef] = ()

    @property
    def namespaced_name(self) -> NamespacedName:
        return NamespacedName(self.namespace, self.name)

    @property
    def key(self) -> str:
        return str(self.namespaced_name)

    @classmethod
    def from_manifest(cls, manifest: Mapping[str, Any]) -> "Ingress":
        metadata = _metadata(manifest)
        spec = manifest.get("spec") or {}

        default_backend = _parse_backend(
            spec.get("defaultBackend") or spec.get("backend")
        )
        rule_backends: List[ServiceRef] = []
        for rule in spec.get("rules") or []:
            http = rule.get("http") or {}
            for path in http.get("paths") or []:
                ref = _parse_backend(path.get("backend"))
                if ref is not None:
                    rule_backends.append(ref)

        return cls(
            namespace=str(metadata.get("namespace") or "default"),
            name=str(metadata["name"]),
            annotations=dict(metadata.get("annotations") or {}),
            class_name=spec.get("ingressClassName"),
            default_backend=default_backend,
            rule_backends=tuple(rule_backends),
        )


@dataclass(frozen=True)
class ReconcileRequest:
    """Ask the controller to reconcile the ingress named by ``namespaced_name``."""

    namespaced_name: NamespacedName

    @property
    def key(self) -> str:
        return str(self.namespaced_name)
