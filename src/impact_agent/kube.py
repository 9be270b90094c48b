"""Kubernetes API backed cluster reader."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from node_impact.exceptions import ClusterReadError, ResourceNotFound
from node_impact.models import Ingress, Node, Service
from node_impact.reader import ClusterReader

LOG = logging.getLogger(__name__)


def load_kube_config(options: Mapping[str, Any]) -> None:
    """Load client configuration from the source ``options``.

    ``in_cluster: true`` forces the service account configuration; otherwise
    the kubeconfig file is tried first and the in-cluster configuration used
    as a fallback.
    """

    if options.get("in_cluster"):
        config.load_incluster_config()
        return
    try:
        config.load_kube_config(
            config_file=options.get("kubeconfig"),
            context=options.get("context"),
        )
    except config.ConfigException:
        LOG.info("no usable kubeconfig, falling back to in-cluster configuration")
        config.load_incluster_config()


class KubernetesReader(ClusterReader):
    """Read nodes, ingresses and services through the Kubernetes API.

    API objects are converted to their manifest form and parsed with the
    same ``from_manifest`` helpers the snapshot reader uses.
    """

    def __init__(
        self,
        core_api: Optional[client.CoreV1Api] = None,
        networking_api: Optional[client.NetworkingV1Api] = None,
        api_client: Optional[client.ApiClient] = None,
    ) -> None:
        self._api_client = api_client or client.ApiClient()
        self._core = core_api or client.CoreV1Api(self._api_client)
        self._networking = networking_api or client.NetworkingV1Api(self._api_client)

    def _to_manifest(self, obj: Any) -> dict:
        return self._api_client.sanitize_for_serialization(obj)

    def list_ingresses(self) -> List[Ingress]:
        try:
            result = self._networking.list_ingress_for_all_namespaces()
        except ApiException as exc:
            raise ClusterReadError(f"failed to list ingresses: {exc.reason}") from exc
        except HTTPError as exc:
            raise ClusterReadError(f"failed to list ingresses: {exc}") from exc
        return [Ingress.from_manifest(self._to_manifest(i)) for i in result.items]

    def get_ingress(self, namespace: str, name: str) -> Ingress:
        try:
            obj = self._networking.read_namespaced_ingress(name, namespace)
        except ApiException as exc:
            raise self._read_error("ingress", namespace, name, exc) from exc
        except HTTPError as exc:
            raise ClusterReadError(f"failed to read ingress {namespace}/{name}: {exc}") from exc
        return Ingress.from_manifest(self._to_manifest(obj))

    def get_service(self, namespace: str, name: str) -> Service:
        try:
            obj = self._core.read_namespaced_service(name, namespace)
        except ApiException as exc:
            raise self._read_error("service", namespace, name, exc) from exc
        except HTTPError as exc:
            raise ClusterReadError(f"failed to read service {namespace}/{name}: {exc}") from exc
        return Service.from_manifest(self._to_manifest(obj))

    def list_nodes(self) -> List[Node]:
        try:
            result = self._core.list_node()
        except ApiException as exc:
            raise ClusterReadError(f"failed to list nodes: {exc.reason}") from exc
        except HTTPError as exc:
            raise ClusterReadError(f"failed to list nodes: {exc}") from exc
        return [Node.from_manifest(self._to_manifest(n)) for n in result.items]

    @staticmethod
    def _read_error(kind: str, namespace: str, name: str, exc: ApiException) -> ClusterReadError:
        key = f"{namespace}/{name}"
        if exc.status == 404:
            return ResourceNotFound(kind, key)
        return ClusterReadError(f"failed to read {kind} {key}: {exc.reason}")
