"""Decide whether a node may act as a load balancer traffic proxy."""

from __future__ import annotations

from .models import Node

LABEL_NODE_ROLE_MASTER = "node-role.kubernetes.io/master"
LABEL_EXCLUDE_BALANCER = "node.kubernetes.io/exclude-from-external-load-balancers"
LABEL_ALPHA_EXCLUDE_BALANCER = "alpha.service-controller.kubernetes.io/exclude-balancer"

EXCLUDING_LABELS = (
    LABEL_NODE_ROLE_MASTER,
    LABEL_EXCLUDE_BALANCER,
    LABEL_ALPHA_EXCLUDE_BALANCER,
)


def is_node_suitable_as_traffic_proxy(node: Node) -> bool:
    """Return ``True`` when ``node`` is Ready and not excluded by label."""

    if any(label in node.labels for label in EXCLUDING_LABELS):
        return False
    ready = node.condition("Ready")
    return ready is not None and ready.status == "True"
