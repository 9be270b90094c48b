"""Watcher implementations used by the impact agent."""

from .file import FileClusterWatcher  # noqa: F401
from .kube import KubernetesNodeWatcher, NodeEventTranslator  # noqa: F401

__all__ = ["FileClusterWatcher", "KubernetesNodeWatcher", "NodeEventTranslator"]
