"""Exceptions raised by cluster readers and annotation stores."""

from __future__ import annotations


class ImpactError(Exception):
    """Base class for errors surfaced while computing ingress impact."""


class ClusterReadError(ImpactError):
    """Reading from the cluster object cache failed."""


class ResourceNotFound(ClusterReadError):
    """The requested object is not present in the cluster cache."""

    def __init__(self, kind: str, key: str) -> None:
        super().__init__(f"{kind} {key} not found")
        self.kind = kind
        self.key = key


class InvalidAnnotation(ImpactError):
    """An ingress annotation carries a value we cannot interpret."""
