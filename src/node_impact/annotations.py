"""Per-ingress annotation store.

The controller keeps the parsed annotations of every ingress it watches.
The resolver only needs the target type, so :class:`IngressAnnotations` is
intentionally narrow.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping

from .models import NamespacedName, TargetMode
from .reader import ClusterReader

TARGET_TYPE_ANNOTATION = "alb.ingress.kubernetes.io/target-type"


@dataclass(frozen=True)
class IngressAnnotations:
    target_type: TargetMode = TargetMode.INSTANCE


def parse_ingress_annotations(
    annotations: Mapping[str, str],
    default_target_type: TargetMode = TargetMode.INSTANCE,
) -> IngressAnnotations:
    """Build :class:`IngressAnnotations` from raw annotations.

    Raises :class:`~node_impact.exceptions.InvalidAnnotation` when the target
    type is present but not recognised.
    """

    raw = annotations.get(TARGET_TYPE_ANNOTATION)
    if raw is None:
        return IngressAnnotations(target_type=default_target_type)
    return IngressAnnotations(target_type=TargetMode.parse(raw))


class AnnotationStore(ABC):
    """Lookup of parsed ingress annotations keyed by ``namespace/name``."""

    @abstractmethod
    def get_ingress_annotations(self, key: str) -> IngressAnnotations:
        """Return the annotations stored for ``key``."""


class ReaderAnnotationStore(AnnotationStore):
    """Parse annotations from the ingress currently held by ``reader``."""

    def __init__(
        self,
        reader: ClusterReader,
        *,
        default_target_type: TargetMode = TargetMode.INSTANCE,
    ) -> None:
        self._reader = reader
        self._default_target_type = default_target_type

    def get_ingress_annotations(self, key: str) -> IngressAnnotations:
        name = NamespacedName.parse(key)
        ingress = self._reader.get_ingress(name.namespace, name.name)
        return parse_ingress_annotations(
            ingress.annotations, self._default_target_type
        )
