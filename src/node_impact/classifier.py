"""Target mode classification for ingresses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .annotations import AnnotationStore, parse_ingress_annotations
from .backends import extract_target_group_backends
from .models import Ingress, ServiceRef, TargetMode


@dataclass(frozen=True)
class Classification:
    mode: TargetMode
    backends: Sequence[ServiceRef] = ()


class TargetModeClassifier:
    """Combine annotation lookup with backend extraction.

    Without a ``store`` the annotations of the listed ingress are parsed
    directly, which avoids one read per ingress against a live API server.
    """

    def __init__(
        self,
        store: Optional[AnnotationStore] = None,
        *,
        default_target_type: TargetMode = TargetMode.INSTANCE,
    ) -> None:
        self._store = store
        self._default_target_type = default_target_type

    def classify(self, ingress: Ingress) -> Classification:
        """Return the target mode of ``ingress`` and, in IP mode, its backends.

        Errors raised by the annotation store propagate unchanged.
        """

        if self._store is not None:
            annotations = self._store.get_ingress_annotations(ingress.key)
        else:
            annotations = parse_ingress_annotations(
                ingress.annotations, self._default_target_type
            )
        if annotations.target_type is TargetMode.INSTANCE:
            return Classification(TargetMode.INSTANCE)
        return Classification(
            TargetMode.IP, tuple(extract_target_group_backends(ingress))
        )
