"""Ingress class ownership checks."""

from __future__ import annotations

from .models import Ingress

INGRESS_CLASS_ANNOTATION = "kubernetes.io/ingress.class"
DEFAULT_INGRESS_CLASS = "alb"


def ingress_class_of(ingress: Ingress) -> str:
    annotated = ingress.annotations.get(INGRESS_CLASS_ANNOTATION)
    if annotated is not None:
        return annotated
    return ingress.class_name or ""


def is_valid_ingress(ingress_class: str, ingress: Ingress) -> bool:
    """Return ``True`` if ``ingress`` belongs to the controller for ``ingress_class``.

    An empty ``ingress_class`` claims unclassed ingresses as well as those
    explicitly marked with :data:`DEFAULT_INGRESS_CLASS`.
    """

    actual = ingress_class_of(ingress)
    if not ingress_class:
        return actual in ("", DEFAULT_INGRESS_CLASS)
    return actual == ingress_class
