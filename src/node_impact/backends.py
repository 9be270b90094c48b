"""Extract the service backends that become target groups."""

from __future__ import annotations

from typing import List

from .models import Ingress, ServiceRef

# Backends pointing at this port are actions configured through annotations,
# not real services.
USE_ANNOTATION = "use-annotation"


def extract_target_group_backends(ingress: Ingress) -> List[ServiceRef]:
    """Return the distinct service backends of ``ingress`` in declared order.

    The default backend comes first, followed by every rule path backend.
    """

    candidates = []
    if ingress.default_backend is not None:
        candidates.append(ingress.default_backend)
    candidates.extend(ingress.rule_backends)

    backends = [ref for ref in candidates if ref.port != USE_ANNOTATION]
    return list(dict.fromkeys(backends))
