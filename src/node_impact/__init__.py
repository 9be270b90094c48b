"""Node change impact resolution for ingress controllers.

When a node starts or stops being usable as a load balancer target, only
some ingresses need to be reconciled again.  This package computes that set:

* ingresses of a foreign ingress class are ignored;
* ingresses in ``instance`` target mode register nodes directly and are
  always impacted;
* ingresses in ``ip`` target mode register pods and are impacted only when
  one of their backends is a ``NodePort`` service.

The :class:`~node_impact.resolver.ImpactResolver` streams impacted ingresses
into an injected :class:`~node_impact.workqueue.ReconcileQueue`.  Everything
here is pure Python and independent of any Kubernetes client so the logic
can be exercised in unit tests against in-memory snapshots.
"""

from .resolver import ImpactResolver  # noqa: F401

__all__ = ["ImpactResolver"]
