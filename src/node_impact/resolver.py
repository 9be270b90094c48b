"""Resolve which ingresses a node eligibility change impacts.

Ingresses in instance mode register nodes as targets, so any change in the
set of eligible nodes affects them.  Ingresses in IP mode register pods and
are normally unaffected, unless one of their backends is a ``NodePort``
service whose own routing still goes through the nodes.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional, Set

from .classes import is_valid_ingress
from .classifier import TargetModeClassifier
from .exceptions import ClusterReadError, InvalidAnnotation
from .models import Ingress, NamespacedName, ReconcileRequest, ServiceType, TargetMode
from .reader import ClusterReader
from .workqueue import ReconcileQueue

LOG = logging.getLogger(__name__)


class ImpactResolver:
    """Enqueue a reconcile request for every ingress impacted by a node change.

    The resolver holds configuration and collaborators only; each call to
    :meth:`enqueue_impacted_ingresses` is independent, which lets the event
    machinery invoke it from several threads at once.

    Parameters
    ----------
    ingress_class:
        Ingress class owned by this controller (see
        :func:`~node_impact.classes.is_valid_ingress`).
    reader:
        Cluster object cache used to list ingresses and fetch services.
    classifier:
        Resolves the target mode and backends of an ingress.
    queue:
        Sink for reconcile requests.
    workers:
        Upper bound on ingresses evaluated concurrently within one call.
    """

    def __init__(
        self,
        ingress_class: str,
        reader: ClusterReader,
        classifier: TargetModeClassifier,
        queue: ReconcileQueue,
        workers: int = 1,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self._ingress_class = ingress_class
        self._reader = reader
        self._classifier = classifier
        self._queue = queue
        self._workers = workers

    @property
    def ingress_class(self) -> str:
        return self._ingress_class

    def enqueue_impacted_ingresses(self) -> Set[NamespacedName]:
        """Submit every impacted ingress to the queue and return their names."""

        try:
            ingresses = self._reader.list_ingresses()
        except ClusterReadError as exc:
            LOG.error("failed to fetch impacted ingresses by node due to %s", exc)
            return set()

        owned = [i for i in ingresses if is_valid_ingress(self._ingress_class, i)]
        LOG.debug(
            "evaluating %d of %d ingresses for node impact", len(owned), len(ingresses)
        )

        if self._workers == 1 or len(owned) <= 1:
            results: Iterable[Optional[NamespacedName]] = map(self._process, owned)
            impacted = {name for name in results if name is not None}
        else:
            with ThreadPoolExecutor(
                max_workers=min(self._workers, len(owned)),
                thread_name_prefix="node-impact",
            ) as pool:
                impacted = {
                    name for name in pool.map(self._process, owned) if name is not None
                }
        return impacted

    def is_impacted(self, ingress: Ingress) -> bool:
        """Return ``True`` when a node eligibility change affects ``ingress``.

        Raises :class:`~node_impact.exceptions.ClusterReadError` or
        :class:`~node_impact.exceptions.InvalidAnnotation` if the target type
        cannot be determined.  Backend services that cannot be fetched are
        logged and skipped.
        """

        classification = self._classifier.classify(ingress)
        if classification.mode is TargetMode.INSTANCE:
            return True

        for backend in classification.backends:
            try:
                service = self._reader.get_service(ingress.namespace, backend.name)
            except ClusterReadError as exc:
                LOG.error(
                    "failed to fetch service %s backing ingress %s, ignoring: %s",
                    backend.name,
                    ingress.key,
                    exc,
                )
                continue
            if service.type is ServiceType.NODE_PORT:
                LOG.debug(
                    "ingress %s is impacted through NodePort service %s",
                    ingress.key,
                    backend.name,
                )
                return True
        return False

    def _process(self, ingress: Ingress) -> Optional[NamespacedName]:
        try:
            impacted = self.is_impacted(ingress)
        except (ClusterReadError, InvalidAnnotation) as exc:
            LOG.error(
                "failed to get ingress annotations of %s due to %s", ingress.key, exc
            )
            return None
        if not impacted:
            return None

        LOG.debug("enqueueing ingress %s for reconciliation", ingress.key)
        self._queue.add(ReconcileRequest(ingress.namespaced_name))
        return ingress.namespaced_name
