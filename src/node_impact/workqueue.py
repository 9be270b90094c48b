"""Reconcile request sinks."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from threading import Condition
from typing import Deque, Optional, Set

from .models import ReconcileRequest


class ReconcileQueue(ABC):
    """Sink accepting reconcile requests.

    Implementations must accept concurrent submissions and collapse
    duplicate pending requests.
    """

    @abstractmethod
    def add(self, request: ReconcileRequest) -> None:
        """Schedule ``request``; a no-op if it is already pending."""


class DedupingWorkQueue(ReconcileQueue):
    """In-process FIFO queue holding at most one pending entry per key.

    A request taken with :meth:`get` stops being pending, so a later
    :meth:`add` for the same key queues it again.
    """

    def __init__(self) -> None:
        self._items: Deque[ReconcileRequest] = deque()
        self._pending: Set[ReconcileRequest] = set()
        self._processing: Set[ReconcileRequest] = set()
        self._cond = Condition()

    def add(self, request: ReconcileRequest) -> None:
        with self._cond:
            if request in self._pending:
                return
            self._pending.add(request)
            self._items.append(request)
            self._cond.notify()

    def get(self, timeout: Optional[float] = None) -> Optional[ReconcileRequest]:
        """Pop the oldest pending request, waiting up to ``timeout`` seconds."""

        with self._cond:
            if not self._cond.wait_for(lambda: self._items, timeout=timeout):
                return None
            request = self._items.popleft()
            self._pending.discard(request)
            self._processing.add(request)
            return request

    def done(self, request: ReconcileRequest) -> None:
        with self._cond:
            self._processing.discard(request)

    def processing(self) -> Set[ReconcileRequest]:
        with self._cond:
            return set(self._processing)

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)
