from __future__ import annotations

import logging
import threading
from typing import Callable, Sequence

from .model import Session
from .repository import OnChange, QueryDescriptor, Unsubscribe

logger = logging.getLogger(__name__)


class _Listener:
    def __init__(self, descriptor: QueryDescriptor, on_change: OnChange):
        self.descriptor = descriptor
        self.on_change = on_change
        # Held from query to delivery so snapshots reach the listener in query order.
        self.lock = threading.RLock()


class SnapshotHub:
    """Keeps live query subscribers and pushes them full snapshots.

    Every notification re-runs the subscriber's query; listeners replace
    their state with the new snapshot instead of patching it.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._next_id = 0
        self._listeners: dict[int, _Listener] = {}

    def subscribe(
        self,
        descriptor: QueryDescriptor,
        on_change: OnChange,
        run_query: Callable[[QueryDescriptor], Sequence[Session]],
    ) -> Unsubscribe:
        listener = _Listener(descriptor, on_change)
        with listener.lock:
            with self._lock:
                self._next_id += 1
                key = self._next_id
                self._listeners[key] = listener
            on_change(list(run_query(descriptor)))

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(key, None)

        return unsubscribe

    def publish(self, run_query: Callable[[QueryDescriptor], Sequence[Session]]) -> None:
        with self._lock:
            listeners = list(self._listeners.values())

        for listener in listeners:
            with listener.lock:
                try:
                    listener.on_change(list(run_query(listener.descriptor)))
                except Exception:
                    logger.exception("Snapshot listener failed for %s", listener.descriptor)
