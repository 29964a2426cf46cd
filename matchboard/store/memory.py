"""In-process store for local runs and tests."""

from __future__ import annotations

import copy
import threading
from concurrent.futures import Future
from typing import Any, Optional

from .base import (
    ErrorCallback,
    RemoteStore,
    Subscription,
    ValueCallback,
    get_in,
    put_in,
    split_path,
)


class _MemorySubscription(Subscription):
    def __init__(self, store: MemoryStore, keys: list[str], on_value: ValueCallback):
        self.store = store
        self.keys = keys
        self.on_value = on_value
        self.closed = False

    def close(self) -> None:
        """Stop delivery and release the listener."""
        self.closed = True
        self.store._detach(self)


class MemoryStore(RemoteStore):
    """A ``RemoteStore`` that keeps the document in memory.

    Writes apply synchronously, notify every overlapping subscriber and
    return an already resolved future.
    """

    def __init__(self, data: Optional[dict[str, Any]] = None) -> None:
        self._data: Any = copy.deepcopy(data) if data else None
        self._subscriptions: list[_MemorySubscription] = []
        self._lock = threading.Lock()

    @property
    def data(self) -> Any:
        """Return a copy of the whole document."""
        with self._lock:
            return copy.deepcopy(self._data)

    def get(self, path: str) -> Any:
        """Return a copy of the value at ``path``."""
        with self._lock:
            return copy.deepcopy(get_in(self._data, split_path(path)))

    def subscribe(
        self,
        path: str,
        on_value: ValueCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """Open a live subscription and deliver the current value."""
        keys = split_path(path)
        subscription = _MemorySubscription(self, keys, on_value)
        with self._lock:
            self._subscriptions.append(subscription)
            value = copy.deepcopy(get_in(self._data, keys))
        on_value(value)
        return subscription

    def set(self, path: str, value: Any) -> Future:
        """Overwrite the whole subtree at ``path``."""
        return self._write({path: value})

    def update(self, values: dict[str, Any]) -> Future:
        """Apply every path/value pair in one write."""
        return self._write(values)

    def _write(self, values: dict[str, Any]) -> Future:
        future: Future = Future()
        changed = [split_path(path) for path in values]
        with self._lock:
            data = self._data
            for path, value in values.items():
                data = put_in(data, split_path(path), copy.deepcopy(value))
            self._data = data
            deliveries = [
                (sub, copy.deepcopy(get_in(self._data, sub.keys)))
                for sub in self._subscriptions
                if any(_overlaps(sub.keys, keys) for keys in changed)
            ]

        for subscription, value in deliveries:
            if not subscription.closed:
                subscription.on_value(value)
        future.set_result(None)
        return future

    def _detach(self, subscription: _MemorySubscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)


def _overlaps(a: list[str], b: list[str]) -> bool:
    shortest = min(len(a), len(b))
    return a[:shortest] == b[:shortest]
