"""Store doubles shared by the tests."""

from __future__ import annotations

import copy
import datetime
from concurrent.futures import Future
from typing import Any, Optional

from matchboard.store import MemoryStore, RemoteStore, Subscription


def failed_future(error: Exception) -> Future:
    future: Future = Future()
    future.set_exception(error)
    return future


def resolved_future(value: Any = None) -> Future:
    future: Future = Future()
    future.set_result(value)
    return future


def fixed_clock(*args: int):
    """Return a clock that always reads the given local datetime."""
    moment = datetime.datetime(*args)
    return lambda: moment


class RecordingStore(MemoryStore):
    """MemoryStore that records every write and can be told to fail them."""

    def __init__(
        self,
        data: Optional[dict[str, Any]] = None,
        fail_writes: Optional[Exception] = None,
    ) -> None:
        super().__init__(data)
        self.writes: list[tuple[str, Any]] = []
        self.fail_writes = fail_writes

    def set(self, path: str, value: Any) -> Future:
        self.writes.append(("set", {path: copy.deepcopy(value)}))
        if self.fail_writes is not None:
            return failed_future(self.fail_writes)
        return super().set(path, value)

    def update(self, values: dict[str, Any]) -> Future:
        self.writes.append(("update", copy.deepcopy(values)))
        if self.fail_writes is not None:
            return failed_future(self.fail_writes)
        return super().update(values)

    def writes_of(self, kind: str) -> list[Any]:
        return [values for write_kind, values in self.writes if write_kind == kind]


class NullSubscription(Subscription):
    def __init__(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True


class SilentStore(RemoteStore):
    """Accepts subscriptions but never delivers anything."""

    def __init__(self) -> None:
        self.subscriptions: list[NullSubscription] = []

    def subscribe(self, path, on_value, on_error=None):
        subscription = NullSubscription()
        self.subscriptions.append(subscription)
        return subscription

    def set(self, path, value):
        return resolved_future()

    def update(self, values):
        return resolved_future()


class BrokenReadStore(MemoryStore):
    """MemoryStore whose subscriptions on some paths fail to open."""

    def __init__(self, data=None, broken_paths=("matches",), error=None):
        super().__init__(data)
        self.broken_paths = broken_paths
        self.error = error or RuntimeError("permission denied")

    def subscribe(self, path, on_value, on_error=None):
        if path in self.broken_paths:
            on_error(self.error)
            return NullSubscription()
        return super().subscribe(path, on_value, on_error)
