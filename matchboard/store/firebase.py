"""Store client backed by the Firebase Realtime Database."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, Optional

from firebase_admin import db, exceptions

from matchboard.errors import StoreError

from .base import (
    ErrorCallback,
    RemoteStore,
    Subscription,
    ValueCallback,
    put_in,
    split_path,
)

if TYPE_CHECKING:
    from firebase_admin import App

logger = logging.getLogger(__name__)

DATA_EVENTS = ("put", "patch")


def apply_event(cache: Any, event_type: str, path: str, data: Any) -> Any:
    """Fold one streamed ``put``/``patch`` event into the cached value.

    ``path`` is relative to the listened reference. A ``put`` replaces the
    value at that path; a ``patch`` overwrites each listed child of it.
    """
    keys = split_path(path)
    if event_type == "put":
        return put_in(cache, keys, data)

    for child_path, value in (data or {}).items():
        cache = put_in(cache, keys + split_path(child_path), value)
    return cache


def _write(method: Any, value: Any) -> None:
    try:
        method(value)
    except exceptions.FirebaseError as e:
        raise StoreError(str(e)) from e


class _FirebaseSubscription(Subscription):
    """Keeps the full value of one path current from the event stream."""

    def __init__(
        self,
        path: str,
        on_value: ValueCallback,
        on_error: Optional[ErrorCallback],
    ) -> None:
        self.path = path
        self.on_value = on_value
        self.on_error = on_error
        self.value: Any = None
        self.registration: Any = None
        self._lock = threading.Lock()

    def handle_event(self, event: db.Event) -> None:
        """Apply a streamed event and deliver the resulting value."""
        if event.event_type not in DATA_EVENTS:
            return
        try:
            with self._lock:
                self.value = apply_event(
                    self.value, event.event_type, event.path, event.data
                )
                value = self.value
            self.on_value(value)
        except Exception as e:
            logger.exception(f"Error handling update on '{self.path}'")
            if self.on_error:
                self.on_error(e)

    def close(self) -> None:
        """Stop delivery and release the listener."""
        if self.registration is not None:
            self.registration.close()
            self.registration = None


class FirebaseStore(RemoteStore):
    """``RemoteStore`` over ``firebase_admin.db``.

    Listeners run on threads owned by the Admin SDK; writes run on a small
    executor so callers get a future back instead of blocking.
    """

    def __init__(self, app: Optional[App] = None, max_workers: int = 4) -> None:
        self._app = app
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="firebase-store"
        )

    def _reference(self, path: str) -> db.Reference:
        return db.reference(path, app=self._app)

    def subscribe(
        self,
        path: str,
        on_value: ValueCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """Open a streaming listener on ``path``."""
        subscription = _FirebaseSubscription(path, on_value, on_error)
        try:
            subscription.registration = self._reference(path).listen(
                subscription.handle_event
            )
        except (exceptions.FirebaseError, ValueError) as e:
            logger.error(f"Could not subscribe to '{path}': {e}")
            if on_error is None:
                raise
            on_error(e)
        return subscription

    def set(self, path: str, value: Any) -> Future:
        """Overwrite the whole subtree at ``path``."""
        return self._executor.submit(_write, self._reference(path).set, value)

    def update(self, values: dict[str, Any]) -> Future:
        """Apply a multi-path update rooted at the top of the database."""
        return self._executor.submit(_write, self._reference("/").update, values)

    def close(self) -> None:
        """Stop accepting writes; in-flight writes finish in the background."""
        self._executor.shutdown(wait=False)
