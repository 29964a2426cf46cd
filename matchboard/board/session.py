"""Session controller that keeps the board in sync with the remote store."""

from __future__ import annotations

import datetime
import logging
import threading
from collections import deque
from concurrent.futures import Future
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional

from matchboard.constants import (
    CATEGORY_ERROR,
    CATEGORY_SUCCESS,
    COUNTDOWN_INTERVAL,
    DEFAULT_SCHEDULE,
    MATCHES_PATH,
    MSG_LOAD_FAILED,
    MSG_MATCH_NOT_FOUND,
    MSG_NAME_REQUIRED,
    MSG_PHONE_REQUIRED,
    MSG_RESET_FAILED,
    MSG_RESET_SUCCESS,
    MSG_TEAM_REQUIRED,
    NOTIFICATION_LIMIT,
    RESET_MARKER_PATH,
    ROOT_PATH,
    STATUS_LOADING,
    STATUS_READY,
    TEAM1,
    TEAM2,
    TEAM_KEYS,
)
from matchboard.errors import NotFoundError, ValidationError

from .timer import RepeatingTimer
from .utils import (
    generate_player_id,
    roster,
    snapshot_to_matches,
    time_until_reset,
    today_string,
)

if TYPE_CHECKING:
    from matchboard.core.types import BoardDocument, Match, Player
    from matchboard.store import RemoteStore, Subscription

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    """A dismissible message for the UI."""

    message: str
    category: str = CATEGORY_SUCCESS


def build_reset_document(
    today: str, schedule: Optional[dict[str, str]] = None
) -> BoardDocument:
    """Build the root document a reset writes: empty matches plus the marker."""
    schedule = schedule or DEFAULT_SCHEDULE
    return {
        "matches": {
            key: {"time": label, TEAM1: [], TEAM2: []}
            for key, label in schedule.items()
        },
        "lastResetDate": today,
    }


def _then(source: Future, handler: Callable[[Future], Any]) -> Future:
    """Return a future resolved with ``handler(source)`` once ``source`` is done."""
    result: Future = Future()

    def _done(done: Future) -> None:
        try:
            result.set_result(handler(done))
        except Exception as e:
            result.set_exception(e)

    source.add_done_callback(_done)
    return result


def _resolved(value: Any = None) -> Future:
    future: Future = Future()
    future.set_result(value)
    return future


def _failed(error: BaseException) -> Future:
    future: Future = Future()
    future.set_exception(error)
    return future


def _value(done: Future, value: Any) -> Any:
    """Re-raise the failure of ``done``, otherwise return ``value``."""
    done.result()
    return value


class BoardSession:
    """Owns the board view state for one connection to the store.

    On ``start`` it subscribes to ``matches`` and ``lastResetDate`` and
    starts the countdown timer; ``close`` releases all three. Push
    callbacks, timer ticks and mutations all run under one lock, so they
    interleave but never overlap.

    Whenever the marker is delivered with a value other than today's local
    date a reset is issued. With ``reset_on_first_snapshot`` off, the very
    first marker delivery of the session is only recorded, never checked.
    """

    def __init__(
        self,
        store: RemoteStore,
        *,
        reset_on_first_snapshot: bool = True,
        countdown_interval: float = COUNTDOWN_INTERVAL,
        clock: Callable[[], datetime.datetime] = datetime.datetime.now,
    ) -> None:
        self.store = store
        self.reset_on_first_snapshot = reset_on_first_snapshot
        self.countdown_interval = countdown_interval
        self.clock = clock

        self.status = STATUS_LOADING
        self.matches: list[Match] = []
        self.last_reset_date = ""
        self.countdown = ""
        self.notifications: deque[Notification] = deque(maxlen=NOTIFICATION_LIMIT)

        self._lock = threading.RLock()
        self._marker_deliveries = 0
        self._reset_in_flight: Optional[str] = None
        self._subscriptions: list[Subscription] = []
        self._timer: Optional[RepeatingTimer] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> BoardSession:
        """Open both subscriptions and start the countdown."""
        if self._subscriptions or self._timer is not None:
            raise RuntimeError("Board session already started")

        try:
            self._subscriptions.append(
                self.store.subscribe(
                    MATCHES_PATH, self._on_matches, self._on_matches_error
                )
            )
            self._subscriptions.append(
                self.store.subscribe(
                    RESET_MARKER_PATH, self._on_marker, self._on_marker_error
                )
            )
            self._timer = RepeatingTimer(self.countdown_interval, self.refresh_countdown)
            self._timer.start()
        except Exception:
            self.close()
            raise
        return self

    def close(self) -> None:
        """Cancel the countdown and both subscriptions."""
        with self._lock:
            subscriptions, self._subscriptions = self._subscriptions, []
            timer, self._timer = self._timer, None

        try:
            if timer is not None:
                timer.cancel()
        finally:
            for subscription in subscriptions:
                try:
                    subscription.close()
                except Exception:
                    logger.exception("Error closing store subscription")

    def __enter__(self) -> BoardSession:
        return self.start()

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def is_ready(self) -> bool:
        return self.status == STATUS_READY

    # ------------------------------------------------------------------
    # Store pushes
    # ------------------------------------------------------------------
    def _on_matches(self, value: Any) -> None:
        with self._lock:
            self.matches = snapshot_to_matches(value)
            if self.status == STATUS_LOADING:
                logger.info(f"Board ready with {len(self.matches)} matches")
            self.status = STATUS_READY

    def _on_matches_error(self, error: Exception) -> None:
        logger.error(f"Error loading matches: {error}")
        with self._lock:
            self.notify(f"{MSG_LOAD_FAILED}: {error}", CATEGORY_ERROR)
            self.status = STATUS_READY

    def _on_marker(self, value: Any) -> None:
        with self._lock:
            self.last_reset_date = value or ""
            self._marker_deliveries += 1
            if self._marker_deliveries == 1 and not self.reset_on_first_snapshot:
                return

            today = today_string(self.clock())
            if value == today or self._reset_in_flight == today:
                return
            self._reset_in_flight = today

        logger.info(f"Reset marker is '{value}', resetting board for {today}")
        self.reset_data(today)

    def _on_marker_error(self, error: Exception) -> None:
        logger.error(f"Error loading reset marker: {error}")
        with self._lock:
            self.notify(f"{MSG_LOAD_FAILED}: {error}", CATEGORY_ERROR)

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------
    def reset_data(self, today: str) -> Future:
        """Overwrite the whole store with the fixed schedule for ``today``.

        The returned future resolves once the outcome has been queued as a
        notification, and raises the store's failure if the write failed.
        """
        try:
            written = self.store.set(ROOT_PATH, build_reset_document(today))
        except Exception as e:
            written = _failed(e)

        def _finish(done: Future) -> None:
            error = done.exception()
            with self._lock:
                if self._reset_in_flight == today:
                    self._reset_in_flight = None
                if error is not None:
                    logger.error(f"Error resetting board: {error}")
                    self.notify(f"{MSG_RESET_FAILED}: {error}", CATEGORY_ERROR)
                    raise error
                logger.info(f"Board reset for {today}")
                self.notify(MSG_RESET_SUCCESS)

        return _then(written, _finish)

    # ------------------------------------------------------------------
    # Countdown
    # ------------------------------------------------------------------
    def refresh_countdown(self) -> str:
        """Recompute the time left until the next local midnight."""
        with self._lock:
            self.countdown = time_until_reset(self.clock())
            return self.countdown

    # ------------------------------------------------------------------
    # Join / leave
    # ------------------------------------------------------------------
    def find_match(self, match_id: str) -> Optional[Match]:
        """Return the locally held match with ``match_id``."""
        with self._lock:
            return next((m for m in self.matches if m["id"] == match_id), None)

    def add_player(
        self, match_id: str, name: str, phone: str, team: Optional[str]
    ) -> Future:
        """Sign a new player up for ``team`` of a match.

        Input is checked in order (name, phone, team) and the first problem
        is raised as a ``ValidationError`` without touching the store. The
        returned future resolves to the new player once the roster write
        lands.
        """
        name = (name or "").strip()
        phone = (phone or "").strip()
        if not name:
            raise ValidationError(MSG_NAME_REQUIRED, field="name")
        if not phone:
            raise ValidationError(MSG_PHONE_REQUIRED, field="phone")
        if team not in TEAM_KEYS:
            raise ValidationError(MSG_TEAM_REQUIRED, field="team")

        with self._lock:
            match = self.find_match(match_id)
            if match is None:
                raise NotFoundError(MSG_MATCH_NOT_FOUND)

            player: Player = {"id": generate_player_id(), "name": name, "phone": phone}
            previous = match.get(team, [])
            players = roster(match, team) + [player]
            match[team] = players

        return _then(
            self._write_roster(match_id, team, previous, players),
            lambda done: _value(done, player),
        )

    def remove_player(self, match_id: str, team: str, player_id: str) -> Future:
        """Take a player off a roster; unknown matches are a no-op."""
        with self._lock:
            match = self.find_match(match_id)
            if match is None:
                return _resolved()

            previous = match.get(team, [])
            players = [p for p in roster(match, team) if p.get("id") != player_id]
            match[team] = players

        return self._write_roster(match_id, team, previous, players)

    def _write_roster(
        self,
        match_id: str,
        team: str,
        previous: list[Player],
        players: list[Player],
    ) -> Future:
        """Write ``players`` as the roster, restoring ``previous`` on failure.

        The local roster is only rolled back while it still holds ``players``;
        a push or a later mutation that replaced it in the meantime wins.
        """
        path = f"{MATCHES_PATH}/{match_id}/{team}"
        try:
            written = self.store.update({path: players})
        except Exception as e:
            written = _failed(e)

        def _settle(done: Future) -> None:
            error = done.exception()
            if error is None:
                return
            logger.error(f"Error writing {path}: {error}")
            with self._lock:
                match = self.find_match(match_id)
                if match is not None and match.get(team) is players:
                    match[team] = previous
            raise error

        return _then(written, _settle)

    # ------------------------------------------------------------------
    # Notifications and view state
    # ------------------------------------------------------------------
    def notify(self, message: str, category: str = CATEGORY_SUCCESS) -> None:
        """Queue a notification for the UI."""
        with self._lock:
            self.notifications.append(Notification(message, category))

    def drain_notifications(self) -> list[Notification]:
        """Return and clear every queued notification."""
        with self._lock:
            pending = list(self.notifications)
            self.notifications.clear()
            return pending

    def snapshot(self) -> dict[str, Any]:
        """Return the view state as plain data."""
        with self._lock:
            return {
                "status": self.status,
                "matches": [dict(m) for m in self.matches],
                "lastResetDate": self.last_reset_date,
                "countdown": self.countdown,
            }
