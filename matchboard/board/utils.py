"""Board-related utility functions."""

from __future__ import annotations

import datetime
import secrets
import string
from typing import Any

from matchboard.constants import PLAYER_ID_LENGTH, TEAM_KEYS
from matchboard.core.types import Match

ID_ALPHABET = string.digits + string.ascii_lowercase


def today_string(now: datetime.datetime) -> str:
    """Return the local calendar date of ``now`` as ``YYYY-MM-DD``."""
    return now.date().isoformat()


def time_until_reset(now: datetime.datetime) -> str:
    """Format the time left until the next local midnight, e.g. ``0ч 29м``.

    Hours and minutes are truncated, never rounded.
    """
    next_midnight = datetime.datetime.combine(
        now.date() + datetime.timedelta(days=1), datetime.time.min, tzinfo=now.tzinfo
    )
    seconds = int((next_midnight - now).total_seconds())
    hours, remainder = divmod(seconds, 3600)
    return f"{hours}ч {remainder // 60}м"


def generate_player_id() -> str:
    """Generate a short random base-36 player id."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(PLAYER_ID_LENGTH))


def snapshot_to_matches(data: Any) -> list[Match]:
    """Turn a pushed ``matches`` value into the session's match list.

    Each key becomes the match ``id``; the remaining fields are copied as
    they are. Rosters the store dropped for being empty read as ``[]``.
    """
    if not isinstance(data, dict):
        return []

    matches = []
    for key, value in data.items():
        match = dict(value) if isinstance(value, dict) else {}
        match["id"] = key
        for team in TEAM_KEYS:
            if match.get(team) is None:
                match[team] = []
        matches.append(match)
    return matches


def roster(match: Match, team: str) -> list[Any]:
    """Return the players on ``team`` of ``match``."""
    return list(match.get(team) or [])
