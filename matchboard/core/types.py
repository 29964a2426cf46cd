"""Core data types for the matchboard application."""

from typing import Any, Dict, List, TypedDict  # noqa: UP035


class Player(TypedDict):
    """A player signed up on one team of one match."""

    id: str
    name: str
    phone: str


class _MatchBase(TypedDict):
    id: str
    time: str


class Match(_MatchBase, total=False):
    """A match as held in the session view; ``id`` is its store key."""

    team1: List[Player]  # noqa: UP006
    team2: List[Player]  # noqa: UP006


class BoardDocument(TypedDict):
    """The persisted root of the store."""

    matches: Dict[str, Dict[str, Any]]  # noqa: UP006
    lastResetDate: str
