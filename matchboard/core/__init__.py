"""Core module for the matchboard application."""

from .types import BoardDocument, Match, Player

__all__ = ["BoardDocument", "Match", "Player"]
