"""Shared fixtures for the matchboard tests."""

from __future__ import annotations

import pytest

from matchboard.board.session import BoardSession, build_reset_document

from .helpers import RecordingStore, fixed_clock

TODAY = "2024-01-02"


@pytest.fixture
def clock():
    return fixed_clock(2024, 1, 2, 10, 0)


@pytest.fixture
def fresh_store():
    """A store that was already reset today."""
    return RecordingStore(build_reset_document(TODAY))


@pytest.fixture
def board(fresh_store, clock):
    session = BoardSession(fresh_store, clock=clock, countdown_interval=3600)
    session.start()
    yield session
    session.close()
