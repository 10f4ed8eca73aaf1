"""Pytest configuration and fixtures."""

from datetime import date, datetime

import pytest

from grant_recommender.adapters import InMemoryStore
from grant_recommender.models import Grant

from factories import NOW, TODAY, make_preferences


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def clock():
    """Fixed clock shared by the engine and the in-memory store."""
    return lambda: NOW


@pytest.fixture
def store(clock) -> InMemoryStore:
    """Store with a single user who has no optional preferences."""
    return InMemoryStore(preferences=[make_preferences()], clock=clock)


@pytest.fixture
def all_null_grant() -> Grant:
    """Grant carrying nothing but an id."""
    return Grant(id="bare-001")
