"""Shared fixtures.

Tests run against an in-memory SQLite database created fresh for every
test; the API client overrides ``get_db`` to use it.
"""

import datetime
import os

# Must be set before athletica.core.config is imported
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from athletica.db.init_db import init_db
from athletica.db.session import get_db
from athletica.main import app
from athletica.services.analytics_service import LIVE_STATS_CACHE

USER_ID = "user-1"


class FakeClock:
    """Deterministic clock for services: starts at *start*, moves only on ``advance``."""

    def __init__(self, start: datetime.datetime):
        self.now = start

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, seconds: float = 0, **kwargs) -> datetime.datetime:
        self.now = self.now + datetime.timedelta(seconds=seconds, **kwargs)
        return self.now


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def clock() -> FakeClock:
    # A Monday morning, clear of the early-bird and night-owl windows
    return FakeClock(datetime.datetime(2026, 3, 2, 10, 0, 0))


@pytest.fixture(autouse=True)
def _clear_live_stats_cache():
    # Session ids restart at 1 on every fresh database
    LIVE_STATS_CACHE.clear()
    yield
    LIVE_STATS_CACHE.clear()


@pytest.fixture
def client(engine):
    def _get_db():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app, headers={"X-User-Id": USER_ID}) as test_client:
        yield test_client
    app.dependency_overrides.clear()
