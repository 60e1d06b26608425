"""
Integration fixtures: an application wired to in-memory collaborators.
"""
from types import SimpleNamespace

import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient

from gridbazaar.main import create_application
from gridbazaar.dependencies import get_current_profile, get_db
from gridbazaar.realtime.broker import RealtimeBroker


@pytest.fixture
def database():
    db = MagicMock()
    db.ping = AsyncMock()
    return db


@pytest.fixture
def broker():
    return RealtimeBroker(queue_maxsize=10)


@pytest.fixture
def app(database, broker):
    return create_application(database=database, broker=broker)


@pytest.fixture
def current_profile():
    return SimpleNamespace(id=10, user_id=1, company_name="Acme Power", role="buyer")


@pytest.fixture
def session():
    db = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def client(app, current_profile, session):
    """Client authenticated as ``current_profile``; lifespan is not run."""
    async def override_db():
        yield session
    
    app.dependency_overrides[get_current_profile] = lambda: current_profile
    app.dependency_overrides[get_db] = override_db
    yield TestClient(app)
    app.dependency_overrides.clear()
