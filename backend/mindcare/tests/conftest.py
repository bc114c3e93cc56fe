"""
Shared fixtures: an in-memory SQLite backend injected into the app.
"""
import os

# Settings are read at import time, so pin them before importing the app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORAGE_BACKEND"] = "sql"
os.environ["GEMINI_API_KEY"] = ""
os.environ["ENVIRONMENT"] = "production"

from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import mindcare.models  # noqa: F401
from mindcare.api.dependencies import get_storage_factory
from mindcare.db.base import Base
from mindcare.main import app
from mindcare.stores.sql import SqlBackend


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def storage_factory(engine):
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    @contextmanager
    def factory():
        db = Session()
        try:
            yield SqlBackend(db)
        finally:
            db.close()

    return factory


@pytest.fixture
def client(storage_factory):
    app.dependency_overrides[get_storage_factory] = lambda: storage_factory
    yield TestClient(app)
    app.dependency_overrides.clear()


def signup(client, username="alice", email="a@x.com", password="secret1"):
    return client.post(
        "/api/auth/signup",
        json={"username": username, "email": email, "password": password}
    )


@pytest.fixture
def auth_headers(client):
    """Headers for two distinct users: alice and bob."""
    alice = signup(client).json()
    bob = signup(client, "bob", "b@x.com", "secret2").json()
    return {
        "alice": {"Authorization": f"Bearer {alice['token']}"},
        "bob": {"Authorization": f"Bearer {bob['token']}"},
    }
