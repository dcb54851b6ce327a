import os
# Ensure the app factory picks the Testing config & SQLite memory DB
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///:memory:")

from datetime import datetime, timedelta, timezone

import pytest
from app import create_app
from app.extensions import db
from app.services import feedback as svc
from app.services.kv_store import MemoryKeyValueStore

@pytest.fixture(scope="session")
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "KV_BACKEND": "sql",
        "API_PREFIX": "/api",
        "RATELIMIT_ENABLED": False,
    })
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()

@pytest.fixture()
def client(app):
    return app.test_client()

@pytest.fixture()
def memory_store():
    return MemoryKeyValueStore()

@pytest.fixture()
def clock(monkeypatch):
    """Deterministic, strictly increasing timestamps for ordering assertions."""
    state = {"now": datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)}

    def _tick():
        state["now"] += timedelta(minutes=1)
        return state["now"]

    monkeypatch.setattr(svc, "_utcnow", _tick)
    return state

@pytest.fixture(autouse=True)
def _db_clean(app):
    # Clean BEFORE each test
    with app.app_context():
        db.session.rollback()
        for tbl in reversed(db.metadata.sorted_tables):
            db.session.execute(tbl.delete())
        db.session.commit()
    yield
    # And AFTER each test (keeps state hermetic even if a test fails mid-transaction)
    with app.app_context():
        db.session.rollback()
        for tbl in reversed(db.metadata.sorted_tables):
            db.session.execute(tbl.delete())
        db.session.commit()
