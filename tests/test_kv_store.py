import pytest
from sqlalchemy.exc import OperationalError

from app.extensions import db
from app.models import KvEntry
from app.services.errors import StorageError
from app.services.kv_store import MemoryKeyValueStore, SqlKeyValueStore

@pytest.fixture(params=["sql", "memory"])
def store(request, app):
    if request.param == "memory":
        yield MemoryKeyValueStore()
        return
    with app.app_context():
        yield SqlKeyValueStore()

def test_get_missing_returns_none(store):
    assert store.get("feedback:nope") is None

def test_set_then_get(store):
    store.set("feedback:a", {"text": "hi", "tags": ["x"]})
    assert store.get("feedback:a") == {"text": "hi", "tags": ["x"]}

def test_set_overwrites(store):
    store.set("messages:a", [])
    store.set("messages:a", [{"id": "m1"}])
    assert store.get("messages:a") == [{"id": "m1"}]

def test_values_are_detached_copies(store):
    store.set("community:a", {"upvotes": 0})
    got = store.get("community:a")
    got["upvotes"] = 99
    assert store.get("community:a") == {"upvotes": 0}

def test_in_place_mutation_then_set_persists(store):
    store.set("messages:a", [])
    msgs = store.get("messages:a")
    msgs.append({"id": "m1"})
    store.set("messages:a", msgs)
    assert store.get("messages:a") == [{"id": "m1"}]

def test_scan_by_prefix_returns_sorted_pairs(store):
    store.set("feedback:b", {"n": 2})
    store.set("feedback:a", {"n": 1})
    store.set("community:a", {"n": 3})
    assert store.scan_by_prefix("feedback:") == [("feedback:a", {"n": 1}), ("feedback:b", {"n": 2})]

def test_scan_by_prefix_treats_wildcards_literally(store):
    store.set("trends:IT_x:2024-01-01", {"count": 1})
    store.set("trends:ITax:2024-01-01", {"count": 2})
    store.set("trends:100%:2024-01-01", {"count": 3})
    store.set("trends:1000:2024-01-01", {"count": 4})
    assert [k for k, _ in store.scan_by_prefix("trends:IT_")] == ["trends:IT_x:2024-01-01"]
    assert [k for k, _ in store.scan_by_prefix("trends:100%")] == ["trends:100%:2024-01-01"]

def test_scan_by_prefix_is_case_sensitive(store):
    store.set("feedback:a", {"n": 1})
    store.set("FEEDBACK:b", {"n": 2})
    assert [k for k, _ in store.scan_by_prefix("feedback:")] == ["feedback:a"]

def test_scan_empty_prefix_match(store):
    assert store.scan_by_prefix("nothing:") == []

def test_sql_store_persists_rows(app):
    with app.app_context():
        SqlKeyValueStore().set("feedback:row", {"text": "persisted"})
        row = db.session.get(KvEntry, "feedback:row")
        assert row is not None
        assert row.value == {"text": "persisted"}
        assert row.created_at is not None

def test_sql_store_wraps_driver_errors(app, monkeypatch):
    with app.app_context():
        store = SqlKeyValueStore()

        def boom(*a, **kw):
            raise OperationalError("SELECT 1", {}, Exception("db down"))

        monkeypatch.setattr(db.session, "get", boom)
        with pytest.raises(StorageError):
            store.get("feedback:x")
        with pytest.raises(StorageError):
            store.set("feedback:x", {})
