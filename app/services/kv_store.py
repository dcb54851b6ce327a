from __future__ import annotations

import copy
import logging
from typing import Any, List, Optional, Protocol, Tuple

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from app.extensions import db
from app.models.kv_entry import KvEntry
from app.services.errors import StorageError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Capability the feedback service needs from any backing store."""

    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...

    def scan_by_prefix(self, prefix: str) -> List[Tuple[str, Any]]: ...


def _escape_like(prefix: str) -> str:
    return prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SqlKeyValueStore:
    """
    kv_store table via Flask-SQLAlchemy. Every set() commits on its own,
    so multi-key sequences are not atomic.
    """

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    def get(self, key: str) -> Optional[Any]:
        try:
            row = self.session.get(KvEntry, key)
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("kv get failed key=%s", key)
            raise StorageError("storage read failed") from exc
        if row is None:
            return None
        # Callers mutate what they read; hand out a detached copy
        return copy.deepcopy(row.value)

    def set(self, key: str, value: Any) -> None:
        try:
            row = self.session.get(KvEntry, key)
            if row is None:
                self.session.add(KvEntry(key=key, value=copy.deepcopy(value)))
            else:
                row.value = copy.deepcopy(value)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("kv set failed key=%s", key)
            raise StorageError("storage write failed") from exc

    def scan_by_prefix(self, prefix: str) -> List[Tuple[str, Any]]:
        try:
            rows = (
                self.session.query(KvEntry.key, KvEntry.value)
                .filter(KvEntry.key.like(_escape_like(prefix) + "%", escape="\\"))
                # LIKE is case-insensitive on SQLite; pin the exact prefix
                .filter(func.substr(KvEntry.key, 1, len(prefix)) == prefix)
                .order_by(KvEntry.key)
                .all()
            )
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("kv scan failed prefix=%s", prefix)
            raise StorageError("storage scan failed") from exc
        return [(k, copy.deepcopy(v)) for k, v in rows]


class MemoryKeyValueStore:
    """Process-local dict; for tests, demos and single-process dev runs."""

    def __init__(self):
        self._data = {}

    def get(self, key: str) -> Optional[Any]:
        if key not in self._data:
            return None
        return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def scan_by_prefix(self, prefix: str) -> List[Tuple[str, Any]]:
        return [
            (k, copy.deepcopy(v))
            for k, v in sorted(self._data.items())
            if k.startswith(prefix)
        ]

    def clear(self) -> None:
        self._data.clear()

    def __len__(self):
        return len(self._data)


_BACKENDS = {
    "sql": SqlKeyValueStore,
    "memory": MemoryKeyValueStore,
}


def init_kv_store(app) -> None:
    backend = (app.config.get("KV_BACKEND") or "sql").lower()
    try:
        factory = _BACKENDS[backend]
    except KeyError:
        raise RuntimeError(f"Unknown KV_BACKEND {backend!r}; expected one of {sorted(_BACKENDS)}") from None
    app.extensions["kv_store"] = factory()
    app.logger.info("KV backend: %s", backend)


def get_store() -> KeyValueStore:
    return current_app.extensions["kv_store"]
