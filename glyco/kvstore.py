# -*- coding: utf-8 -*-
"""Key-value store — string keys to string blobs, namespaced per user.

Mirrors the device-local storage the mobile client relies on: the backend
keeps per-user blobs (onboarding answers, glycemic snapshot, settings...)
under keys such as ``user_app_settings_<userId>``.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from .app_db import db_conn, init_app_db
from .config import settings

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, blob: str) -> None: ...

    def remove(self, key: str) -> None: ...


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def user_key(name: str, user_id: str) -> str:
    return f"{name}_{user_id}"


class SQLiteKeyValueStore:
    """Blobs kept in the ``kv_store`` table of the application database."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        init_app_db(db_path)

    def get(self, key: str) -> Optional[str]:
        with db_conn(self.db_path) as conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
            return row["value"] if row else None

    def set(self, key: str, blob: str) -> None:
        with db_conn(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, blob, _utc_now()),
            )

    def remove(self, key: str) -> None:
        with db_conn(self.db_path) as conn:
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))


class MemoryKeyValueStore:
    def __init__(self) -> None:
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, blob: str) -> None:
        with self._lock:
            self._data[key] = blob

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return sorted(self._data.keys())


def get_json(store: KeyValueStore, key: str, default: Any = None) -> Any:
    """Read and decode a JSON blob; unreadable blobs count as absent."""
    raw = store.get(key)
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Discarding undecodable blob under %s", key)
        return default


def set_json(store: KeyValueStore, key: str, value: Any) -> None:
    store.set(key, json.dumps(value, ensure_ascii=False))


_default_store: Optional[SQLiteKeyValueStore] = None


def get_store() -> SQLiteKeyValueStore:
    """Application-wide store bound to ``settings.app_db_path``."""
    global _default_store
    if _default_store is None:
        _default_store = SQLiteKeyValueStore(settings.app_db_path)
    return _default_store
