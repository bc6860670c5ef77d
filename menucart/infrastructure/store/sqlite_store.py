from __future__ import annotations

import os
import sqlite3
import threading

from menucart.application.exceptions import StorageError
from menucart.application.ports.key_value_store import KeyValueStorePort

_SCHEMA = "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL)"


class SqliteKeyValueStore(KeyValueStorePort):
    def __init__(self, db_path: str = "./data/cart.sqlite3") -> None:
        self._db_path = db_path
        self._lock = threading.Lock()
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        directory = os.path.dirname(self._db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        return sqlite3.connect(self._db_path)

    def _init_db(self) -> None:
        try:
            conn = self._connect()
            try:
                conn.execute(_SCHEMA)
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"Could not initialize {self._db_path}: {e}") from e

    def get(self, key: str) -> str | None:
        with self._lock:
            try:
                conn = self._connect()
                try:
                    row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
                finally:
                    conn.close()
            except sqlite3.Error as e:
                raise StorageError(f"Could not read {key}: {e}") from e
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with self._lock:
            try:
                conn = self._connect()
                try:
                    conn.execute("INSERT OR REPLACE INTO kv(key, value) VALUES(?, ?)", (key, value))
                    conn.commit()
                finally:
                    conn.close()
            except sqlite3.Error as e:
                raise StorageError(f"Could not write {key}: {e}") from e

    def delete(self, key: str) -> None:
        with self._lock:
            try:
                conn = self._connect()
                try:
                    conn.execute("DELETE FROM kv WHERE key = ?", (key,))
                    conn.commit()
                finally:
                    conn.close()
            except sqlite3.Error as e:
                raise StorageError(f"Could not delete {key}: {e}") from e
