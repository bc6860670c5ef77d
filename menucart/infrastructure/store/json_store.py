from __future__ import annotations

import re
import threading
from pathlib import Path

from menucart.application.exceptions import StorageError
from menucart.application.ports.key_value_store import KeyValueStorePort

_SAFE_KEY_RE = re.compile(r"[A-Za-z0-9_.-]+")


class JsonFileKeyValueStore(KeyValueStorePort):
    """One file per key under data_dir; values are stored as raw text."""

    def __init__(self, data_dir: str = "./data/cart") -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._locks: dict[str, threading.Lock] = {}
        self._lock_lock = threading.Lock()  # Lock for managing locks dict

    def _get_lock(self, key: str) -> threading.Lock:
        """Get or create a lock for a key."""
        with self._lock_lock:
            if key not in self._locks:
                self._locks[key] = threading.Lock()
            return self._locks[key]

    def _get_file_path(self, key: str) -> Path:
        """Get the file path for a key."""
        if not _SAFE_KEY_RE.fullmatch(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"

    def get(self, key: str) -> str | None:
        file_path = self._get_file_path(key)
        with self._get_lock(key):
            if not file_path.exists():
                return None
            try:
                return file_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise StorageError(f"Could not read {file_path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        """Write the value atomically (temp file + rename)."""
        file_path = self._get_file_path(key)
        temp_path = file_path.with_suffix(".json.tmp")

        with self._get_lock(key):
            try:
                with open(temp_path, "w", encoding="utf-8") as f:
                    f.write(value)
                # Atomic rename
                temp_path.replace(file_path)
            except OSError as e:
                # Clean up temp file on error
                temp_path.unlink(missing_ok=True)
                raise StorageError(f"Could not write {file_path}: {e}") from e

    def delete(self, key: str) -> None:
        file_path = self._get_file_path(key)
        with self._get_lock(key):
            try:
                file_path.unlink(missing_ok=True)
            except OSError as e:
                raise StorageError(f"Could not delete {file_path}: {e}") from e
