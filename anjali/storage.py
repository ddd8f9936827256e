"""Key/blob storage substrates the concept store persists through."""

from __future__ import annotations

import logging
import re
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional, Protocol, Union

logger = logging.getLogger(__name__)

_UNSAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


class StorageBackend(Protocol):
    """get/put of opaque blobs under a string key."""

    def get(self, key: str) -> Optional[bytes]:
        ...

    def put(self, key: str, data: bytes) -> bool:
        ...


class InMemoryStorage:
    """Dict-backed substrate for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None) -> None:
        self.blobs: Dict[str, bytes] = dict(initial or {})
        self.fail_writes = False

    def get(self, key: str) -> Optional[bytes]:
        return self.blobs.get(key)

    def put(self, key: str, data: bytes) -> bool:
        if self.fail_writes:
            return False
        self.blobs[key] = bytes(data)
        return True


class JsonFileStorage:
    """One file per key under ``directory``."""

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{_UNSAFE_KEY.sub('_', key)}.json"

    def get(self, key: str) -> Optional[bytes]:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def put(self, key: str, data: bytes) -> bool:
        path = self.path_for(key)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_bytes(data)
        tmp_path.replace(path)
        return True


class SQLiteStorage:
    """Persist blobs in a lightweight SQLite database."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(str(self.path))
        try:
            yield conn
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS blobs (
                    key TEXT PRIMARY KEY,
                    value BLOB NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            conn.commit()

    def get(self, key: str) -> Optional[bytes]:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM blobs WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        return bytes(row[0])

    def put(self, key: str, data: bytes) -> bool:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO blobs (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                """,
                (key, sqlite3.Binary(data)),
            )
            conn.commit()
        logger.debug(f"Wrote {len(data)} bytes to {self.path} under '{key}'")
        return True


def open_storage(backend: str, data_path: Union[str, Path]) -> StorageBackend:
    """Build a substrate by name: ``json``, ``sqlite`` or ``memory``."""
    if backend == "json":
        return JsonFileStorage(data_path)
    if backend == "sqlite":
        return SQLiteStorage(Path(data_path) / "anjali_memory.db")
    if backend == "memory":
        return InMemoryStorage()
    raise ValueError(f"Unsupported storage backend '{backend}'.")
