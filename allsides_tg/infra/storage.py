"""SQLite connection management for the published-story history."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from threading import Lock
from typing import Dict


class SQLiteManager:
    """Manage SQLite connections with basic schema and durability guarantees."""

    def __init__(self) -> None:
        self._connections: Dict[Path, sqlite3.Connection] = {}
        self._lock = Lock()

    def connect(self, path: Path) -> sqlite3.Connection:
        path = path.resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            if path not in self._connections:
                conn = sqlite3.connect(path, check_same_thread=False)
                conn.row_factory = sqlite3.Row
                # fsync on every commit
                conn.execute("PRAGMA synchronous = FULL")
                self._ensure_schema(conn)
                self._connections[path] = conn
            return self._connections[path]

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS published_stories (
                url TEXT PRIMARY KEY,
                published_at TEXT NOT NULL
            )
            """
        )
        conn.commit()

    def close(self, path: Path) -> None:
        path = path.resolve()
        with self._lock:
            conn = self._connections.pop(path, None)
            if conn is not None:
                conn.close()

    def close_all(self) -> None:
        with self._lock:
            for conn in self._connections.values():
                conn.close()
            self._connections.clear()


__all__ = ["SQLiteManager"]
