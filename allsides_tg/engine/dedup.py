"""Durable record of story URLs that have already been published."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock

from ..errors import DurabilityError
from ..infra.storage import SQLiteManager


class DedupStore:
    """Append-only URL set backed by SQLite.

    ``mark_published`` commits with ``synchronous=FULL`` before returning, so a
    URL reported as marked survives a crash and restart.
    """

    def __init__(self, manager: SQLiteManager, db_path: Path) -> None:
        self.manager = manager
        self.db_path = db_path
        self._lock = Lock()
        try:
            self._conn = self.manager.connect(db_path)
        except (OSError, sqlite3.Error) as exc:
            raise DurabilityError(f"cannot open story db {db_path}: {exc}") from exc

    @classmethod
    def open(cls, path: Path, manager: SQLiteManager | None = None) -> "DedupStore":
        return cls(manager or SQLiteManager(), path)

    def is_published(self, url: str) -> bool:
        with self._lock:
            try:
                cur = self._conn.execute(
                    "SELECT 1 FROM published_stories WHERE url = ?", (url,)
                )
                return cur.fetchone() is not None
            except sqlite3.Error as exc:
                raise DurabilityError(f"cannot query story db: {exc}") from exc

    def check_and_mark(self, url: str) -> bool:
        """Record ``url`` in one locked, committed step.

        Returns ``True`` when the URL was new and ``False`` when it was already
        recorded, so concurrent workers cannot both claim the same story.
        """

        with self._lock:
            try:
                cur = self._conn.execute(
                    "INSERT OR IGNORE INTO published_stories(url, published_at) VALUES (?, ?)",
                    (url, datetime.now(timezone.utc).isoformat(timespec="seconds")),
                )
                self._conn.commit()
            except sqlite3.Error as exc:
                raise DurabilityError(f"cannot record published story {url}: {exc}") from exc
            return cur.rowcount == 1

    def mark_published(self, url: str) -> bool:
        return self.check_and_mark(url)

    def recent(self, limit: int = 20) -> list[tuple[str, str]]:
        with self._lock:
            try:
                rows = self._conn.execute(
                    "SELECT url, published_at FROM published_stories ORDER BY published_at DESC, rowid DESC LIMIT ?",
                    (limit,),
                ).fetchall()
            except sqlite3.Error as exc:
                raise DurabilityError(f"cannot read story history: {exc}") from exc
        return [(row["url"], row["published_at"]) for row in rows]

    def close(self) -> None:
        self.manager.close(self.db_path)


__all__ = ["DedupStore"]
