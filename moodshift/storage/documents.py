"""SQLite-backed document store.

Documents are JSON objects addressed by ``(collection, doc_id)``, the same
shape the service keeps for config documents, conversation records and cache
statistics. Each operation opens its own connection in WAL mode so the store
can be shared across worker threads.
"""

from __future__ import annotations

import asyncio
import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from moodshift.storage.base import StorageError

Document = dict[str, Any]
Mutator = Callable[[Document | None], Document | None]


class DocumentStore:
    """Keyed JSON documents grouped into collections."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._connect()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    collection TEXT NOT NULL,
                    doc_id TEXT NOT NULL,
                    body TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (collection, doc_id)
                )
                """
            )
        finally:
            conn.close()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            str(self.db_path),
            timeout=30.0,
            check_same_thread=False,
            isolation_level=None,
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA busy_timeout=30000")
        conn.execute("PRAGMA synchronous=NORMAL")
        return conn

    # ── async API ────────────────────────────────────────────────────

    async def get(self, collection: str, doc_id: str) -> Document | None:
        return await asyncio.to_thread(self.get_sync, collection, doc_id)

    async def set(self, collection: str, doc_id: str, body: Document) -> None:
        await asyncio.to_thread(self.set_sync, collection, doc_id, body)

    async def delete(self, collection: str, doc_id: str) -> bool:
        return await asyncio.to_thread(self.delete_sync, collection, doc_id)

    async def update(
        self, collection: str, doc_id: str, mutate: Mutator
    ) -> Document | None:
        """Read-modify-write one document inside a single transaction.

        ``mutate`` receives the current body (or None) and returns the new
        body; returning None deletes the document.
        """
        return await asyncio.to_thread(self.update_sync, collection, doc_id, mutate)

    async def ping(self) -> bool:
        try:
            await asyncio.to_thread(self._ping_sync)
        except StorageError:
            return False
        return True

    # ── sync implementation ──────────────────────────────────────────

    def get_sync(self, collection: str, doc_id: str) -> Document | None:
        try:
            conn = self._connect()
            try:
                row = conn.execute(
                    "SELECT body FROM documents WHERE collection = ? AND doc_id = ?",
                    (collection, doc_id),
                ).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StorageError(f"read {collection}/{doc_id} failed: {exc}") from exc
        if row is None:
            return None
        return _decode(row["body"], collection, doc_id)

    def set_sync(self, collection: str, doc_id: str, body: Document) -> None:
        try:
            conn = self._connect()
            try:
                _upsert(conn, collection, doc_id, body)
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StorageError(f"write {collection}/{doc_id} failed: {exc}") from exc

    def delete_sync(self, collection: str, doc_id: str) -> bool:
        try:
            conn = self._connect()
            try:
                cur = conn.execute(
                    "DELETE FROM documents WHERE collection = ? AND doc_id = ?",
                    (collection, doc_id),
                )
                return cur.rowcount > 0
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StorageError(f"delete {collection}/{doc_id} failed: {exc}") from exc

    def update_sync(
        self, collection: str, doc_id: str, mutate: Mutator
    ) -> Document | None:
        try:
            conn = self._connect()
        except sqlite3.Error as exc:
            raise StorageError(f"update {collection}/{doc_id} failed: {exc}") from exc
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                row = conn.execute(
                    "SELECT body FROM documents WHERE collection = ? AND doc_id = ?",
                    (collection, doc_id),
                ).fetchone()
                current = None if row is None else _decode(row["body"], collection, doc_id)
                updated = mutate(current)
                if updated is None:
                    conn.execute(
                        "DELETE FROM documents WHERE collection = ? AND doc_id = ?",
                        (collection, doc_id),
                    )
                else:
                    _upsert(conn, collection, doc_id, updated)
                conn.execute("COMMIT")
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            return updated
        except sqlite3.Error as exc:
            raise StorageError(f"update {collection}/{doc_id} failed: {exc}") from exc
        finally:
            conn.close()

    def _ping_sync(self) -> None:
        try:
            conn = self._connect()
            try:
                conn.execute("SELECT 1").fetchone()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StorageError(f"document store unreachable: {exc}") from exc


def _upsert(conn: sqlite3.Connection, collection: str, doc_id: str, body: Document) -> None:
    conn.execute(
        """
        INSERT INTO documents (collection, doc_id, body, updated_at)
        VALUES (?, ?, ?, ?)
        ON CONFLICT(collection, doc_id)
        DO UPDATE SET body = excluded.body, updated_at = excluded.updated_at
        """,
        (
            collection,
            doc_id,
            json.dumps(body, ensure_ascii=False),
            datetime.now(timezone.utc).isoformat(),
        ),
    )


def _decode(raw: str, collection: str, doc_id: str) -> Document:
    try:
        body = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise StorageError(f"document {collection}/{doc_id} is corrupt: {exc}") from exc
    if not isinstance(body, dict):
        raise StorageError(f"document {collection}/{doc_id} is not an object")
    return body
