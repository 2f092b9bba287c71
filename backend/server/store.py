"""Document store — owner-scoped JSON documents on top of SQLite.

Collections (``tasks``, ``tests``, ``syllabuses``) live in a single
``documents`` table.  Every read is filtered by owner, every write stamps the
owner from the caller, and a document's owner never changes after creation.

Each method opens its own connection, so calls may run in worker threads.
Listeners registered with ``watch`` receive the owner's full snapshot after
every committed write to that collection, or None when that snapshot could
not be read.
"""

import json
import logging
import sqlite3
import threading
import uuid
from typing import Callable, Optional

from server.database import get_db, init_db
from server.errors import NotConfiguredError

logger = logging.getLogger(__name__)

TASKS = "tasks"
TESTS = "tests"
SYLLABUSES = "syllabuses"

Listener = Callable[[str, Optional[list]], None]
_RESERVED = ("id", "owner")


def _pack(data: dict) -> str:
    return json.dumps({k: v for k, v in data.items() if k not in _RESERVED})


def _unpack(row) -> dict:
    return {**json.loads(row["data"]), "id": row["id"], "owner": row["owner"]}


class DocumentStore:
    def __init__(self, db_path: str):
        if not db_path:
            raise NotConfiguredError("Document store path is not configured")
        self.db_path = db_path
        init_db(db_path)
        self._listeners: dict[str, list[Listener]] = {}
        self._listeners_lock = threading.Lock()
        logger.info(f"DocumentStore ready db={db_path}")

    def _connect(self):
        return get_db(self.db_path)

    # ─── Reads ───────────────────────────────────────────────

    def query(self, collection: str, owner: str) -> list[dict]:
        conn = self._connect()
        try:
            rows = conn.execute(
                """SELECT id, owner, data FROM documents
                   WHERE collection = ? AND owner = ?
                   ORDER BY created_at, rowid""",
                (collection, owner)
            ).fetchall()
        finally:
            conn.close()
        return [_unpack(r) for r in rows]

    def get(self, collection: str, doc_id: str, owner: str) -> Optional[dict]:
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT id, owner, data FROM documents WHERE collection = ? AND id = ? AND owner = ?",
                (collection, doc_id, owner)
            ).fetchone()
        finally:
            conn.close()
        return _unpack(row) if row else None

    # ─── Writes ──────────────────────────────────────────────

    def _insert(self, conn, collection: str, owner: str, data: dict, doc_id: str = None) -> str:
        doc_id = doc_id or uuid.uuid4().hex
        conn.execute(
            "INSERT INTO documents (collection, id, owner, data) VALUES (?, ?, ?, ?)",
            (collection, doc_id, owner, _pack(data))
        )
        return doc_id

    def add(self, collection: str, owner: str, data: dict) -> str:
        return self.add_many(collection, owner, [data])[0]

    def add_many(self, collection: str, owner: str, items: list[dict]) -> list[str]:
        """Insert all items in one transaction; on any failure none are kept."""
        conn = self._connect()
        try:
            ids = [self._insert(conn, collection, owner, data) for data in items]
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        self._notify(collection, owner)
        return ids

    def set(self, collection: str, doc_id: str, owner: str, data: dict) -> None:
        """Create or overwrite a document with a caller-chosen id."""
        conn = self._connect()
        try:
            conn.execute(
                """INSERT INTO documents (collection, id, owner, data) VALUES (?, ?, ?, ?)
                   ON CONFLICT(collection, id) DO UPDATE
                   SET data = excluded.data, updated_at = datetime('now')
                   WHERE documents.owner = excluded.owner""",
                (collection, doc_id, owner, _pack(data))
            )
            conn.commit()
        finally:
            conn.close()
        self._notify(collection, owner)

    def replace(self, collection: str, doc_id: str, owner: str, data: dict) -> bool:
        conn = self._connect()
        try:
            cursor = conn.execute(
                """UPDATE documents SET data = ?, updated_at = datetime('now')
                   WHERE collection = ? AND id = ? AND owner = ?""",
                (_pack(data), collection, doc_id, owner)
            )
            conn.commit()
            changed = cursor.rowcount > 0
        finally:
            conn.close()
        if changed:
            self._notify(collection, owner)
        return changed

    def toggle(self, collection: str, doc_id: str, owner: str, field: str) -> Optional[bool]:
        """Atomically flip a boolean field. Returns the new value, or None if absent."""
        conn = self._connect()
        conn.isolation_level = None
        try:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                "SELECT id, owner, data FROM documents WHERE collection = ? AND id = ? AND owner = ?",
                (collection, doc_id, owner)
            ).fetchone()
            if not row:
                conn.execute("ROLLBACK")
                return None
            data = json.loads(row["data"])
            data[field] = not bool(data.get(field, False))
            conn.execute(
                """UPDATE documents SET data = ?, updated_at = datetime('now')
                   WHERE collection = ? AND id = ? AND owner = ?""",
                (_pack(data), collection, doc_id, owner)
            )
            conn.execute("COMMIT")
        except Exception:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()
        self._notify(collection, owner)
        return data[field]

    def delete(self, collection: str, doc_id: str, owner: str) -> int:
        conn = self._connect()
        try:
            cursor = conn.execute(
                "DELETE FROM documents WHERE collection = ? AND id = ? AND owner = ?",
                (collection, doc_id, owner)
            )
            conn.commit()
            deleted = cursor.rowcount
        finally:
            conn.close()
        if deleted:
            self._notify(collection, owner)
        return deleted

    def delete_owned(self, collection: str, owner: str) -> int:
        conn = self._connect()
        try:
            cursor = conn.execute(
                "DELETE FROM documents WHERE collection = ? AND owner = ?",
                (collection, owner)
            )
            conn.commit()
            deleted = cursor.rowcount
        finally:
            conn.close()
        self._notify(collection, owner)
        return deleted

    # ─── Change notifications ────────────────────────────────

    def watch(self, collection: str, listener: Listener) -> Callable[[], None]:
        with self._listeners_lock:
            self._listeners.setdefault(collection, []).append(listener)

        def unsubscribe():
            with self._listeners_lock:
                listeners = self._listeners.get(collection, [])
                if listener in listeners:
                    listeners.remove(listener)

        return unsubscribe

    def _notify(self, collection: str, owner: str) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners.get(collection, []))
        if not listeners:
            return
        try:
            snapshot = self.query(collection, owner)
        except sqlite3.Error as e:
            # The write is already committed; listeners get None and re-read on their own.
            logger.warning(f"Snapshot query for '{collection}' failed after commit (owner={owner}): {e}")
            snapshot = None
        for listener in listeners:
            try:
                listener(owner, snapshot)
            except Exception:
                logger.exception(f"Listener for '{collection}' failed (owner={owner})")
