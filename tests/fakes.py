# tests/fakes.py

from __future__ import annotations

import sqlite3
import threading
from types import SimpleNamespace

from server.store import DocumentStore


class FakeClock:
    """Manually advanced monotonic clock for cache freshness tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingStore(DocumentStore):
    """Real SQLite store that counts collection reads."""

    def __init__(self, db_path: str) -> None:
        super().__init__(db_path)
        self.query_calls: list[tuple[str, str]] = []

    def query(self, collection, owner):
        self.query_calls.append((collection, owner))
        return super().query(collection, owner)


class FlakyStore(DocumentStore):
    """
    Store with switchable failures.

    - fail_reads: every query raises sqlite3.OperationalError
    - fail_next_reads: that many upcoming queries raise, then reads recover
    - fail_after_inserts: that many inserts succeed, then every insert raises
    - block_writes: writes wait on an Event (for in-flight / timeout tests)
    """

    def __init__(self, db_path: str) -> None:
        super().__init__(db_path)
        self.fail_reads = False
        self.fail_next_reads = 0
        self.fail_after_inserts: int | None = None
        self.block_writes: threading.Event | None = None

    def query(self, collection, owner):
        if self.fail_reads:
            raise sqlite3.OperationalError("disk I/O error")
        if self.fail_next_reads > 0:
            self.fail_next_reads -= 1
            raise sqlite3.OperationalError("disk I/O error")
        return super().query(collection, owner)

    def _insert(self, conn, collection, owner, data, doc_id=None):
        if self.fail_after_inserts is not None:
            if self.fail_after_inserts <= 0:
                raise sqlite3.OperationalError("injected failure")
            self.fail_after_inserts -= 1
        return super()._insert(conn, collection, owner, data, doc_id)

    def delete(self, collection, doc_id, owner):
        if self.block_writes is not None:
            self.block_writes.wait(5)
        return super().delete(collection, doc_id, owner)


class FakeMessages:
    def __init__(self, replies) -> None:
        self.replies = list(replies)
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=reply)])


class FakeAnthropic:
    """Deterministic stand-in for anthropic.AsyncAnthropic: returns queued replies in order."""

    def __init__(self, *replies) -> None:
        self.messages = FakeMessages(replies)
