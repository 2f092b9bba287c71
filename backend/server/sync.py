"""Collection synchronizer base + refresh strategies.

A synchronizer owns one collection view for the signed-in owner: it reads
through the snapshot cache, performs writes against the document store and
makes sure the visible list reflects every write before the write returns.

How the visible list catches up after a write is delegated to a
RefreshStrategy:
  - PollingRefresh re-fetches the whole collection after each write.
  - LiveRefresh applies the snapshot the store pushes after each commit.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import sqlite3
from typing import Optional

from pydantic import BaseModel, ValidationError

from server.cache import SnapshotCache
from server.errors import (
    BusyError, DraftValidationError, NotConfiguredError, TransientIOError,
)
from server.store import DocumentStore

logger = logging.getLogger(__name__)


def validate_draft(model: type[BaseModel], value):
    """Coerce a dict (or model) into ``model``; failures become DraftValidationError."""
    if isinstance(value, model):
        return value
    if isinstance(value, BaseModel):
        value = value.model_dump()
    try:
        return model.model_validate(value)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'draft'}: {err['msg']}"
            for err in exc.errors()
        )
        raise DraftValidationError(problems) from exc


def fingerprint(data) -> str:
    return json.dumps(data, sort_keys=True, default=str)


class RefreshStrategy:
    name = ""

    def attach(self, sync: "CollectionSynchronizer") -> None:
        pass

    def detach(self) -> None:
        pass

    async def after_write(self, sync: "CollectionSynchronizer", owner_key: str) -> None:
        raise NotImplementedError


class PollingRefresh(RefreshStrategy):
    name = "polling"

    async def after_write(self, sync, owner_key):
        await sync.refresh(owner_key)


class LiveRefresh(RefreshStrategy):
    """Apply snapshots pushed by the store.

    The store calls listeners from the worker thread that performed the write,
    before that thread hands its result back to the event loop.  The snapshot
    is therefore queued on the loop ahead of the writer's wake-up, and the
    visible list is current by the time the write returns.
    """

    name = "live"

    def __init__(self):
        self._unsubscribe = None

    def attach(self, sync):
        def on_push(owner_key, docs):
            loop = sync.loop
            if loop is None or loop.is_closed():
                return
            loop.call_soon_threadsafe(sync.apply_snapshot, owner_key, docs)

        self._unsubscribe = sync.store.watch(sync.collection, on_push)

    def detach(self):
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    async def after_write(self, sync, owner_key):
        # Pushes are only rendered for the owner on screen; a missed push leaves the slot stale.
        if sync.owner_key != owner_key or not sync.cache.get(owner_key)[1]:
            await sync.refresh(owner_key)


def make_strategy(name: str) -> RefreshStrategy:
    strategies = {"polling": PollingRefresh, "live": LiveRefresh}
    if name not in strategies:
        raise NotConfiguredError(f"Unknown sync strategy '{name}' (expected polling or live)")
    return strategies[name]()


class CollectionSynchronizer:
    collection: str = ""
    model: type[BaseModel] = BaseModel

    def __init__(
        self,
        store: DocumentStore,
        cache: SnapshotCache,
        timeout_seconds: float = 10.0,
        strategy: Optional[RefreshStrategy] = None,
    ):
        self.store = store
        self.cache = cache
        self.timeout_seconds = timeout_seconds
        self.owner_key: Optional[str] = None
        self.items: tuple = ()
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self._in_flight: set = set()
        self.strategy = strategy or PollingRefresh()
        self.strategy.attach(self)

    def close(self) -> None:
        self.strategy.detach()

    # ─── Hooks for subclasses ────────────────────────────────

    def sort_key(self, item):
        return item.id

    def materialize(self, docs: list[dict]) -> tuple:
        items = []
        for doc in docs:
            try:
                items.append(self.model.model_validate(doc))
            except ValidationError as exc:
                logger.warning(f"Skipping malformed {self.collection} document {doc.get('id')}: {exc}")
        return tuple(sorted(items, key=self.sort_key))

    # ─── Store access ────────────────────────────────────────

    async def call(self, fn, *args):
        """Run a blocking store call off the loop, bounded by the client-side timeout."""
        self.loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(asyncio.to_thread(fn, *args), self.timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise TransientIOError(
                f"Timed out talking to the {self.collection} store. Please try again."
            ) from exc
        except sqlite3.Error as exc:
            logger.error(f"{self.collection} store call {fn.__name__} failed: {exc}")
            raise TransientIOError(
                f"Could not reach the {self.collection} store. Please try again."
            ) from exc

    @contextlib.asynccontextmanager
    async def in_flight(self, *key):
        if key in self._in_flight:
            raise BusyError()
        self._in_flight.add(key)
        try:
            yield
        finally:
            self._in_flight.discard(key)

    async def write(self, owner_key: str, action: tuple, fn, *args):
        """Run one mutating store call, then wait until the visible list reflects it."""
        async with self.in_flight(owner_key, *action):
            try:
                result = await self.call(fn, *args)
                await self.strategy.after_write(self, owner_key)
            except TransientIOError:
                # The write may still commit in its worker thread; the next read must hit the store.
                self.cache.invalidate()
                if self.owner_key == owner_key:
                    self.show(owner_key, ())
                raise
        return result

    @staticmethod
    def require_owner(owner_key: Optional[str]) -> str:
        if not owner_key:
            raise NotConfiguredError("Not signed in")
        return owner_key

    # ─── Reads ───────────────────────────────────────────────

    async def list(self, owner_key: Optional[str], force: bool = False) -> tuple:
        if not owner_key:
            return ()
        if not force:
            cached, fresh = self.cache.get(owner_key)
            if fresh:
                logger.debug(f"{self.collection}: cache hit owner={owner_key}")
                self.show(owner_key, cached)
                return cached
        return await self.refresh(owner_key)

    async def refresh(self, owner_key: str) -> tuple:
        logger.debug(f"{self.collection}: fetching owner={owner_key}")
        try:
            docs = await self.call(self.store.query, self.collection, owner_key)
        except TransientIOError:
            # Never leave stale data on screen after a failed read.
            self.cache.invalidate()
            self.show(owner_key, ())
            raise
        items = self.materialize(docs)
        self.cache.set(owner_key, items)
        self.show(owner_key, items)
        return items

    def show(self, owner_key: Optional[str], items) -> None:
        self.owner_key = owner_key
        self.items = tuple(items)

    def apply_snapshot(self, owner_key: str, docs: Optional[list[dict]]) -> None:
        if owner_key != self.owner_key:
            return
        if docs is None:
            self.cache.invalidate()
            return
        items = self.materialize(docs)
        self.cache.set(owner_key, items)
        self.show(owner_key, items)
        logger.debug(f"{self.collection}: applied pushed snapshot ({len(items)} items)")

    # ─── Identity changes ────────────────────────────────────

    async def on_auth_change(self, owner_key: Optional[str]) -> None:
        if owner_key:
            await self.list(owner_key, force=True)
        else:
            self.cache.invalidate()
            self.show(None, ())
