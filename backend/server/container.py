"""Composition root — builds the store, caches and synchronizers for one app."""

import logging
import time
from fastapi import Request

from auth.events import IdentityEvents
from exams.sync import TestSynchronizer
from server import config
from server.cache import SnapshotCache
from server.errors import NotConfiguredError
from server.store import DocumentStore
from server.sync import make_strategy
from syllabus.sync import SyllabusSynchronizer
from tasks.sync import TaskSynchronizer

logger = logging.getLogger(__name__)


class Planner:
    def __init__(
        self,
        store: DocumentStore,
        cache_ttl_seconds: float = config.CACHE_TTL_SECONDS,
        store_timeout_seconds: float = config.STORE_TIMEOUT_SECONDS,
        strategy: str = config.SYNC_STRATEGY,
        clock=time.monotonic,
    ):
        self.store = store
        self.identity = IdentityEvents()

        def build(cls, name):
            return cls(
                store,
                SnapshotCache(name, cache_ttl_seconds, clock=clock),
                timeout_seconds=store_timeout_seconds,
                strategy=make_strategy(strategy),
            )

        self.tasks = build(TaskSynchronizer, "tasks")
        self.tests = build(TestSynchronizer, "tests")
        self.syllabus = build(SyllabusSynchronizer, "syllabus")
        for sync in (self.tasks, self.tests, self.syllabus):
            self.identity.subscribe(sync.on_auth_change)
        logger.info(f"Planner ready (strategy={strategy}, cache_ttl={cache_ttl_seconds}s)")

    @property
    def db_path(self) -> str:
        return self.store.db_path

    def close(self) -> None:
        for sync in (self.tasks, self.tests, self.syllabus):
            sync.close()


def build_planner(db_path: str = None, **kwargs) -> Planner:
    return Planner(DocumentStore(db_path or config.DB_PATH), **kwargs)


def get_planner(request: Request) -> Planner:
    """FastAPI dependency: the planner created at startup."""
    planner = getattr(request.app.state, "planner", None)
    if planner is None:
        raise NotConfiguredError("Planner store is not initialised")
    return planner
