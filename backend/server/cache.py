"""Single-slot snapshot cache for one collection.

Holds the most recent fetch of a collection for exactly one owner.  Storing a
second owner's snapshot evicts the first; the app serves one signed-in owner
per session context, so this must not be used as a multi-tenant cache.
"""

import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class SnapshotCache:
    def __init__(self, name: str, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.name = name
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._owner_key: Optional[str] = None
        self._items: tuple = ()
        self._fetched_at: Optional[float] = None

    def get(self, owner_key: str) -> tuple[tuple, bool]:
        """Return (items, is_fresh). Items are empty unless cached for this owner."""
        if owner_key is None or owner_key != self._owner_key or self._fetched_at is None:
            return (), False
        fresh = (self._clock() - self._fetched_at) < self.ttl_seconds
        return self._items, fresh

    def set(self, owner_key: str, items) -> None:
        if self._owner_key is not None and owner_key != self._owner_key:
            logger.debug(f"{self.name} cache: evicting owner {self._owner_key}")
        # Replace wholesale; readers holding the old tuple keep a consistent view.
        self._items = tuple(items)
        self._owner_key = owner_key
        self._fetched_at = self._clock()

    def invalidate(self) -> None:
        self._owner_key = None
        self._items = ()
        self._fetched_at = None

    @property
    def owner_key(self) -> Optional[str]:
        return self._owner_key
