"""Test synchronizer — the signed-in owner's tests, plus bulk import/clear."""

import logging
from datetime import date, datetime
from typing import Optional, Union

from planner.views import find_upcoming
from server.errors import NotFoundError
from server.store import TESTS
from server.sync import CollectionSynchronizer, fingerprint, validate_draft
from exams.schemas import Test, TestDraft

logger = logging.getLogger(__name__)


class TestSynchronizer(CollectionSynchronizer):
    __test__ = False  # not a pytest test class

    collection = TESTS
    model = Test

    find_upcoming = staticmethod(find_upcoming)

    def sort_key(self, test: Test):
        return (test.start_date, test.end_date, test.id)

    async def get(self, owner_key: Optional[str], test_id: str) -> Test:
        owner_key = self.require_owner(owner_key)
        doc = await self.call(self.store.get, TESTS, test_id, owner_key)
        if not doc:
            raise NotFoundError(f"Test {test_id} not found")
        return Test.model_validate(doc)

    async def create(self, owner_key: Optional[str], draft) -> str:
        ids = await self.import_batch(owner_key, [draft])
        return ids[0]

    async def import_batch(self, owner_key: Optional[str], drafts) -> list[str]:
        """Create all drafts in one batched write: either every test appears or none does."""
        owner_key = self.require_owner(owner_key)
        drafts = [validate_draft(TestDraft, d) for d in drafts]
        if not drafts:
            return []
        data = [d.model_dump(mode="json", include=set(TestDraft.model_fields)) for d in drafts]
        ids = await self.write(
            owner_key, ("import", fingerprint(data)), self.store.add_many, TESTS, owner_key, data
        )
        logger.info(f"Imported {len(ids)} test(s) for owner {owner_key}")
        return ids

    async def delete(self, owner_key: Optional[str], test_id: str) -> None:
        owner_key = self.require_owner(owner_key)
        await self.write(owner_key, ("delete", test_id), self.store.delete, TESTS, test_id, owner_key)

    async def clear_all(self, owner_key: Optional[str]) -> int:
        """Delete every test the owner has. Irreversible; callers confirm first."""
        owner_key = self.require_owner(owner_key)
        deleted = await self.write(owner_key, ("clear",), self.store.delete_owned, TESTS, owner_key)
        logger.info(f"Cleared {deleted} test(s) for owner {owner_key}")
        return deleted

    async def upcoming(self, owner_key: Optional[str], now: Union[date, datetime]) -> Optional[Test]:
        return find_upcoming(await self.list(owner_key), now)
