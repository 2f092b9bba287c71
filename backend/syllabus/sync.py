"""Syllabus synchronizer — one topic list per owner, replaced wholesale on save."""

import logging
from typing import Optional

from server.store import SYLLABUSES
from server.sync import CollectionSynchronizer, validate_draft
from syllabus.schemas import SyllabusTopics, SyllabusUpdate

logger = logging.getLogger(__name__)


class SyllabusSynchronizer(CollectionSynchronizer):
    collection = SYLLABUSES
    model = SyllabusTopics

    async def get(self, owner_key: Optional[str], force: bool = False) -> Optional[SyllabusTopics]:
        items = await self.list(owner_key, force=force)
        return items[0] if items else None

    async def set_topics(self, owner_key: Optional[str], topics) -> SyllabusTopics:
        owner_key = self.require_owner(owner_key)
        update = validate_draft(SyllabusUpdate, {"topics": list(topics)})
        # The owner key doubles as the document id: one syllabus per owner.
        await self.write(
            owner_key, ("set",), self.store.set, SYLLABUSES, owner_key, owner_key,
            {"topics": update.topics},
        )
        logger.info(f"Saved {len(update.topics)} syllabus topic(s) for owner {owner_key}")
        return SyllabusTopics(id=owner_key, owner=owner_key, topics=update.topics)
