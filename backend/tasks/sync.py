"""Task synchronizer — the signed-in owner's task list."""

import logging
from typing import Optional

from server.errors import NotFoundError
from server.store import TASKS
from server.sync import CollectionSynchronizer, fingerprint, validate_draft
from tasks.schemas import Task, TaskDraft

logger = logging.getLogger(__name__)


class TaskSynchronizer(CollectionSynchronizer):
    """Tasks ordered by ``scheduled_at``.

    Every mutation completes only after the visible list has caught up with
    it, so a ``list`` right after a write always sees that write.
    """

    collection = TASKS
    model = Task

    def sort_key(self, task: Task):
        return (task.scheduled_at, task.id)

    async def get(self, owner_key: Optional[str], task_id: str) -> Task:
        owner_key = self.require_owner(owner_key)
        doc = await self.call(self.store.get, TASKS, task_id, owner_key)
        if not doc:
            raise NotFoundError(f"Task {task_id} not found")
        return Task.model_validate(doc)

    async def create(self, owner_key: Optional[str], draft) -> str:
        owner_key = self.require_owner(owner_key)
        draft = validate_draft(TaskDraft, draft)
        data = {**draft.model_dump(mode="json", include=set(TaskDraft.model_fields)), "completed": False}
        task_id = await self.write(
            owner_key, ("create", fingerprint(data)), self.store.add, TASKS, owner_key, data
        )
        logger.info(f"Task {task_id} created for owner {owner_key}")
        return task_id

    async def update(self, owner_key: Optional[str], task) -> None:
        """Replace every field of an existing task. The owner never changes."""
        owner_key = self.require_owner(owner_key)
        if isinstance(task, dict):
            task = {**task, "owner": owner_key}
        task = validate_draft(Task, task)
        data = task.model_dump(mode="json", exclude={"id", "owner"})
        replaced = await self.write(
            owner_key, ("update", task.id), self.store.replace, TASKS, task.id, owner_key, data
        )
        if not replaced:
            raise NotFoundError(f"Task {task.id} not found")
        logger.info(f"Task {task.id} updated")

    async def delete(self, owner_key: Optional[str], task_id: str) -> None:
        owner_key = self.require_owner(owner_key)
        deleted = await self.write(
            owner_key, ("delete", task_id), self.store.delete, TASKS, task_id, owner_key
        )
        if deleted:
            logger.info(f"Task {task_id} deleted")

    async def toggle_completion(self, owner_key: Optional[str], task_id: str) -> bool:
        """Flip ``completed`` using the store's atomic read-modify-write.

        The new value is computed from the stored record, not from the
        possibly stale visible list, so concurrent toggles never get lost.
        """
        owner_key = self.require_owner(owner_key)
        completed = await self.write(
            owner_key, ("toggle", task_id), self.store.toggle, TASKS, task_id, owner_key, "completed"
        )
        if completed is None:
            raise NotFoundError(f"Task {task_id} not found")
        return completed
