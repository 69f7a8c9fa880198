"""Owner-scoped task operations."""

from __future__ import annotations

import logging

from todolist_api.errors import ErrorKind, Outcome, StorageError
from todolist_api.storage.base import Storage
from todolist_api.storage.models import TaskItem

logger = logging.getLogger(__name__)

TEXT_REQUIRED_MESSAGE = "Task text is required"
TASK_NOT_FOUND_MESSAGE = "Task not found"


class TaskGateway:
    """Every call takes the verified owner id; other owners' tasks are invisible."""

    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    def list_tasks(self, owner_id: str) -> Outcome[list[TaskItem]]:
        try:
            return Outcome.success(self.storage.list_tasks(owner_id))
        except StorageError:
            logger.exception("tasks event=list_failed owner_id=%s", owner_id)
            return Outcome.failure(ErrorKind.INTERNAL, "Failed to fetch tasks")

    def create_task(self, owner_id: str, text: str) -> Outcome[TaskItem]:
        if not text:
            return Outcome.failure(ErrorKind.VALIDATION, TEXT_REQUIRED_MESSAGE)
        try:
            task = self.storage.create_task(owner_id, text)
        except StorageError:
            logger.exception("tasks event=create_failed owner_id=%s", owner_id)
            return Outcome.failure(ErrorKind.INTERNAL, "Failed to add task")
        logger.info("tasks event=created owner_id=%s task_id=%s", owner_id, task.id)
        return Outcome.success(task)

    def delete_task(self, owner_id: str, task_id: str) -> Outcome[str]:
        # Missing and foreign tasks are reported the same way.
        try:
            deleted = self.storage.delete_task(owner_id, task_id)
        except StorageError:
            logger.exception(
                "tasks event=delete_failed owner_id=%s task_id=%s", owner_id, task_id
            )
            return Outcome.failure(ErrorKind.INTERNAL, "Failed to delete task")
        if not deleted:
            return Outcome.failure(ErrorKind.NOT_FOUND, TASK_NOT_FOUND_MESSAGE)
        logger.info("tasks event=deleted owner_id=%s task_id=%s", owner_id, task_id)
        return Outcome.success("Task deleted successfully")
