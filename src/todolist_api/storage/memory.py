"""In-memory storage backend for tests and local experiments."""

from __future__ import annotations

import threading
from datetime import UTC, datetime
from uuid import uuid4

from todolist_api.errors import DuplicateKeyError
from todolist_api.storage.models import TaskItem, UserRecord


class InMemoryStorage:
    """Dict-backed implementation with the same uniqueness rules as PostgreSQL."""

    def __init__(self) -> None:
        self._users: dict[str, UserRecord] = {}
        self._tasks: dict[str, TaskItem] = {}
        self._lock = threading.Lock()

    def migrate(self) -> None:
        return None

    def create_user(self, username: str, password_hash: str) -> UserRecord:
        with self._lock:
            if username in self._users:
                raise DuplicateKeyError(f"username {username!r} already exists")
            record = UserRecord(
                id=str(uuid4()),
                username=username,
                password_hash=password_hash,
                created_at=datetime.now(UTC),
            )
            self._users[username] = record
        return record

    def get_user_by_username(self, username: str) -> UserRecord | None:
        return self._users.get(username)

    def list_tasks(self, owner_id: str) -> list[TaskItem]:
        with self._lock:
            return [task for task in self._tasks.values() if task.owner_id == owner_id]

    def create_task(self, owner_id: str, text: str) -> TaskItem:
        task = TaskItem(
            id=str(uuid4()),
            text=text,
            completed=False,
            owner_id=owner_id,
            created_at=datetime.now(UTC),
        )
        with self._lock:
            self._tasks[task.id] = task
        return task

    def delete_task(self, owner_id: str, task_id: str) -> bool:
        with self._lock:
            current = self._tasks.get(task_id)
            if current is None or current.owner_id != owner_id:
                return False
            del self._tasks[task_id]
        return True
