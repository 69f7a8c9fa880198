"""Storage interface for users and their tasks.

Backends raise ``DuplicateKeyError`` when a username is already taken and
``StorageError`` for any other database failure.
"""

from __future__ import annotations

from typing import Protocol

from todolist_api.storage.models import TaskItem, UserRecord


class Storage(Protocol):
    def migrate(self) -> None: ...

    def create_user(self, username: str, password_hash: str) -> UserRecord: ...

    def get_user_by_username(self, username: str) -> UserRecord | None: ...

    def list_tasks(self, owner_id: str) -> list[TaskItem]: ...

    def create_task(self, owner_id: str, text: str) -> TaskItem: ...

    def delete_task(self, owner_id: str, task_id: str) -> bool: ...
