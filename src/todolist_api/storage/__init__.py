"""Storage backends and models."""

from todolist_api.storage.base import Storage
from todolist_api.storage.memory import InMemoryStorage
from todolist_api.storage.models import TaskItem, UserRecord
from todolist_api.storage.postgres import PostgresStorage

__all__ = [
    "InMemoryStorage",
    "PostgresStorage",
    "Storage",
    "TaskItem",
    "UserRecord",
]
