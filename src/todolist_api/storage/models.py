"""Storage models shared by API and persistence backends."""

from datetime import datetime

from pydantic import BaseModel


class UserRecord(BaseModel):
    """Persisted user account. Never serialized to API clients."""

    id: str
    username: str
    password_hash: str
    created_at: datetime


class TaskItem(BaseModel):
    """Persisted task owned by exactly one user."""

    id: str
    text: str
    completed: bool = False
    owner_id: str
    created_at: datetime
