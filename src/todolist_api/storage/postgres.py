"""PostgreSQL-backed storage with automatic table creation.

Each operation opens its own connection, so concurrent requests never share a
connection and write conflicts are settled by the database constraints.
If the schema cannot be created at startup, the next operation tries again.
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

from todolist_api.errors import DuplicateKeyError, StorageError
from todolist_api.storage.models import TaskItem, UserRecord


class PostgresStorage:
    """Persist users and tasks in PostgreSQL."""

    def __init__(self, database_url: str, *, connect_timeout_s: int = 5) -> None:
        if not database_url:
            raise ValueError("TODOLIST_DATABASE_URL is required")
        self.database_url = database_url
        self.connect_timeout_s = connect_timeout_s
        self._schema_lock = threading.Lock()
        self._schema_ready = False
        self._psycopg, self._dict_row = self._load_psycopg()

    def migrate(self) -> None:
        # Concurrent CREATE TABLE IF NOT EXISTS can collide on pg_type; that is not a user conflict.
        with self._schema_lock, self._session(translate_duplicates=False) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    user_id UUID PRIMARY KEY,
                    username TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    created_at TIMESTAMPTZ NOT NULL
                )
                """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tasks (
                    task_id UUID PRIMARY KEY,
                    text TEXT NOT NULL,
                    completed BOOLEAN NOT NULL DEFAULT FALSE,
                    owner_id UUID NOT NULL REFERENCES users(user_id) ON DELETE CASCADE,
                    created_at TIMESTAMPTZ NOT NULL
                )
                """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_tasks_owner_id
                ON tasks(owner_id, created_at)
                """)
            conn.commit()
            self._schema_ready = True

    def create_user(self, username: str, password_hash: str) -> UserRecord:
        self._ensure_schema()
        with self._session() as conn:
            row = conn.execute(
                """
                INSERT INTO users (user_id, username, password_hash, created_at)
                VALUES (%s, %s, %s, %s)
                RETURNING *
                """,
                (uuid.uuid4(), username, password_hash, datetime.now(tz=UTC)),
            ).fetchone()
            conn.commit()
        if row is None:
            raise StorageError("Failed to load created user")
        return self._row_to_user(row)

    def get_user_by_username(self, username: str) -> UserRecord | None:
        self._ensure_schema()
        with self._session() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE username = %s",
                (username,),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def list_tasks(self, owner_id: str) -> list[TaskItem]:
        self._ensure_schema()
        with self._session() as conn:
            rows = conn.execute(
                """
                SELECT *
                FROM tasks
                WHERE owner_id::text = %s
                ORDER BY created_at, task_id
                """,
                (owner_id,),
            ).fetchall()
        return [self._row_to_task(row) for row in rows]

    def create_task(self, owner_id: str, text: str) -> TaskItem:
        self._ensure_schema()
        with self._session() as conn:
            row = conn.execute(
                """
                INSERT INTO tasks (task_id, text, completed, owner_id, created_at)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING *
                """,
                (uuid.uuid4(), text, False, owner_id, datetime.now(tz=UTC)),
            ).fetchone()
            conn.commit()
        if row is None:
            raise StorageError("Failed to load created task")
        return self._row_to_task(row)

    def delete_task(self, owner_id: str, task_id: str) -> bool:
        self._ensure_schema()
        # Text comparison keeps malformed ids a plain miss instead of a cast error.
        with self._session() as conn:
            row = conn.execute(
                """
                DELETE FROM tasks
                WHERE task_id::text = %s AND owner_id::text = %s
                RETURNING task_id
                """,
                (task_id, owner_id),
            ).fetchone()
            conn.commit()
        return row is not None

    def _ensure_schema(self) -> None:
        if not self._schema_ready:
            self.migrate()

    @contextmanager
    def _session(self, *, translate_duplicates: bool = True) -> Iterator[Any]:
        psycopg = self._psycopg
        try:
            with psycopg.connect(
                self.database_url,
                row_factory=self._dict_row,
                connect_timeout=self.connect_timeout_s,
            ) as conn:
                yield conn
        except psycopg.errors.UniqueViolation as exc:
            if not translate_duplicates:
                raise StorageError(str(exc)) from exc
            raise DuplicateKeyError(str(exc)) from exc
        except psycopg.Error as exc:
            raise StorageError(str(exc)) from exc

    @staticmethod
    def _load_psycopg() -> tuple[Any, Any]:
        try:
            import psycopg
            from psycopg.rows import dict_row
        except ImportError as exc:  # pragma: no cover
            raise RuntimeError(
                "PostgreSQL storage requires psycopg. "
                'Install with: python -m pip install "psycopg[binary]>=3.2,<4.0"'
            ) from exc
        return psycopg, dict_row

    @staticmethod
    def _parse_datetime(raw: Any) -> datetime:
        if isinstance(raw, datetime):
            return raw
        if isinstance(raw, str):
            return datetime.fromisoformat(raw)
        raise TypeError(f"Unsupported datetime value: {type(raw)!r}")

    @classmethod
    def _row_to_user(cls, row: Any) -> UserRecord:
        return UserRecord(
            id=str(row["user_id"]),
            username=row["username"],
            password_hash=row["password_hash"],
            created_at=cls._parse_datetime(row["created_at"]),
        )

    @classmethod
    def _row_to_task(cls, row: Any) -> TaskItem:
        return TaskItem(
            id=str(row["task_id"]),
            text=row["text"],
            completed=bool(row["completed"]),
            owner_id=str(row["owner_id"]),
            created_at=cls._parse_datetime(row["created_at"]),
        )
