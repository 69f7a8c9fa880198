"""Error kinds and the result type returned by the service layer.

Services report expected failures as values instead of raising, so each caller
decides how to present them. The HTTP layer maps an ``ErrorKind`` to a status
code via ``ServiceError.status_code``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    AUTH = "auth"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.CONFLICT: 400,
    ErrorKind.AUTH: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INTERNAL: 500,
}


@dataclass(frozen=True)
class ServiceError:
    """A failure with a stable, client-safe message."""

    kind: ErrorKind
    message: str

    @property
    def status_code(self) -> int:
        return _STATUS_BY_KIND[self.kind]


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Either a value or a ``ServiceError``, never both."""

    value: T | None = None
    error: ServiceError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> Outcome[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> Outcome[T]:
        return cls(error=ServiceError(kind=kind, message=message))


class StorageError(Exception):
    """Raised by storage backends when the database cannot serve a request."""


class DuplicateKeyError(StorageError):
    """Raised when an insert violates a uniqueness constraint."""
