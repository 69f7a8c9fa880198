"""Request dependencies: runtime context lookup and the token gate."""

from __future__ import annotations

from typing import TypeVar

from fastapi import Header, Request

from todolist_api.context import AppContext
from todolist_api.errors import ErrorKind, Outcome, ServiceError

T = TypeVar("T")

NO_TOKEN_MESSAGE = "Access denied. No token provided."
BEARER_PREFIX = "Bearer "


class ApiError(Exception):
    """Carries a ``ServiceError`` out of a handler to the JSON error renderer."""

    def __init__(self, error: ServiceError) -> None:
        super().__init__(error.message)
        self.error = error


def unwrap(outcome: Outcome[T]) -> T:
    if outcome.error is not None:
        raise ApiError(outcome.error)
    return outcome.value  # type: ignore[return-value]


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_owner_id(
    request: Request,
    authorization: str | None = Header(default=None),
) -> str:
    """Verify the Authorization header and return the authenticated owner id.

    The header value is used as the token as-is. Only when
    ``strip_bearer_prefix`` is enabled is a leading ``"Bearer "`` removed.
    No database access happens here.
    """
    if not authorization:
        raise ApiError(ServiceError(kind=ErrorKind.AUTH, message=NO_TOKEN_MESSAGE))

    context = get_context(request)
    token = authorization
    if context.settings.strip_bearer_prefix and token.startswith(BEARER_PREFIX):
        token = token[len(BEARER_PREFIX) :]
    return unwrap(context.signer.verify(token))
