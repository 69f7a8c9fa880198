"""Signed, time-limited session tokens (HS256 JWT).

Tokens carry the owner id and an expiry and are never stored; a token is valid
exactly when its signature checks out and it has not expired.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt

from todolist_api.errors import ErrorKind, Outcome

INVALID_TOKEN_MESSAGE = "Invalid token"
_OWNER_CLAIM = "user_id"


class TokenSigner:
    def __init__(self, secret: str, *, ttl_s: int = 3600, algorithm: str = "HS256") -> None:
        if not secret:
            raise ValueError("A signing secret is required")
        self._secret = secret
        self.ttl_s = ttl_s
        self.algorithm = algorithm

    def issue(self, owner_id: str, *, now: datetime | None = None) -> str:
        issued_at = now or datetime.now(tz=UTC)
        claims = {
            _OWNER_CLAIM: owner_id,
            "iat": issued_at,
            "exp": issued_at + timedelta(seconds=self.ttl_s),
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Outcome[str]:
        """Return the embedded owner id, or an auth failure."""
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", _OWNER_CLAIM]},
            )
        except jwt.InvalidTokenError:
            return Outcome.failure(ErrorKind.AUTH, INVALID_TOKEN_MESSAGE)

        owner_id = claims.get(_OWNER_CLAIM)
        if not isinstance(owner_id, str) or not owner_id:
            return Outcome.failure(ErrorKind.AUTH, INVALID_TOKEN_MESSAGE)
        return Outcome.success(owner_id)
