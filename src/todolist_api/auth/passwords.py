"""Salted password hashing with bcrypt."""

from __future__ import annotations

import logging

import bcrypt

logger = logging.getLogger(__name__)

# bcrypt only reads the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, *, rounds: int = 10) -> str:
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison of ``password`` against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("ascii"))
    except ValueError:
        logger.warning("password_check event=malformed_hash")
        return False
