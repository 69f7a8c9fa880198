"""Password hashing and session tokens."""

from todolist_api.auth.passwords import hash_password, verify_password
from todolist_api.auth.tokens import TokenSigner

__all__ = ["TokenSigner", "hash_password", "verify_password"]
