"""User registration and login.

Registration relies on the store's unique constraint to reject duplicate
usernames; there is no lookup before the insert. Login reports an unknown
username and a wrong password with the same message.
"""

from __future__ import annotations

import logging

from todolist_api.auth.passwords import hash_password, verify_password
from todolist_api.auth.tokens import TokenSigner
from todolist_api.errors import DuplicateKeyError, ErrorKind, Outcome, StorageError
from todolist_api.storage.base import Storage

logger = logging.getLogger(__name__)

CREDENTIALS_REQUIRED_MESSAGE = "Username and password are required"
INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"


class IdentityManager:
    def __init__(self, storage: Storage, signer: TokenSigner, *, bcrypt_rounds: int = 10) -> None:
        self.storage = storage
        self.signer = signer
        self.bcrypt_rounds = bcrypt_rounds
        # Compared against when the username is unknown so both rejections cost one bcrypt check.
        self._dummy_hash = hash_password("unknown-user", rounds=bcrypt_rounds)

    def register(self, username: str, password: str) -> Outcome[str]:
        if not username or not password:
            return Outcome.failure(ErrorKind.VALIDATION, CREDENTIALS_REQUIRED_MESSAGE)

        logger.debug("register event=hash_password username=%s", username)
        password_hash = hash_password(password, rounds=self.bcrypt_rounds)

        logger.debug("register event=save_user username=%s", username)
        try:
            self.storage.create_user(username, password_hash)
        except DuplicateKeyError:
            logger.info("register event=conflict username=%s", username)
            return Outcome.failure(ErrorKind.CONFLICT, "Username already exists")
        except StorageError:
            logger.exception("register event=storage_error username=%s", username)
            return Outcome.failure(ErrorKind.INTERNAL, "Failed to register user")

        logger.info("register event=created username=%s", username)
        return Outcome.success("User registered successfully")

    def login(self, username: str, password: str) -> Outcome[str]:
        if not username or not password:
            return Outcome.failure(ErrorKind.VALIDATION, CREDENTIALS_REQUIRED_MESSAGE)

        try:
            user = self.storage.get_user_by_username(username)
        except StorageError:
            logger.exception("login event=storage_error username=%s", username)
            return Outcome.failure(ErrorKind.INTERNAL, "Failed to log in")

        stored_hash = user.password_hash if user is not None else self._dummy_hash
        password_ok = verify_password(password, stored_hash)
        if user is None or not password_ok:
            logger.info("login event=rejected username=%s", username)
            return Outcome.failure(ErrorKind.AUTH, INVALID_CREDENTIALS_MESSAGE)

        return Outcome.success(self.signer.issue(user.id))
