"""Runtime objects shared by the request handlers of one application."""

from __future__ import annotations

from dataclasses import dataclass

from todolist_api.auth.tokens import TokenSigner
from todolist_api.config.settings import Settings
from todolist_api.services.identity import IdentityManager
from todolist_api.services.tasks import TaskGateway
from todolist_api.storage.base import Storage


@dataclass(frozen=True)
class AppContext:
    settings: Settings
    storage: Storage
    signer: TokenSigner
    identity: IdentityManager
    tasks: TaskGateway


def build_context(settings: Settings, storage: Storage) -> AppContext:
    """Wire the services around one store and one signing secret."""
    secret_key = settings.secret_key
    if not secret_key:
        raise RuntimeError(
            "Missing signing secret. Set TODOLIST_SECRET_KEY or SECRET_KEY "
            "before starting the app."
        )
    signer = TokenSigner(secret_key, ttl_s=settings.token_ttl_s)
    return AppContext(
        settings=settings,
        storage=storage,
        signer=signer,
        identity=IdentityManager(storage, signer, bcrypt_rounds=settings.bcrypt_rounds),
        tasks=TaskGateway(storage),
    )
