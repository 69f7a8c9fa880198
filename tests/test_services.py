from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from todolist_api.auth.passwords import hash_password, verify_password
from todolist_api.auth.tokens import TokenSigner
from todolist_api.errors import ErrorKind
from todolist_api.services import identity as identity_module
from todolist_api.services.identity import IdentityManager
from todolist_api.services.tasks import TaskGateway
from todolist_api.storage.memory import InMemoryStorage

from .fakes import TEST_SECRET, BrokenStorage


@pytest.fixture
def signer() -> TokenSigner:
    return TokenSigner(TEST_SECRET, ttl_s=3600)


@pytest.fixture
def identity(storage: InMemoryStorage, signer: TokenSigner) -> IdentityManager:
    return IdentityManager(storage, signer, bcrypt_rounds=4)


@pytest.mark.parametrize(
    ("username", "password"),
    [("alice", "pw1"), ("bob", "correct horse battery staple"), ("zoë", "pässwörd")],
)
def test_register_then_login_yields_token_for_that_user(
    identity: IdentityManager,
    storage: InMemoryStorage,
    signer: TokenSigner,
    username: str,
    password: str,
) -> None:
    assert identity.register(username, password).ok

    login = identity.login(username, password)
    assert login.ok
    user = storage.get_user_by_username(username)
    assert user is not None
    assert signer.verify(login.value).value == user.id


def test_register_validates_and_detects_conflicts(identity: IdentityManager) -> None:
    assert identity.register("", "pw").error.kind is ErrorKind.VALIDATION
    assert identity.register("alice", "").error.kind is ErrorKind.VALIDATION

    assert identity.register("alice", "pw1").value == "User registered successfully"
    duplicate = identity.register("alice", "pw2")
    assert duplicate.error.kind is ErrorKind.CONFLICT
    assert duplicate.error.status_code == 400


def test_login_failures_are_indistinguishable(identity: IdentityManager) -> None:
    identity.register("alice", "pw1")

    wrong_password = identity.login("alice", "pw2")
    unknown_user = identity.login("mallory", "pw1")

    assert wrong_password.error == unknown_user.error
    assert wrong_password.error.kind is ErrorKind.AUTH
    assert wrong_password.error.status_code == 401


def test_unknown_username_still_runs_a_bcrypt_check(
    identity: IdentityManager, monkeypatch: pytest.MonkeyPatch
) -> None:
    checked: list[str] = []

    def recording_verify(password: str, password_hash: str) -> bool:
        checked.append(password_hash)
        return verify_password(password, password_hash)

    monkeypatch.setattr(identity_module, "verify_password", recording_verify)

    outcome = identity.login("mallory", "pw1")

    assert outcome.error.kind is ErrorKind.AUTH
    assert len(checked) == 1
    assert checked[0].startswith("$2b$04$")


def test_storage_failures_become_internal_errors() -> None:
    broken = BrokenStorage()
    identity = IdentityManager(broken, TokenSigner(TEST_SECRET), bcrypt_rounds=4)
    tasks = TaskGateway(broken)

    assert identity.register("alice", "pw1").error.message == "Failed to register user"
    assert identity.login("alice", "pw1").error.message == "Failed to log in"
    assert tasks.list_tasks("owner").error.message == "Failed to fetch tasks"
    assert tasks.create_task("owner", "x").error.message == "Failed to add task"
    assert tasks.delete_task("owner", "task").error.message == "Failed to delete task"
    for outcome in (identity.login("alice", "pw1"), tasks.list_tasks("owner")):
        assert outcome.error.kind is ErrorKind.INTERNAL
        assert outcome.error.status_code == 500


def test_task_gateway_scopes_every_operation_to_owner(storage: InMemoryStorage) -> None:
    tasks = TaskGateway(storage)

    mine = tasks.create_task("owner-a", "buy milk").value
    theirs = tasks.create_task("owner-b", "walk dog").value

    assert mine.completed is False
    assert [task.id for task in tasks.list_tasks("owner-a").value] == [mine.id]
    assert tasks.list_tasks("owner-c").value == []

    not_mine = tasks.delete_task("owner-a", theirs.id)
    assert not_mine.error.kind is ErrorKind.NOT_FOUND
    assert tasks.delete_task("owner-a", mine.id).value == "Task deleted successfully"
    assert tasks.delete_task("owner-a", mine.id).error.kind is ErrorKind.NOT_FOUND
    assert [task.id for task in tasks.list_tasks("owner-b").value] == [theirs.id]


def test_task_gateway_rejects_empty_text(storage: InMemoryStorage) -> None:
    outcome = TaskGateway(storage).create_task("owner-a", "")

    assert outcome.error.kind is ErrorKind.VALIDATION
    assert outcome.error.message == "Task text is required"
    assert storage.list_tasks("owner-a") == []


def test_token_expires_after_ttl(signer: TokenSigner) -> None:
    fresh = signer.issue("user-1", now=datetime.now(tz=UTC) - timedelta(minutes=59))
    stale = signer.issue("user-1", now=datetime.now(tz=UTC) - timedelta(minutes=61))

    assert signer.verify(fresh).value == "user-1"
    assert signer.verify(stale).error.message == "Invalid token"


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_malformed_tokens_are_rejected(signer: TokenSigner, token: str) -> None:
    outcome = signer.verify(token)

    assert outcome.error.kind is ErrorKind.AUTH
    assert outcome.error.message == "Invalid token"


def test_token_without_owner_claim_is_rejected(signer: TokenSigner) -> None:
    token = jwt.encode(
        {"exp": datetime.now(tz=UTC) + timedelta(hours=1)}, TEST_SECRET, algorithm="HS256"
    )

    assert signer.verify(token).error.kind is ErrorKind.AUTH


def test_signer_requires_secret() -> None:
    with pytest.raises(ValueError, match="secret"):
        TokenSigner("")


def test_password_hash_is_salted_and_verifiable() -> None:
    first = hash_password("pw1", rounds=4)
    second = hash_password("pw1", rounds=4)

    assert first != second
    assert verify_password("pw1", first)
    assert verify_password("pw1", second)
    assert not verify_password("pw2", first)


def test_password_longer_than_bcrypt_limit_is_truncated() -> None:
    long_password = "x" * 100

    password_hash = hash_password(long_password, rounds=4)

    assert verify_password(long_password, password_hash)
    assert verify_password("x" * 72, password_hash)


def test_malformed_stored_hash_never_matches() -> None:
    assert not verify_password("pw1", "not-a-bcrypt-hash")
