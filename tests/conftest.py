from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient

from todolist_api.api.main import create_app
from todolist_api.config.settings import Settings
from todolist_api.storage.memory import InMemoryStorage

from .fakes import make_settings


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def client(storage: InMemoryStorage, settings: Settings) -> Iterator[TestClient]:
    app = create_app(storage=storage, settings_override=settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def login_as(client: TestClient) -> Callable[[str, str], dict[str, str]]:
    """Register (if needed) and log in, returning request headers with the token."""

    def _login(username: str, password: str) -> dict[str, str]:
        client.post("/register", json={"username": username, "password": password})
        response = client.post("/login", json={"username": username, "password": password})
        assert response.status_code == 200
        return {"Authorization": response.json()["token"]}

    return _login
