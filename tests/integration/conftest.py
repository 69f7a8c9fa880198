from __future__ import annotations

import os
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from todolist_api.api.main import create_app
from todolist_api.storage.postgres import PostgresStorage

from ..fakes import make_settings


@pytest.fixture
def database_url() -> str:
    if os.getenv("RUN_POSTGRES_INTEGRATION_TESTS") != "1":
        pytest.skip(
            "Set RUN_POSTGRES_INTEGRATION_TESTS=1 and TODOLIST_DATABASE_URL "
            "to run integration tests against PostgreSQL."
        )
    url = os.getenv("TODOLIST_DATABASE_URL") or os.getenv("DATABASE_URL")
    if not url:
        pytest.skip("TODOLIST_DATABASE_URL is required for integration tests.")
    return url


@pytest.fixture
def pg_storage(database_url: str) -> PostgresStorage:
    storage = PostgresStorage(database_url)
    storage.migrate()
    return storage


@pytest.fixture
def pg_client(pg_storage: PostgresStorage) -> Iterator[TestClient]:
    app = create_app(storage=pg_storage, settings_override=make_settings())
    with TestClient(app) as client:
        yield client
