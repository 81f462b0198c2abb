"""Shared fixtures for tests."""

from __future__ import annotations

from pathlib import Path

import pytest
import pytest_asyncio

from aithor.config import AppConfig
from aithor.library.store import LocalStore
from aithor.remote.client import ApiClient
from aithor.remote.models import AuthToken
from aithor.remote.session import AuthSession
from fakes import BASE_URL, FakeServer


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        data_dir=tmp_path / "data",
        config_dir=tmp_path / "config",
        api_base_url=BASE_URL,
    )


@pytest_asyncio.fixture
async def store(tmp_path: Path) -> LocalStore:
    s = LocalStore(tmp_path / "test.db")
    await s.initialize()
    yield s
    await s.close()


@pytest.fixture
def session(tmp_path: Path) -> AuthSession:
    return AuthSession(tmp_path / "session.env")


@pytest.fixture
def authed_session(session: AuthSession) -> AuthSession:
    session.store(AuthToken(access_token="tok-123", token_type="bearer"))
    return session


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest_asyncio.fixture
async def api(server: FakeServer, authed_session: AuthSession) -> ApiClient:
    client = ApiClient(BASE_URL, authed_session, transport=server.transport())
    yield client
    await client.close()
