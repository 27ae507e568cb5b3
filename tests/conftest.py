from __future__ import annotations

import asyncio
from collections.abc import Generator
from datetime import datetime, timedelta
from pathlib import Path
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from backend.db import create_engine, create_session_factory, init_db


class FakeClock:
    """Deterministic replacement for ``datetime.now`` in services."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 7, 10, 9, 30, 0))


@pytest.fixture()
def test_client(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> Generator[TestClient, None, None]:
    monkeypatch.setenv("VERSION", "0.1.0-test")
    monkeypatch.setenv("ADMIN_TOKEN", "test-admin")
    monkeypatch.setenv("LOG_FILE", str(tmp_path / "logs" / "test.log"))

    db_path = tmp_path / f"api_{uuid4().hex}.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{db_path}")

    from backend.app.core import config
    from backend.app.main import app

    config.get_settings.cache_clear()
    try:
        with TestClient(app) as client:
            client.headers.update({"X-MoodStreak-User": "user-123"})
            yield client
    finally:
        config.get_settings.cache_clear()


@pytest.fixture()
def temp_session_factory(tmp_path: Path):
    db_path = tmp_path / f"unit_{uuid4().hex}.db"
    database_url = f"sqlite+aiosqlite:///{db_path}"
    engine = create_engine(database_url)
    session_factory = create_session_factory(engine)

    async def _prepare() -> None:
        await init_db(engine, session_factory, "test", database_url)
        # drop pooled connections opened on this short-lived loop
        await engine.dispose()

    asyncio.run(_prepare())
    try:
        yield session_factory
    finally:
        asyncio.run(engine.dispose())
