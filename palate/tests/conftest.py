"""Shared pytest fixtures for API tests and database isolation."""

from __future__ import annotations

import os
import tempfile
import uuid

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault(
    "DATABASE_URL", f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'palate-test.db')}"
)

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from passlib.context import CryptContext
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from palate.api.deps import get_db
from palate.core import security
from palate.core.config import settings
from palate.db.base_class import Base
from palate.main import app
from palate.services.task_queue import task_queue
from palate.tests.utils import FakeEmbeddingClient


@pytest.fixture(autouse=True)
def _use_plaintext_passwords(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(security, "pwd_context", CryptContext(schemes=["plaintext"]))


@pytest.fixture()
def embedding_client() -> FakeEmbeddingClient:
    return FakeEmbeddingClient()


@pytest_asyncio.fixture()
async def session_factory(monkeypatch: pytest.MonkeyPatch, embedding_client: FakeEmbeddingClient):
    database_url = settings.test_database_url or settings.database_url
    url = make_url(database_url)
    schema_name: str | None = None
    engine = create_async_engine(database_url, future=True)
    if url.drivername.startswith("postgresql"):
        # Isolate each test run in its own schema for parallel-friendly cleanup.
        schema_name = f"test_{uuid.uuid4().hex}"
        engine = engine.execution_options(schema_translate_map={None: schema_name})
    async with engine.begin() as conn:
        if schema_name:
            await conn.exec_driver_sql(f'CREATE SCHEMA IF NOT EXISTS "{schema_name}"')
        await conn.run_sync(Base.metadata.create_all)
    TestingSession = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    # Background tasks open their own sessions; point them at the test database.
    monkeypatch.setattr("palate.jobs.profiles.async_session", TestingSession)
    monkeypatch.setattr("palate.jobs.embeddings.async_session", TestingSession)
    monkeypatch.setattr("palate.jobs.embeddings.get_embedding_client", lambda: embedding_client)
    try:
        yield TestingSession
    finally:
        await task_queue.drain()
        async with engine.begin() as conn:
            if schema_name:
                await conn.exec_driver_sql(f'DROP SCHEMA IF EXISTS "{schema_name}" CASCADE')
            else:
                await conn.run_sync(Base.metadata.drop_all)
        await engine.dispose()


@pytest_asyncio.fixture()
async def session(session_factory) -> AsyncSession:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(session: AsyncSession) -> AsyncClient:
    async def _get_test_db():
        yield session

    app.dependency_overrides[get_db] = _get_test_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as async_client:
        yield async_client
    app.dependency_overrides.pop(get_db, None)
