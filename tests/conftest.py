from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.config import settings
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models import FileRecord  # noqa: F401
from app.services.storage import BlobAlreadyExists, get_blob_store


class InMemoryBlobStore:
    def __init__(self) -> None:
        self.objects: dict[str, tuple[str, bytes]] = {}
        self.fail_delete = False
        self.deleted: list[str] = []

    def put_bytes(self, blob_ref: str, media_type: str, data: bytes) -> None:
        if blob_ref in self.objects:
            raise BlobAlreadyExists(blob_ref)
        self.objects[blob_ref] = (media_type, data)

    def exists(self, blob_ref: str) -> bool:
        return blob_ref in self.objects

    def presigned_get_url(self, blob_ref: str) -> str | None:
        if blob_ref not in self.objects:
            return None
        return f"https://blobs.test/{blob_ref}?X-Amz-Expires={settings.download_url_expires_seconds}"

    def delete(self, blob_ref: str) -> None:
        if self.fail_delete:
            raise RuntimeError("blob store unavailable")
        self.objects.pop(blob_ref, None)
        self.deleted.append(blob_ref)


def make_token(user_id: str, **claims) -> str:
    payload = {"sub": user_id, "email": f"{user_id}@example.com", **claims}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def auth_headers(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture
def token_for():
    return make_token


@pytest.fixture
def auth():
    return auth_headers


@pytest.fixture
def session_factory(tmp_path) -> async_sessionmaker[AsyncSession]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'gallery.db'}", poolclass=NullPool)

    async def _create() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(_create())
    yield async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    asyncio.run(engine.dispose())


@pytest.fixture
def blobs() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def overrides(session_factory, blobs):
    async def _get_db() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_blob_store] = lambda: blobs
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client(overrides) -> TestClient:
    return TestClient(app)
