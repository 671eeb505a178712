from __future__ import annotations

import asyncio

import pytest

from app.core.errors import Forbidden, NotFound, Unauthenticated
from app.schemas.files import FileMetadataIn
from app.services import gallery
from app.services.auth import AuthUser


ALICE = AuthUser(user_id="alice", email="alice@example.com", display_name="Alice")
BOB = AuthUser(user_id="bob", email="bob@example.com", display_name="Bob")


def _meta(storage_id: str, name: str = "a.png") -> FileMetadataIn:
    return FileMetadataIn(storage_id=storage_id, file_name=name, file_type="image", mime_type="image/png")


def test_issue_upload_url_requires_caller() -> None:
    with pytest.raises(Unauthenticated):
        gallery.issue_upload_url(None)


def test_save_requires_caller(session_factory) -> None:
    async def scenario() -> list:
        async with session_factory() as db:
            with pytest.raises(Unauthenticated):
                await gallery.save_file_metadata(db, None, _meta("uploads/a"))
        async with session_factory() as db:
            return await gallery.list_files(db, _NoBlobs(), ALICE)

    assert asyncio.run(scenario()) == []


def test_save_sets_owner_and_timestamp(session_factory) -> None:
    async def scenario():
        async with session_factory() as db:
            return await gallery.save_file_metadata(db, ALICE, _meta("uploads/a"))

    row = asyncio.run(scenario())
    assert row.id is not None
    assert row.owner_id == "alice"
    assert row.blob_ref == "uploads/a"
    assert row.created_at is not None


def test_delete_precondition_order(session_factory, blobs) -> None:
    async def scenario() -> None:
        async with session_factory() as db:
            row = await gallery.save_file_metadata(db, ALICE, _meta("uploads/a"))
        async with session_factory() as db:
            with pytest.raises(Unauthenticated):
                await gallery.delete_file(db, blobs, None, 12345)
            with pytest.raises(NotFound):
                await gallery.delete_file(db, blobs, BOB, 12345)
            with pytest.raises(Forbidden):
                await gallery.delete_file(db, blobs, BOB, row.id)

    asyncio.run(scenario())
    assert blobs.deleted == []


def test_blob_delete_failure_still_removes_record(session_factory, blobs) -> None:
    blobs.put_bytes("uploads/a", "image/png", b"x")
    blobs.fail_delete = True

    async def scenario() -> list:
        async with session_factory() as db:
            row = await gallery.save_file_metadata(db, ALICE, _meta("uploads/a"))
        async with session_factory() as db:
            await gallery.delete_file(db, blobs, ALICE, row.id)
        async with session_factory() as db:
            return await gallery.list_files(db, blobs, ALICE)

    assert asyncio.run(scenario()) == []
    assert "uploads/a" in blobs.objects


def test_deleting_blob_first_leaves_nothing_listed(session_factory, blobs) -> None:
    blobs.put_bytes("uploads/a", "image/png", b"x")

    async def scenario() -> list:
        async with session_factory() as db:
            row = await gallery.save_file_metadata(db, ALICE, _meta("uploads/a"))
        async with session_factory() as db:
            await gallery.delete_file(db, blobs, ALICE, row.id)
        async with session_factory() as db:
            return await gallery.list_files(db, blobs, BOB)

    assert asyncio.run(scenario()) == []
    assert blobs.deleted == ["uploads/a"]


class _NoBlobs:
    def presigned_get_url(self, blob_ref: str) -> None:
        return None
