"""Upload, list and delete flow for gallery files.

Every operation receives the caller explicitly; ``None`` means the request
carried no valid session.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import Forbidden, NotFound, Unauthenticated
from app.models.common import utcnow
from app.models.file import FileRecord
from app.schemas.files import FileMetadataIn, FileOut
from app.services.auth import AuthUser, issue_upload_ticket
from app.services.storage import S3BlobStore, new_blob_ref


logger = logging.getLogger(__name__)


def _require_caller(caller: AuthUser | None) -> AuthUser:
    if caller is None:
        raise Unauthenticated()
    return caller


def _upload_url(ticket: str) -> str:
    base = str(settings.public_base_url or "").strip().rstrip("/")
    return f"{base}{settings.api_prefix}/storage/upload/{ticket}"


def issue_upload_url(caller: AuthUser | None) -> str:
    me = _require_caller(caller)
    ticket = issue_upload_ticket(owner_id=me.user_id, blob_ref=new_blob_ref())
    return _upload_url(ticket)


async def save_file_metadata(db: AsyncSession, caller: AuthUser | None, payload: FileMetadataIn) -> FileRecord:
    me = _require_caller(caller)
    row = FileRecord(
        blob_ref=payload.storage_id,
        file_name=payload.file_name,
        file_type=payload.file_type,
        mime_type=payload.mime_type,
        owner_id=me.user_id,
        created_at=utcnow(),
    )
    db.add(row)
    await db.commit()
    await db.refresh(row)
    logger.info("Saved file id=%s owner=%s blob=%s", row.id, row.owner_id, row.blob_ref)
    return row


async def list_files(db: AsyncSession, blobs: S3BlobStore, caller: AuthUser | None) -> list[FileOut]:
    if caller is None:
        return []

    stmt = select(FileRecord)
    if settings.gallery_list_scope == "owner":
        stmt = stmt.where(FileRecord.owner_id == caller.user_id)
    stmt = stmt.order_by(FileRecord.created_at.desc(), FileRecord.id.desc())
    rows = (await db.execute(stmt)).scalars().all()

    return [
        FileOut(
            id=row.id,
            created_at=row.created_at.isoformat(),
            file_name=row.file_name,
            file_type=row.file_type,
            mime_type=row.mime_type,
            url=blobs.presigned_get_url(row.blob_ref),
        )
        for row in rows
    ]


async def delete_file(db: AsyncSession, blobs: S3BlobStore, caller: AuthUser | None, file_id: int) -> None:
    me = _require_caller(caller)

    row = (await db.execute(select(FileRecord).where(FileRecord.id == file_id))).scalar_one_or_none()
    if row is None:
        raise NotFound()
    if row.owner_id != me.user_id:
        raise Forbidden()

    try:
        blobs.delete(row.blob_ref)
    except Exception:
        # The record still goes; listing renders a missing blob as an absent url.
        logger.exception("Blob delete failed for file id=%s blob=%s", row.id, row.blob_ref)

    await db.delete(row)
    await db.commit()
    logger.info("Deleted file id=%s owner=%s", file_id, me.user_id)
