from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.files import FileMetadataIn, FileOut, UploadUrlOut
from app.services import gallery
from app.services.auth import AuthUser, get_current_user_optional
from app.services.storage import S3BlobStore, get_blob_store

router = APIRouter(prefix="/files", tags=["files"])


@router.post("/upload-url", response_model=UploadUrlOut)
async def generate_upload_url(
    current_user: AuthUser | None = Depends(get_current_user_optional),
) -> UploadUrlOut:
    return UploadUrlOut(upload_url=gallery.issue_upload_url(current_user))


@router.post("", status_code=status.HTTP_204_NO_CONTENT)
async def save_file_metadata(
    payload: FileMetadataIn,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser | None = Depends(get_current_user_optional),
) -> Response:
    await gallery.save_file_metadata(db, current_user, payload)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("", response_model=list[FileOut], response_model_exclude_none=True)
async def list_files(
    db: AsyncSession = Depends(get_db),
    blobs: S3BlobStore = Depends(get_blob_store),
    current_user: AuthUser | None = Depends(get_current_user_optional),
) -> list[FileOut]:
    return await gallery.list_files(db, blobs, current_user)


@router.delete("/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_file(
    file_id: int,
    db: AsyncSession = Depends(get_db),
    blobs: S3BlobStore = Depends(get_blob_store),
    current_user: AuthUser | None = Depends(get_current_user_optional),
) -> Response:
    await gallery.delete_file(db, blobs, current_user, file_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
