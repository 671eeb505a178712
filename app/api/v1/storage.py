from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from app.core.config import settings
from app.schemas.files import BlobUploadOut
from app.services.auth import decode_upload_ticket
from app.services.storage import BlobAlreadyExists, S3BlobStore, get_blob_store

router = APIRouter(prefix="/storage", tags=["storage"])

logger = logging.getLogger(__name__)


def _check_size(size_bytes: int) -> None:
    if size_bytes > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail=f"File too large (max {settings.max_upload_size_mb} MB)")


@router.post("/upload/{ticket}", response_model=BlobUploadOut)
async def upload_blob(
    ticket: str,
    request: Request,
    blobs: S3BlobStore = Depends(get_blob_store),
) -> BlobUploadOut:
    upload = decode_upload_ticket(ticket)

    declared = request.headers.get("content-length")
    if declared and declared.isdigit():
        _check_size(int(declared))

    data = await request.body()
    if not data:
        raise HTTPException(status_code=400, detail="Empty file")
    _check_size(len(data))

    media_type = str(request.headers.get("content-type") or "application/octet-stream")
    try:
        blobs.put_bytes(upload.blob_ref, media_type=media_type, data=data)
    except BlobAlreadyExists as exc:
        raise HTTPException(status_code=409, detail="Upload URL already used") from exc

    logger.info("Stored blob %s (%s bytes, %s) for owner=%s", upload.blob_ref, len(data), media_type, upload.owner_id)
    return BlobUploadOut(storage_id=upload.blob_ref)
