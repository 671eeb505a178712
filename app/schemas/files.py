from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


FileType = Literal["image", "video", "audio"]


class UploadUrlOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    upload_url: str = Field(alias="uploadUrl")


class BlobUploadOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    storage_id: str = Field(alias="storageId")


class FileMetadataIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    storage_id: str = Field(alias="storageId", min_length=1)
    file_name: str = Field(alias="fileName")
    file_type: FileType = Field(alias="fileType")
    mime_type: str = Field(alias="mimeType")


class FileOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    created_at: str = Field(alias="createdAt")
    file_name: str = Field(alias="fileName")
    file_type: FileType = Field(alias="fileType")
    mime_type: str = Field(alias="mimeType")
    url: str | None = None
