from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

import httpx

from app.client.api import GalleryClient
from app.core.errors import GalleryError, UnsupportedType
from app.schemas.files import FileType


logger = logging.getLogger(__name__)

_PREFIXES: tuple[tuple[str, FileType], ...] = (
    ("image/", "image"),
    ("video/", "video"),
    ("audio/", "audio"),
)


def classify_mime(mime_type: str) -> FileType | None:
    value = str(mime_type or "").strip().lower()
    for prefix, file_type in _PREFIXES:
        if value.startswith(prefix):
            return file_type
    return None


@dataclass(slots=True)
class LocalFile:
    name: str
    mime_type: str
    data: bytes | None = None
    path: Path | None = None

    @classmethod
    def from_path(cls, path: str | Path) -> LocalFile:
        p = Path(path)
        mime_type, _ = mimetypes.guess_type(p.name)
        return cls(name=p.name, mime_type=mime_type or "application/octet-stream", path=p)

    def read(self) -> bytes:
        if self.data is None and self.path is not None:
            return self.path.read_bytes()
        return self.data or b""


@dataclass(slots=True)
class FileOutcome:
    name: str
    status: Literal["uploaded", "unsupported", "failed"]
    detail: str = ""


@dataclass(slots=True)
class BatchReport:
    outcomes: list[FileOutcome] = field(default_factory=list)

    def _with(self, status: str) -> list[FileOutcome]:
        return [x for x in self.outcomes if x.status == status]

    @property
    def uploaded(self) -> list[FileOutcome]:
        return self._with("uploaded")

    @property
    def unsupported(self) -> list[FileOutcome]:
        return self._with("unsupported")

    @property
    def failed(self) -> list[FileOutcome]:
        return self._with("failed")

    @property
    def ok(self) -> bool:
        return not self.failed


class Uploader:
    """Runs the per-file pipeline: upload URL, blob write, metadata.

    Files in a batch are processed in order. A failure is recorded against
    that file and the remaining files are still attempted.
    """

    def __init__(self, client: GalleryClient) -> None:
        self.client = client
        self.uploading = False

    async def upload_one(self, item: LocalFile) -> None:
        file_type = classify_mime(item.mime_type)
        if file_type is None:
            raise UnsupportedType(
                f"{item.name} is not a supported file type. Please upload images, videos, or audio files."
            )

        data = item.read()
        upload_url = await self.client.issue_upload_url()
        storage_id = await self.client.upload_blob(upload_url, data, item.mime_type)
        await self.client.save_metadata(
            storage_id=storage_id,
            file_name=item.name,
            file_type=file_type,
            mime_type=item.mime_type,
        )

    async def upload_batch(self, items: list[LocalFile]) -> BatchReport:
        report = BatchReport()
        self.uploading = True
        try:
            for item in items:
                try:
                    await self.upload_one(item)
                except UnsupportedType as exc:
                    report.outcomes.append(FileOutcome(item.name, "unsupported", exc.detail))
                except (GalleryError, httpx.HTTPError, OSError) as exc:
                    logger.error("Error uploading %s: %s", item.name, exc)
                    report.outcomes.append(FileOutcome(item.name, "failed", str(exc)))
                else:
                    report.outcomes.append(FileOutcome(item.name, "uploaded"))
        finally:
            self.uploading = False
        return report
