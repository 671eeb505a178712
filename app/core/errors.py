from __future__ import annotations


class GalleryError(Exception):
    """Base error for gallery operations. Carries the HTTP status it maps to."""

    status_code = 500
    default_detail = "Gallery error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Unauthenticated(GalleryError):
    status_code = 401
    default_detail = "Not authenticated"


class Forbidden(GalleryError):
    status_code = 403
    default_detail = "Not authorized to delete this file"


class NotFound(GalleryError):
    status_code = 404
    default_detail = "File not found"


class UnsupportedType(GalleryError):
    """Raised client-side for files that are not image, video or audio."""

    status_code = 415
    default_detail = "Unsupported file type"


class UpstreamTransferFailure(GalleryError):
    """Blob write returned a non-success status or no storage id."""

    status_code = 502
    default_detail = "Upload failed"
