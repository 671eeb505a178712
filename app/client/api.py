from __future__ import annotations

from typing import Any

import httpx

from app.core.errors import Forbidden, GalleryError, NotFound, Unauthenticated, UpstreamTransferFailure
from app.schemas.files import FileOut


class GalleryClientError(GalleryError):
    """Non-success API response outside the gallery error taxonomy."""

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(detail)
        self.status_code = status_code


_STATUS_ERRORS: dict[int, type[GalleryError]] = {
    401: Unauthenticated,
    403: Forbidden,
    404: NotFound,
}


def _detail(res: httpx.Response) -> str:
    try:
        payload = res.json()
    except ValueError:
        return res.reason_phrase or f"HTTP {res.status_code}"
    if isinstance(payload, dict) and payload.get("detail"):
        return str(payload["detail"])
    return res.reason_phrase or f"HTTP {res.status_code}"


def _json_field(res: httpx.Response, key: str) -> str | None:
    try:
        payload = res.json()
    except ValueError:
        return None
    if not isinstance(payload, dict) or payload.get(key) is None:
        return None
    return str(payload[key])


def _raise_for_status(res: httpx.Response) -> None:
    if res.is_success:
        return
    error_cls = _STATUS_ERRORS.get(res.status_code)
    if error_cls is not None:
        raise error_cls(_detail(res))
    raise GalleryClientError(res.status_code, _detail(res))


class GalleryClient:
    """Async client for the gallery API.

    ``base_url`` includes the API prefix, e.g. ``http://localhost:8000/api/v1``.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        *,
        http: httpx.AsyncClient | None = None,
        timeout: float = 60,
    ) -> None:
        self.token = (token or "").strip() or None
        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout)

    async def __aenter__(self) -> GalleryClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json", "User-Agent": "Gallery/1.0"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def issue_upload_url(self) -> str:
        res = await self.http.post("/files/upload-url", headers=self._headers())
        _raise_for_status(res)
        upload_url = _json_field(res, "uploadUrl")
        if not upload_url:
            raise GalleryClientError(res.status_code, "No uploadUrl in response")
        return upload_url

    async def upload_blob(self, upload_url: str, data: bytes, mime_type: str) -> str:
        res = await self.http.post(upload_url, content=data, headers={"Content-Type": mime_type})
        if not res.is_success:
            raise UpstreamTransferFailure(f"Upload failed: {_detail(res)}")

        storage_id = _json_field(res, "storageId")
        if not storage_id:
            raise UpstreamTransferFailure("No storageId in response")
        return storage_id

    async def save_metadata(self, storage_id: str, file_name: str, file_type: str, mime_type: str) -> None:
        body = {
            "storageId": storage_id,
            "fileName": file_name,
            "fileType": file_type,
            "mimeType": mime_type,
        }
        res = await self.http.post("/files", json=body, headers=self._headers())
        _raise_for_status(res)

    async def list_files(self) -> list[FileOut]:
        res = await self.http.get("/files", headers=self._headers())
        _raise_for_status(res)
        return [FileOut.model_validate(item) for item in res.json() or []]

    async def delete_file(self, file_id: int) -> None:
        res = await self.http.delete(f"/files/{file_id}", headers=self._headers())
        _raise_for_status(res)
