from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import settings
from app.core.errors import Unauthenticated


logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)

UPLOAD_TICKET_TYPE = "upload"


@dataclass(slots=True)
class AuthUser:
    user_id: str
    email: str
    display_name: str


@dataclass(slots=True)
class UploadTicket:
    owner_id: str
    blob_ref: str


def _decode_token(token: str) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "algorithms": [settings.jwt_algorithm],
        "leeway": settings.jwt_exp_leeway_seconds,
    }

    if settings.jwt_audience:
        kwargs["audience"] = settings.jwt_audience
    else:
        kwargs["options"] = {"verify_aud": False}

    if settings.jwt_issuer:
        kwargs["issuer"] = settings.jwt_issuer

    try:
        payload = jwt.decode(token, settings.jwt_secret, **kwargs)
    except jwt.PyJWTError as exc:
        raise Unauthenticated("Invalid token") from exc

    return payload


def _parse_payload(payload: dict[str, Any]) -> AuthUser:
    if payload.get("typ") == UPLOAD_TICKET_TYPE:
        raise Unauthenticated("Upload tickets cannot be used as session tokens")

    user_id = str(payload.get("sub") or payload.get("user_id") or "").strip()
    if not user_id:
        raise Unauthenticated("Invalid sub claim")

    email = str(payload.get("email") or "").strip().lower()
    display_name = str(payload.get("display_name") or payload.get("name") or email or user_id)
    return AuthUser(user_id=user_id, email=email, display_name=display_name)


async def get_current_user_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> AuthUser | None:
    """Resolve the caller once per request; None when there is no valid session."""
    if credentials is None:
        return None
    try:
        return _parse_payload(_decode_token(credentials.credentials))
    except Unauthenticated as exc:
        logger.info("Rejected bearer token: %s", exc.detail)
        return None


def issue_upload_ticket(owner_id: str, blob_ref: str) -> str:
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "typ": UPLOAD_TICKET_TYPE,
        "sub": owner_id,
        "key": blob_ref,
        "iat": now,
        "exp": now + timedelta(seconds=settings.upload_url_expires_seconds),
    }
    if settings.jwt_issuer:
        payload["iss"] = settings.jwt_issuer
    if settings.jwt_audience:
        payload["aud"] = settings.jwt_audience
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_upload_ticket(ticket: str) -> UploadTicket:
    payload = _decode_token(ticket)
    if payload.get("typ") != UPLOAD_TICKET_TYPE:
        raise Unauthenticated("Invalid upload ticket")

    owner_id = str(payload.get("sub") or "").strip()
    blob_ref = str(payload.get("key") or "").strip()
    if not owner_id or not blob_ref:
        raise Unauthenticated("Invalid upload ticket")
    return UploadTicket(owner_id=owner_id, blob_ref=blob_ref)
