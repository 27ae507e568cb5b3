from __future__ import annotations

import hashlib

from fastapi import Header, HTTPException, Request, status

from ..services.storage import StorageService
from .errors import StoreError

USER_HEADER = "X-MoodStreak-User"
MAX_USER_ID_LENGTH = 64


def _hash_identifier(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:12]


async def resolve_current_user(
    request: Request,
    user_header: str | None = Header(default=None, alias=USER_HEADER),
) -> str:
    """Return the id of the signed-in user forwarded by the auth gateway."""

    user_id = (user_header or "").strip()
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="authentication required",
        )
    if len(user_id) > MAX_USER_ID_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="invalid user id",
        )

    request.state.telemetry_user = _hash_identifier(user_id)
    request.state.current_user_id = user_id
    return user_id


async def resolve_current_profile(
    request: Request,
    user_header: str | None = Header(default=None, alias=USER_HEADER),
) -> int:
    user_id = await resolve_current_user(request, user_header)
    storage: StorageService = request.app.state.storage_service
    try:
        profile = await storage.ensure_profile(user_id)
    except StoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="profile unavailable",
        ) from exc
    request.state.current_profile_id = profile.id
    return profile.id


async def require_admin_token(
    request: Request,
    authorization: str | None = Header(default=None, alias="Authorization"),
    admin_header: str | None = Header(default=None, alias="X-MoodStreak-Admin-Token"),
) -> None:
    settings = request.app.state.settings
    expected = getattr(settings, "admin_api_token", None)
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="admin disabled",
        )
    token_value: str | None = None
    if authorization and authorization.lower().startswith("bearer "):
        token_value = authorization.split(" ", 1)[1].strip()
    elif admin_header:
        token_value = admin_header.strip()
    if token_value != expected:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="admin token invalid")


async def resolve_existing_profile(
    request: Request,
    user_header: str | None = Header(default=None, alias=USER_HEADER),
) -> int | None:
    """Look up the caller's profile without creating it."""

    user_id = await resolve_current_user(request, user_header)
    storage: StorageService = request.app.state.storage_service
    try:
        profile = await storage.get_profile(user_id)
    except StoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="profile unavailable",
        ) from exc
    if profile is None:
        return None
    request.state.current_profile_id = profile.id
    return profile.id
