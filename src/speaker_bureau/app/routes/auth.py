"""Authentication routes: admin login, me, and the admin guard dependency."""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from speaker_bureau.app.errors import ApiError
from speaker_bureau.domain.models import AdminUser, utcnow
from speaker_bureau.domain.schemas import AdminLogin, AdminResponse, TokenResponse
from speaker_bureau.infra.database import get_db
from speaker_bureau.services.auth_service import (
    create_access_token,
    decode_token,
    get_admin,
    get_admin_by_email,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

ADMIN_ROLES = ("admin",)


async def get_current_admin(
    request: Request, db: AsyncSession = Depends(get_db)
) -> AdminUser:
    """Dependency: resolve the admin from the Bearer token, or reject the request."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise ApiError(401, "Unauthorized", "Missing or invalid token")
    token = auth_header.removeprefix("Bearer ")
    payload = decode_token(token)
    if not payload or "sub" not in payload:
        raise ApiError(401, "Unauthorized", "Invalid or expired token")

    try:
        admin_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise ApiError(401, "Unauthorized", "Invalid or expired token")

    admin = await get_admin(db, admin_id)
    if not admin or not admin.is_active:
        raise ApiError(401, "Unauthorized", "User not found or inactive")
    if admin.role not in ADMIN_ROLES:
        raise ApiError(403, "Forbidden", "Admin access required")
    return admin


@router.post("/login", response_model=TokenResponse)
async def login(data: AdminLogin, db: AsyncSession = Depends(get_db)):
    admin = await get_admin_by_email(db, data.email)
    if not admin or not verify_password(data.password, admin.password_hash):
        logger.warning("Failed admin login for %s", data.email)
        raise ApiError(401, "Invalid email or password")
    if not admin.is_active:
        raise ApiError(401, "Account is inactive")
    admin.last_login_at = utcnow()
    await db.commit()
    token = create_access_token(admin.id, admin.role)
    return TokenResponse(access_token=token, user=AdminResponse.model_validate(admin))


@router.get("/me", response_model=AdminResponse)
async def me(admin: AdminUser = Depends(get_current_admin)):
    return AdminResponse.model_validate(admin)
