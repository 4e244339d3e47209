"""
Pelayanan Backend — Admin Authentication Service
==================================================

What:  Password hashing (bcrypt), admin login, and JWT access tokens.
Who:   POST /api/admin/login, the `require_admin` route dependency, and the
       create_admin script.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from pelayanan.config import settings
from pelayanan.exceptions import AuthenticationError, ValidationError
from pelayanan.models.admin import Admin
from pelayanan.repositories.admin_repository import admin_repository
from pelayanan.schemas.admin import AdminInfo, LoginResponse

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=12)).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_access_token(admin: Admin, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.jwt_expiration_minutes)
    )
    claims = {"sub": str(admin.id), "username": admin.username, "exp": expire}
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    """
    Raises:
        AuthenticationError: bad signature, expired, or malformed token.
    """
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise AuthenticationError(message="Token tidak valid atau sudah kedaluwarsa") from None


class AuthService:

    async def login(self, db: AsyncSession, username: Optional[str], password: Optional[str]) -> LoginResponse:
        """Authenticates by username or email; the same 401 message for both failure cases."""
        if not username or not password:
            raise ValidationError(message="Username dan password wajib diisi")

        admin = await admin_repository.get_by_login(db, username.strip())
        if admin is None or not verify_password(password, admin.password):
            logger.warning("Failed admin login for '%s'", username)
            raise AuthenticationError()

        logger.info("Admin '%s' logged in", admin.username)
        return LoginResponse(
            admin=AdminInfo.model_validate(admin),
            access_token=create_access_token(admin),
        )


auth_service = AuthService()
