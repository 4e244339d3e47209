"""Route dependencies that read the startup-created handles and guard admin routes."""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from pelayanan.config import settings
from pelayanan.exceptions import AuthenticationError
from pelayanan.services.auth_service import decode_access_token
from pelayanan.services.notification_service import NotificationDispatchers

_bearer = HTTPBearer(auto_error=False)


def get_dispatchers(request: Request) -> NotificationDispatchers:
    return request.app.state.dispatchers


async def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Optional[dict]:
    """
    Returns the token claims, or None when ADMIN_AUTH_REQUIRED is off.

    Raises:
        AuthenticationError: token required but missing or invalid (401).
    """
    if not settings.admin_auth_required:
        return None
    if credentials is None:
        raise AuthenticationError(message="Token admin diperlukan")
    return decode_access_token(credentials.credentials)
