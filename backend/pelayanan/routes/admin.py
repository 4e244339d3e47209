"""
Pelayanan Backend — Admin Route Handlers
==========================================

What:  POST /api/admin/login — exchanges credentials for a bearer token.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pelayanan.database import get_db_session
from pelayanan.schemas.admin import LoginRequest, LoginResponse
from pelayanan.schemas.common import ErrorResponse
from pelayanan.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Username or password missing", "model": ErrorResponse},
        401: {"description": "Wrong credentials", "model": ErrorResponse},
    },
    summary="Administrator login",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    return await auth_service.login(db, body.username, body.password)
