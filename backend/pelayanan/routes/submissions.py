"""
Pelayanan Backend — Submission Route Handlers
===============================================

What:  Citizen filing and tracking, plus the administrator status change.

Status change endpoint (/api/submissions/{submission_id}):
    PATCH    {"status": "..."} → {message, old_status, new_status, submission_id}
    OPTIONS  → 200 with permissive CORS headers
    GET, POST, PUT, DELETE → 405 with the list of allowed methods

Error responses (global exception handlers):
    400 invalid or unchanged status      404 unknown submission
    401 admin token required/invalid     409 concurrent update won the race
    500 notification log could not be written, or any unexpected error
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from pelayanan.database import Database, get_database, get_db_session
from pelayanan.routes.deps import get_dispatchers, require_admin
from pelayanan.schemas.common import ErrorResponse, MethodNotAllowedResponse
from pelayanan.schemas.submission import (
    StatusUpdateRequest,
    StatusUpdateResponse,
    SubmissionCreate,
    SubmissionCreated,
    TrackingResponse,
)
from pelayanan.services.notification_service import NotificationDispatchers
from pelayanan.services.status_service import status_service
from pelayanan.services.submission_service import submission_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Submissions"])

ALLOWED_METHODS = ["PATCH", "OPTIONS"]

CORS_PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, PATCH, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


# ══════════════════════════════════════════════════════════════════════════
# Citizen flows
# ══════════════════════════════════════════════════════════════════════════

@router.post(
    "/submissions",
    status_code=201,
    response_model=SubmissionCreated,
    responses={400: {"description": "Invalid submission data", "model": ErrorResponse}},
    summary="File a new service request",
)
async def create_submission(
    body: SubmissionCreate,
    db: AsyncSession = Depends(get_db_session),
) -> SubmissionCreated:
    return await submission_service.create_submission(db, body)


@router.get(
    "/track/{tracking_code}",
    response_model=TrackingResponse,
    responses={
        400: {"description": "Malformed tracking code or NIK digits", "model": ErrorResponse},
        403: {"description": "NIK digits do not match", "model": ErrorResponse},
        404: {"description": "Unknown tracking code", "model": ErrorResponse},
    },
    summary="Track a submission by its public code",
)
async def track_submission(
    tracking_code: str,
    last4_nik: Optional[str] = Query(default=None, description="Last four digits of the NIK"),
    db: AsyncSession = Depends(get_db_session),
) -> TrackingResponse:
    return await submission_service.track_submission(db, tracking_code, last4_nik)


# ══════════════════════════════════════════════════════════════════════════
# Administrator status change
# ══════════════════════════════════════════════════════════════════════════

@router.patch(
    "/submissions/{submission_id}",
    response_model=StatusUpdateResponse,
    responses={
        400: {"description": "Invalid or unchanged status", "model": ErrorResponse},
        401: {"description": "Admin token required", "model": ErrorResponse},
        404: {"description": "Submission not found", "model": ErrorResponse},
        409: {"description": "Submission changed concurrently", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Update a submission's status and notify the citizen",
)
async def update_submission_status(
    submission_id: str,
    body: StatusUpdateRequest,
    database: Database = Depends(get_database),
    dispatchers: NotificationDispatchers = Depends(get_dispatchers),
    _admin: Optional[dict] = Depends(require_admin),
) -> StatusUpdateResponse:
    logger.info("Status update requested for submission %s: %s", submission_id, body.status)
    return await status_service.update_status(
        database=database,
        dispatchers=dispatchers,
        submission_id=submission_id,
        requested_status=body.status,
    )


@router.options("/submissions/{submission_id}", include_in_schema=False)
async def submission_status_preflight(submission_id: str) -> Response:
    return Response(status_code=200, headers=CORS_PREFLIGHT_HEADERS)


@router.api_route(
    "/submissions/{submission_id}",
    methods=["GET", "POST", "PUT", "DELETE"],
    status_code=405,
    response_model=MethodNotAllowedResponse,
    include_in_schema=False,
)
async def submission_method_not_allowed(submission_id: str, request: Request) -> JSONResponse:
    method = request.method
    logger.info("%s on /api/submissions/%s rejected", method, submission_id)
    return JSONResponse(
        status_code=405,
        content={
            "message": f"Method {method} not allowed. Use PATCH to update status.",
            "allowed_methods": ALLOWED_METHODS,
        },
        headers={"Allow": ", ".join(ALLOWED_METHODS)},
    )
