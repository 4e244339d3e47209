"""
Pelayanan Backend — Submission Request/Response Schemas
=========================================================

What:  API contract for creating, tracking, and updating submissions.

Redaction:
    `TrackingResponse` is the only public view of a submission. It never
    carries `nik`, `email`, or `no_wa`; the citizen proves ownership with the
    last four NIK digits instead.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from pelayanan.models.enums import SubmissionStatus


# ══════════════════════════════════════════════════════════════════════════
# Status transition
# ══════════════════════════════════════════════════════════════════════════


class StatusUpdateRequest(BaseModel):
    """
    Body of PATCH /api/submissions/{id}.

    `status` is a plain optional string (not the enum) so that a missing or
    unknown value is rejected by the transition guard with a 400 and the
    workflow's own message, instead of FastAPI's generic 422.
    """
    status: Optional[str] = Field(
        default=None,
        description="Target status: PENGAJUAN_BARU, DIPROSES, SELESAI or DITOLAK",
    )


class StatusUpdateResponse(BaseModel):
    """
    Result of a committed status change.

    Per-channel notification outcomes are intentionally absent; they are
    observable only through the notification log.
    """
    message: str = Field(default="Status berhasil diupdate")
    old_status: SubmissionStatus
    new_status: SubmissionStatus
    submission_id: uuid.UUID


# ══════════════════════════════════════════════════════════════════════════
# Citizen submission flow
# ══════════════════════════════════════════════════════════════════════════


class SubmissionCreate(BaseModel):
    nama: str = Field(min_length=1, max_length=255)
    nik: str = Field(description="16-digit national id number")
    email: Optional[str] = Field(default=None, max_length=255)
    no_wa: str = Field(min_length=1, max_length=32, description="WhatsApp number")
    jenis_layanan: str = Field(min_length=1, max_length=255, description="Service type")


class SubmissionCreated(BaseModel):
    """Returned once, to the citizen who filed the request."""
    message: str = Field(default="Pengajuan berhasil dibuat")
    id: uuid.UUID
    tracking_code: str
    nama: str
    jenis_layanan: str
    status: SubmissionStatus
    created_at: datetime


class TrackingResponse(BaseModel):
    """Redacted public view returned by GET /api/track/{tracking_code}."""
    id: uuid.UUID
    tracking_code: str
    nama: str
    jenis_layanan: str
    status: SubmissionStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
