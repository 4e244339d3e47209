"""
Pelayanan Backend — Submission Service (citizen-facing flows)
===============================================================

What:  Filing a new service request and tracking it by code.
Who:   Called by POST /api/submissions and GET /api/track/{tracking_code}.

Tracking codes:
    Format  LYN-YYYYMMDD-XXXXXX  (X = uppercase letter or digit, from `secrets`)
    A generated code that already exists is discarded and regenerated.

Tracking lookup checks, in order:
    blank code                          → ValidationError (400)
    last4_nik not exactly four digits   → ValidationError (400)
    unknown code                        → NotFoundError   (404)
    NIK suffix mismatch                 → ForbiddenError  (403)
"""

import logging
import re
import secrets
import string
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from pelayanan.exceptions import DatabaseError, ForbiddenError, NotFoundError, ValidationError
from pelayanan.models.enums import SubmissionStatus
from pelayanan.repositories.submission_repository import submission_repository
from pelayanan.schemas.submission import SubmissionCreate, SubmissionCreated, TrackingResponse

logger = logging.getLogger(__name__)

TRACKING_PREFIX = "LYN"
_CODE_ALPHABET = string.ascii_uppercase + string.digits
_CODE_ATTEMPTS = 5

_NIK_RE = re.compile(r"^\d{16}$")
_LAST4_RE = re.compile(r"^\d{4}$")
_PHONE_RE = re.compile(r"^\+?[\d\s\-()]{8,20}$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def generate_tracking_code(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    suffix = "".join(secrets.choice(_CODE_ALPHABET) for _ in range(6))
    return f"{TRACKING_PREFIX}-{now:%Y%m%d}-{suffix}"


class SubmissionService:

    async def create_submission(self, db: AsyncSession, data: SubmissionCreate) -> SubmissionCreated:
        nik = data.nik.strip()
        if not _NIK_RE.match(nik):
            raise ValidationError(message="NIK harus terdiri dari 16 digit angka", field="nik")

        no_wa = data.no_wa.strip()
        if not _PHONE_RE.match(no_wa):
            raise ValidationError(message="Nomor WhatsApp tidak valid", field="no_wa")

        email = (data.email or "").strip() or None
        if email and not _EMAIL_RE.match(email):
            raise ValidationError(message="Format email tidak valid", field="email")

        tracking_code = await self._unique_tracking_code(db)
        submission = await submission_repository.create(
            db,
            tracking_code=tracking_code,
            nama=data.nama.strip(),
            nik=nik,
            email=email,
            no_wa=no_wa,
            jenis_layanan=data.jenis_layanan.strip(),
            status=SubmissionStatus.PENGAJUAN_BARU,
        )
        logger.info("Submission %s created with tracking code %s", submission.id, tracking_code)

        return SubmissionCreated(
            id=submission.id,
            tracking_code=submission.tracking_code,
            nama=submission.nama,
            jenis_layanan=submission.jenis_layanan,
            status=submission.status,
            created_at=submission.created_at,
        )

    async def _unique_tracking_code(self, db: AsyncSession) -> str:
        for _ in range(_CODE_ATTEMPTS):
            code = generate_tracking_code()
            if not await submission_repository.tracking_code_exists(db, code):
                return code
        logger.error("Could not generate a unique tracking code after %d attempts", _CODE_ATTEMPTS)
        raise DatabaseError(message="Gagal membuat kode tracking. Silakan coba lagi.")

    async def track_submission(
        self,
        db: AsyncSession,
        tracking_code: str,
        last4_nik: Optional[str],
    ) -> TrackingResponse:
        code = (tracking_code or "").strip()
        if not code:
            raise ValidationError(message="Kode tracking wajib diisi", field="tracking_code")

        if not last4_nik or not _LAST4_RE.match(last4_nik):
            raise ValidationError(
                message="4 digit terakhir NIK wajib diisi dan harus berupa angka",
                field="last4_nik",
            )

        submission = await submission_repository.get_by_tracking_code(db, code)
        if submission is None:
            raise NotFoundError(resource_id=code)

        if not secrets.compare_digest(submission.nik_last4, last4_nik):
            raise ForbiddenError(message="4 digit terakhir NIK tidak sesuai")

        return TrackingResponse.model_validate(submission)


submission_service = SubmissionService()
