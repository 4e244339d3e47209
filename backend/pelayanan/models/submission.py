"""
Pelayanan Backend — Submission SQLAlchemy Model
=================================================

What:  ORM model for the `submissions` table.
Who:   Created by the citizen submission flow; status mutated only by the
       status-transition workflow; read by the public tracking endpoint.

Table Design:
    - UUID primary key generated in Python (portable across PostgreSQL/SQLite)
    - tracking_code: unique public reference handed to the citizen
    - nik: 16-character national id; only its last 4 digits ever leave the API
    - email: optional; its presence decides whether the EMAIL channel fires
    - status: enumerated lifecycle, default PENGAJUAN_BARU
    - created_at / updated_at: UTC with timezone
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import DateTime, Enum, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pelayanan.database import Base
from pelayanan.models.enums import SubmissionStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Submission(Base):
    """
    A citizen's service request.

    Lifecycle:
        1. Created with status PENGAJUAN_BARU and a fresh tracking code
        2. Moved between statuses by administrators (never to the same value)
        3. Never deleted by the application
    """

    __tablename__ = "submissions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    tracking_code: Mapped[str] = mapped_column(
        String(32),
        unique=True,
        nullable=False,
        comment="Public reference used by citizens to track the request",
    )

    nama: Mapped[str] = mapped_column(String(255), nullable=False)

    nik: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        comment="National id number; only the last 4 digits are ever exposed",
    )

    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    no_wa: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="WhatsApp number that receives status notifications",
    )

    jenis_layanan: Mapped[str] = mapped_column(String(255), nullable=False)

    status: Mapped[SubmissionStatus] = mapped_column(
        Enum(SubmissionStatus, name="submission_status"),
        nullable=False,
        default=SubmissionStatus.PENGAJUAN_BARU,
        server_default=SubmissionStatus.PENGAJUAN_BARU.value,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # No cascade: audit rows are never removed alongside a submission
    notification_logs: Mapped[List["NotificationLog"]] = relationship(  # noqa: F821
        back_populates="submission",
        lazy="raise",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_submissions_status", "status"),
    )

    @property
    def nik_last4(self) -> str:
        return self.nik[-4:]

    def __repr__(self) -> str:
        return (
            f"<Submission(id={self.id}, tracking_code='{self.tracking_code}', "
            f"status='{self.status.value if self.status else None}')>"
        )
