"""
Pelayanan Backend — NotificationLog SQLAlchemy Model
======================================================

What:  Immutable audit row for one attempted notification delivery.
Who:   Written by the status-transition workflow, one row per attempted
       channel per status update. There is no update or delete path.

payload (JSON):
    {
        "to": "<recipient>",
        "status": "<target status>",
        "result": {<DispatchResult as returned by the dispatcher>}
    }
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Index, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pelayanan.database import Base
from pelayanan.models.enums import NotificationChannel, SendStatus


class NotificationLog(Base):
    __tablename__ = "notification_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    submission_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("submissions.id"),
        nullable=False,
    )

    channel: Mapped[NotificationChannel] = mapped_column(
        Enum(NotificationChannel, name="notification_channel"),
        nullable=False,
    )

    send_status: Mapped[SendStatus] = mapped_column(
        Enum(SendStatus, name="notification_send_status"),
        nullable=False,
    )

    payload: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    submission: Mapped["Submission"] = relationship(  # noqa: F821
        back_populates="notification_logs",
        lazy="raise",
    )

    __table_args__ = (
        Index("idx_notification_logs_submission_id", "submission_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<NotificationLog(submission_id={self.submission_id}, "
            f"channel='{self.channel.value}', send_status='{self.send_status.value}')>"
        )
