"""
Pelayanan Backend — Submission Repository
===========================================

What:  Queries and writes for submissions and their notification logs.
How:   Stateless methods that take the session to run on, so the caller
       decides transaction boundaries.

Operations:
    get(id)                         → Submission | None (always hits the DB)
    get_by_tracking_code(code)      → Submission | None
    tracking_code_exists(code)      → bool
    create(**fields)                → Submission
    update_status(id, old, new)     → bool (conditional compare-and-swap)
    create_log(...)                 → NotificationLog
    list_logs(submission_id)        → [NotificationLog] oldest first
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from pelayanan.models.enums import NotificationChannel, SendStatus, SubmissionStatus
from pelayanan.models.notification_log import NotificationLog
from pelayanan.models.submission import Submission


class SubmissionRepository:

    async def get(self, session: AsyncSession, submission_id: uuid.UUID) -> Optional[Submission]:
        # populate_existing: never act on a stale identity-map copy
        result = await session.execute(
            select(Submission)
            .where(Submission.id == submission_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_tracking_code(self, session: AsyncSession, tracking_code: str) -> Optional[Submission]:
        result = await session.execute(
            select(Submission).where(Submission.tracking_code == tracking_code)
        )
        return result.scalar_one_or_none()

    async def tracking_code_exists(self, session: AsyncSession, tracking_code: str) -> bool:
        result = await session.execute(
            select(Submission.id).where(Submission.tracking_code == tracking_code)
        )
        return result.first() is not None

    async def create(self, session: AsyncSession, **fields: Any) -> Submission:
        submission = Submission(**fields)
        session.add(submission)
        await session.flush()
        return submission

    async def update_status(
        self,
        session: AsyncSession,
        submission_id: uuid.UUID,
        expected_status: SubmissionStatus,
        new_status: SubmissionStatus,
    ) -> bool:
        """
        Single-row compare-and-swap:

            UPDATE submissions SET status = :new, updated_at = :now
            WHERE id = :id AND status = :expected

        Returns True when exactly one row changed. A concurrent writer that got
        there first makes this match zero rows.
        """
        result = await session.execute(
            update(Submission)
            .where(
                Submission.id == submission_id,
                Submission.status == expected_status,
            )
            .values(status=new_status, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def create_log(
        self,
        session: AsyncSession,
        submission_id: uuid.UUID,
        channel: NotificationChannel,
        send_status: SendStatus,
        payload: Dict[str, Any],
    ) -> NotificationLog:
        log = NotificationLog(
            submission_id=submission_id,
            channel=channel,
            send_status=send_status,
            payload=payload,
        )
        session.add(log)
        await session.flush()
        return log

    async def list_logs(self, session: AsyncSession, submission_id: uuid.UUID) -> List[NotificationLog]:
        result = await session.execute(
            select(NotificationLog)
            .where(NotificationLog.submission_id == submission_id)
            .order_by(NotificationLog.created_at)
        )
        return list(result.scalars().all())


submission_repository = SubmissionRepository()
