"""
Pelayanan Backend — Status Transition Service (Workflow Orchestrator)
=======================================================================

What:  Validates an administrator's status change, commits it, then notifies
       the citizen on every channel that has a destination and records one
       audit row per attempted channel.
Who:   Called by PATCH /api/submissions/{id}.

Orchestration Flow:
    ┌───────────┐   ┌──────────┐   ┌────────────┐   ┌──────────────────────┐
    │ Guard     │──▶│ Load     │──▶│ CAS update │──▶│ gather(              │
    │ (value)   │   │ + guard  │   │ + COMMIT   │   │   WA → log row,      │
    └───────────┘   │ (change) │   └────────────┘   │   EMAIL → log row)   │
                    └──────────┘                    └──────────────────────┘

Guarantees:
    - Invalid value, unknown id, and unchanged status are rejected before any
      write or dispatch.
    - The status write is its own committed transaction. Nothing that happens
      afterwards (dispatch failures, log failures) rolls it back.
    - The status write is a compare-and-swap on the status read during
      validation, so two concurrent updates cannot both succeed from the
      same starting status.
    - Every channel with a destination is attempted and gets exactly one log
      row, whether delivery succeeded, failed, or the dispatcher raised.
    - All channel tasks finish before the request completes. If any log row
      could not be written the request fails with AuditLogError (500) after
      the join; the status change stays committed.
"""

import asyncio
import logging
import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from pelayanan.database import Database
from pelayanan.exceptions import (
    AuditLogError,
    NotFoundError,
    StatusConflictError,
    ValidationError,
)
from pelayanan.models.enums import SendStatus, SubmissionStatus
from pelayanan.models.submission import Submission
from pelayanan.repositories.submission_repository import submission_repository
from pelayanan.schemas.submission import StatusUpdateResponse
from pelayanan.services.dispatcher_base import DispatchResult, NotificationDispatcher
from pelayanan.services.notification_service import NotificationDispatchers

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Status Transition Guard
# ══════════════════════════════════════════════════════════════════════════

def parse_status(raw: Optional[str]) -> SubmissionStatus:
    """
    Accepts only one of the four enumerated values (exact, case-sensitive).

    Raises:
        ValidationError: missing, empty, or unknown value.
    """
    if not raw or raw not in SubmissionStatus.values():
        raise ValidationError(
            message="Status tidak valid",
            field="status",
            context={"allowed": SubmissionStatus.values()},
        )
    return SubmissionStatus(raw)


def ensure_status_changes(current: SubmissionStatus, requested: SubmissionStatus) -> None:
    """Rejects a no-op transition."""
    if current == requested:
        raise ValidationError(
            message="Status sudah sama",
            field="status",
            context={"current_status": current.value},
        )


def parse_submission_id(raw: str) -> uuid.UUID:
    """A malformed id cannot name an existing submission, so it is a 404."""
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        raise NotFoundError(resource_id=str(raw)) from None


# ══════════════════════════════════════════════════════════════════════════
# Orchestrator
# ══════════════════════════════════════════════════════════════════════════

class StatusService:
    """
    Stateless workflow object. The database handle and the dispatchers are
    passed in on every call.
    """

    async def update_status(
        self,
        database: Database,
        dispatchers: NotificationDispatchers,
        submission_id: str,
        requested_status: Optional[str],
    ) -> StatusUpdateResponse:
        """
        Change a submission's status and notify the citizen.

        Raises:
            ValidationError:      invalid or unchanged status (400)
            NotFoundError:        unknown submission (404)
            StatusConflictError:  lost a concurrent update race (409)
            AuditLogError:        a notification log row could not be written (500)
        """
        new_status = parse_status(requested_status)
        sid = parse_submission_id(submission_id)

        # ── Step 1: load, guard, compare-and-swap, commit ─────────────────
        async with database.session() as session:
            submission = await submission_repository.get(session, sid)
            if submission is None:
                raise NotFoundError(resource_id=str(sid))

            old_status = submission.status
            ensure_status_changes(old_status, new_status)

            swapped = await submission_repository.update_status(
                session, sid, old_status, new_status,
            )
            if not swapped:
                await self._raise_for_lost_race(session, sid, old_status, new_status)

        logger.info(
            "Submission %s status changed: %s -> %s",
            sid, old_status.value, new_status.value,
        )

        # ── Step 2-4: fan out, log each attempt, join ─────────────────────
        await self._notify(database, dispatchers, submission, new_status)

        return StatusUpdateResponse(
            old_status=old_status,
            new_status=new_status,
            submission_id=sid,
        )

    async def _raise_for_lost_race(
        self,
        session: AsyncSession,
        submission_id: uuid.UUID,
        expected: SubmissionStatus,
        requested: SubmissionStatus,
    ) -> None:
        current = await submission_repository.get(session, submission_id)
        if current is None:
            raise NotFoundError(resource_id=str(submission_id))
        ensure_status_changes(current.status, requested)
        logger.warning(
            "Concurrent status update on %s: expected %s, found %s",
            submission_id, expected.value, current.status.value,
        )
        raise StatusConflictError(
            expected_status=expected.value,
            actual_status=current.status.value,
        )

    async def _notify(
        self,
        database: Database,
        dispatchers: NotificationDispatchers,
        submission: Submission,
        new_status: SubmissionStatus,
    ) -> None:
        targets = dispatchers.targets(submission)
        if not targets:
            return

        outcomes = await asyncio.gather(
            *(
                self._attempt(database, dispatcher, recipient, submission, new_status)
                for dispatcher, recipient in targets
            ),
            return_exceptions=True,
        )

        failed_channels = []
        for (dispatcher, _), outcome in zip(targets, outcomes):
            if isinstance(outcome, BaseException):
                failed_channels.append(dispatcher.channel.value)
                logger.error(
                    "Could not record %s notification log for submission %s",
                    dispatcher.channel.value, submission.id,
                    exc_info=outcome,
                )

        if failed_channels:
            raise AuditLogError(
                failed_channels=failed_channels,
                context={"submission_id": str(submission.id)},
            )

    async def _attempt(
        self,
        database: Database,
        dispatcher: NotificationDispatcher,
        recipient: str,
        submission: Submission,
        new_status: SubmissionStatus,
    ) -> DispatchResult:
        """One channel: deliver, then write exactly one log row for the attempt."""
        try:
            result = await dispatcher.dispatch(submission, new_status)
        except Exception as e:
            # Dispatchers report failures as data; an escaped exception is recorded the same way
            logger.error(
                "%s dispatcher raised for submission %s",
                dispatcher.channel.value, submission.id,
                exc_info=True,
            )
            result = DispatchResult.failure(
                dispatcher.channel, f"{type(e).__name__}: {e}", recipient,
            )

        send_status = SendStatus.SUCCESS if result.success else SendStatus.FAILED
        async with database.session() as session:
            await submission_repository.create_log(
                session,
                submission_id=submission.id,
                channel=dispatcher.channel,
                send_status=send_status,
                payload={
                    "to": recipient,
                    "status": new_status.value,
                    "result": result.model_dump(mode="json"),
                },
            )

        logger.info(
            "%s notification for submission %s: %s",
            dispatcher.channel.value, submission.id, send_status.value,
        )
        return result


# Stateless; shared by all requests
status_service = StatusService()
