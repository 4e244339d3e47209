"""
Pelayanan Backend — Abstract Notification Dispatcher Interface
================================================================

What:  Contract shared by every notification channel (WhatsApp, email).
How:   Concrete dispatchers inherit from NotificationDispatcher and implement
       `recipient()` and `dispatch()`.
Who:   Called by the status-transition workflow after a status change has
       been committed.

Contract:
    - `recipient(submission)` returns the destination for this channel, or
      None when the submission has none (the channel is then skipped and no
      log row is written).
    - `dispatch(submission, new_status)` attempts one delivery and ALWAYS
      returns a DispatchResult. Ordinary delivery failures (gateway errors,
      SMTP refusals, missing configuration) are reported as
      `success=False`, never raised.
    - Dispatchers do not retry; one call is one attempt.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from pelayanan.models.enums import NotificationChannel, SubmissionStatus
from pelayanan.models.submission import Submission


class DispatchResult(BaseModel):
    """
    Outcome of one delivery attempt.

    Stored verbatim under `payload.result` of the notification log row; the
    application never parses it back.
    """
    success: bool
    channel: NotificationChannel
    recipient: Optional[str] = None
    detail: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None

    @classmethod
    def failure(
        cls,
        channel: NotificationChannel,
        error: str,
        recipient: Optional[str] = None,
        **detail: Any,
    ) -> "DispatchResult":
        return cls(success=False, channel=channel, recipient=recipient, error=error, detail=detail)


class NotificationDispatcher(ABC):
    """
    Abstract interface for one notification channel.

    Implementations:
        - WhatsAppDispatcher: HTTP messaging gateway
        - EmailDispatcher: SMTP
    """

    channel: NotificationChannel

    @abstractmethod
    def recipient(self, submission: Submission) -> Optional[str]:
        """Destination for this channel, or None if the submission has none."""
        ...

    @abstractmethod
    async def dispatch(self, submission: Submission, new_status: SubmissionStatus) -> DispatchResult:
        """
        Attempt to notify the citizen that `submission` moved to `new_status`.

        Returns:
            DispatchResult with success=True on delivery, success=False with
            an `error` description otherwise.
        """
        ...
