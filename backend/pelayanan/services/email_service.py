"""
Pelayanan Backend — Email Notification Dispatcher
===================================================

What:  Sends status-change emails over SMTP.
How:   Builds a plain-text EmailMessage and hands it to smtplib in a worker
       thread (`asyncio.to_thread`) so the event loop is never blocked by the
       SMTP conversation.
Who:   Called by the status-transition workflow only when the submission has
       an email address.

Failure Mapping (returned as success=False):
    - SMTP host not configured
    - Connection/TLS/authentication errors (smtplib.SMTPException, OSError)
    - Recipient refused by the server
"""

import asyncio
import logging
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formatdate, make_msgid
from typing import Dict, Optional, Tuple

from pelayanan.config import Settings, settings as default_settings
from pelayanan.models.enums import NotificationChannel, SubmissionStatus
from pelayanan.models.submission import Submission
from pelayanan.services.dispatcher_base import DispatchResult, NotificationDispatcher
from pelayanan.services.messages import build_email_subject, build_status_message

logger = logging.getLogger(__name__)


class EmailDispatcher(NotificationDispatcher):

    channel = NotificationChannel.EMAIL

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings

    def recipient(self, submission: Submission) -> Optional[str]:
        email = (submission.email or "").strip()
        return email or None

    def build_message(self, submission: Submission, new_status: SubmissionStatus, recipient: str) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = build_email_subject(submission, new_status)
        message["From"] = self.config.email_from
        message["To"] = recipient
        message["Date"] = formatdate(localtime=False)
        message["Message-ID"] = make_msgid()
        message.set_content(
            build_status_message(submission, new_status, self.config.public_tracking_url)
        )
        return message

    def _send(self, message: EmailMessage) -> Dict[str, Tuple[int, bytes]]:
        with smtplib.SMTP(
            self.config.smtp_host,
            self.config.smtp_port,
            timeout=self.config.smtp_timeout,
        ) as smtp:
            if self.config.smtp_starttls:
                smtp.starttls(context=ssl.create_default_context())
            if self.config.smtp_username:
                smtp.login(self.config.smtp_username, self.config.smtp_password)
            return smtp.send_message(message)

    async def dispatch(self, submission: Submission, new_status: SubmissionStatus) -> DispatchResult:
        recipient = self.recipient(submission)
        if recipient is None:
            return DispatchResult.failure(self.channel, "Submission has no email address")

        if not self.config.smtp_host:
            logger.warning("SMTP not configured; submission %s not emailed", submission.id)
            return DispatchResult.failure(self.channel, "SMTP server is not configured", recipient)

        message = self.build_message(submission, new_status, recipient)
        try:
            refused = await asyncio.to_thread(self._send, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("Email delivery failed for submission %s: %s", submission.id, e)
            return DispatchResult.failure(self.channel, f"{type(e).__name__}: {e}", recipient)

        if refused:
            return DispatchResult.failure(
                self.channel,
                "Recipient refused by SMTP server",
                recipient,
                refused={addr: code for addr, (code, _) in refused.items()},
            )

        logger.info("Email notification sent for submission %s", submission.id)
        return DispatchResult(
            success=True,
            channel=self.channel,
            recipient=recipient,
            detail={"message_id": message["Message-ID"]},
        )
