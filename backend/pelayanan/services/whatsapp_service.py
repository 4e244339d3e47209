"""
Pelayanan Backend — WhatsApp Notification Dispatcher
======================================================

What:  Sends status-change texts through an HTTP WhatsApp messaging gateway.
How:   Normalises the citizen's number to international form and POSTs
       `{"target": <number>, "message": <text>}` with a Bearer token.
Who:   Called by the status-transition workflow, once per status change.

Failure Mapping (all returned as success=False, never raised):
    - Gateway URL not configured
    - Number empty after normalisation
    - Transport errors (connect/read timeout, DNS, TLS)
    - Non-2xx HTTP status
    - 2xx body explicitly reporting `"status": false`
"""

import logging
import re
from typing import Any, Optional

import httpx

from pelayanan.config import Settings, settings as default_settings
from pelayanan.models.enums import NotificationChannel, SubmissionStatus
from pelayanan.models.submission import Submission
from pelayanan.services.dispatcher_base import DispatchResult, NotificationDispatcher
from pelayanan.services.messages import build_status_message

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"\D")


def normalize_phone(raw: str, country_code: str = "62") -> str:
    """
    Converts local notation to the international digits the gateway expects.

    Examples (country_code="62"):
        "0812-3456-7890"   → "6281234567890"
        "+62 812 3456 7890" → "6281234567890"
        "81234567890"      → "6281234567890"
    """
    digits = _NON_DIGITS.sub("", raw or "")
    if not digits:
        return ""
    if digits.startswith(country_code):
        return digits
    if digits.startswith("0"):
        return country_code + digits.lstrip("0")
    return country_code + digits


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text[:500]


class WhatsAppDispatcher(NotificationDispatcher):
    """
    Messaging-gateway client for the WHATSAPP channel.

    `transport` lets tests plug in `httpx.MockTransport`; production uses the
    default network transport.
    """

    channel = NotificationChannel.WHATSAPP

    def __init__(
        self,
        config: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or default_settings
        self._transport = transport

    def recipient(self, submission: Submission) -> Optional[str]:
        return submission.no_wa or None

    async def dispatch(self, submission: Submission, new_status: SubmissionStatus) -> DispatchResult:
        recipient = self.recipient(submission)

        if not self.config.wa_gateway_url:
            logger.warning("WhatsApp gateway not configured; submission %s not notified", submission.id)
            return DispatchResult.failure(self.channel, "WhatsApp gateway is not configured", recipient)

        number = normalize_phone(recipient or "", self.config.wa_country_code)
        if not number:
            return DispatchResult.failure(self.channel, "Invalid WhatsApp number", recipient)

        message = build_status_message(submission, new_status, self.config.public_tracking_url)
        headers = {"Content-Type": "application/json"}
        if self.config.wa_gateway_token:
            headers["Authorization"] = f"Bearer {self.config.wa_gateway_token}"

        try:
            async with httpx.AsyncClient(
                timeout=self.config.wa_timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self.config.wa_gateway_url,
                    json={"target": number, "message": message},
                    headers=headers,
                )
        except httpx.HTTPError as e:
            logger.warning("WhatsApp gateway request failed for %s: %s", submission.id, e)
            return DispatchResult.failure(
                self.channel, f"{type(e).__name__}: {e}", number,
            )

        body = _response_body(response)
        if not response.is_success:
            logger.warning(
                "WhatsApp gateway returned %d for submission %s",
                response.status_code, submission.id,
            )
            return DispatchResult.failure(
                self.channel,
                f"Gateway responded with HTTP {response.status_code}",
                number,
                http_status=response.status_code,
                response=body,
            )

        if isinstance(body, dict) and body.get("status") is False:
            return DispatchResult.failure(
                self.channel,
                str(body.get("reason") or body.get("message") or "Gateway rejected the message"),
                number,
                http_status=response.status_code,
                response=body,
            )

        logger.info("WhatsApp notification sent for submission %s", submission.id)
        return DispatchResult(
            success=True,
            channel=self.channel,
            recipient=number,
            detail={"http_status": response.status_code, "response": body},
        )
