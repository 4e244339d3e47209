"""
Pelayanan Backend — Notification Dispatcher Registry
======================================================

What:  The set of channels notified on every status change.
How:   Built once at application startup from settings and stored on
       `app.state.dispatchers`; tests inject fakes through `create_app()`.
"""

from typing import List, Optional, Tuple

from pelayanan.config import Settings, settings as default_settings
from pelayanan.models.submission import Submission
from pelayanan.services.dispatcher_base import NotificationDispatcher
from pelayanan.services.email_service import EmailDispatcher
from pelayanan.services.whatsapp_service import WhatsAppDispatcher


class NotificationDispatchers:
    """Ordered, immutable collection of channel dispatchers."""

    def __init__(self, *dispatchers: NotificationDispatcher):
        self._dispatchers: Tuple[NotificationDispatcher, ...] = tuple(dispatchers)

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "NotificationDispatchers":
        config = config or default_settings
        return cls(WhatsAppDispatcher(config), EmailDispatcher(config))

    def targets(self, submission: Submission) -> List[Tuple[NotificationDispatcher, str]]:
        """
        Channels that have a destination for this submission.

        WhatsApp always qualifies (`no_wa` is required); email only when the
        submission carries a non-empty address.
        """
        pairs = []
        for dispatcher in self._dispatchers:
            recipient = dispatcher.recipient(submission)
            if recipient:
                pairs.append((dispatcher, recipient))
        return pairs
