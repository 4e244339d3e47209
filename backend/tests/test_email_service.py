"""
Pelayanan Backend — Email Dispatcher Tests
============================================

What:  SMTP delivery and its failure mapping.
How:   smtplib.SMTP is patched; nothing leaves the process.
"""

import smtplib
import uuid
from unittest.mock import MagicMock, patch

import pytest

from pelayanan.config import Settings
from pelayanan.models.enums import NotificationChannel, SubmissionStatus
from pelayanan.models.submission import Submission
from pelayanan.services.email_service import EmailDispatcher


def _submission(email="warga@example.com") -> Submission:
    return Submission(
        id=uuid.uuid4(),
        tracking_code="LYN-20261018-EM0001",
        nama="Rina Wati",
        nik="3201010101010001",
        email=email,
        no_wa="081234567890",
        jenis_layanan="Surat Pindah",
        status=SubmissionStatus.DIPROSES,
    )


@pytest.fixture
def smtp_settings() -> Settings:
    return Settings(
        smtp_host="smtp.test",
        smtp_port=587,
        smtp_username="mailer",
        smtp_password="secret",
        email_from="noreply@layanan.test",
    )


@pytest.fixture
def mock_smtp():
    with patch("pelayanan.services.email_service.smtplib.SMTP") as smtp_cls:
        server = MagicMock()
        server.send_message.return_value = {}
        smtp_cls.return_value.__enter__.return_value = server
        yield smtp_cls, server


class TestEmailDispatcher:

    @pytest.mark.asyncio
    async def test_send_success(self, smtp_settings, mock_smtp):
        smtp_cls, server = mock_smtp
        dispatcher = EmailDispatcher(smtp_settings)

        result = await dispatcher.dispatch(_submission(), SubmissionStatus.SELESAI)

        assert result.success is True
        assert result.channel == NotificationChannel.EMAIL
        assert result.recipient == "warga@example.com"
        assert result.detail["message_id"]
        smtp_cls.assert_called_once_with("smtp.test", 587, timeout=smtp_settings.smtp_timeout)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "secret")

        message = server.send_message.call_args.args[0]
        assert message["To"] == "warga@example.com"
        assert message["From"] == "noreply@layanan.test"
        assert "LYN-20261018-EM0001" in message["Subject"]
        assert "Selesai" in message.get_content()

    @pytest.mark.asyncio
    async def test_login_skipped_without_username(self, mock_smtp):
        _, server = mock_smtp
        dispatcher = EmailDispatcher(Settings(smtp_host="smtp.test", smtp_starttls=False))

        result = await dispatcher.dispatch(_submission(), SubmissionStatus.DIPROSES)

        assert result.success is True
        server.starttls.assert_not_called()
        server.login.assert_not_called()

    @pytest.mark.asyncio
    async def test_smtp_error(self, smtp_settings, mock_smtp):
        smtp_cls, _ = mock_smtp
        smtp_cls.side_effect = smtplib.SMTPConnectError(421, b"service not available")

        result = await EmailDispatcher(smtp_settings).dispatch(_submission(), SubmissionStatus.DIPROSES)

        assert result.success is False
        assert "SMTPConnectError" in result.error

    @pytest.mark.asyncio
    async def test_connection_refused(self, smtp_settings, mock_smtp):
        smtp_cls, _ = mock_smtp
        smtp_cls.side_effect = ConnectionRefusedError("refused")

        result = await EmailDispatcher(smtp_settings).dispatch(_submission(), SubmissionStatus.DIPROSES)

        assert result.success is False

    @pytest.mark.asyncio
    async def test_recipient_refused(self, smtp_settings, mock_smtp):
        _, server = mock_smtp
        server.send_message.return_value = {"warga@example.com": (550, b"mailbox unavailable")}

        result = await EmailDispatcher(smtp_settings).dispatch(_submission(), SubmissionStatus.DIPROSES)

        assert result.success is False
        assert result.detail["refused"] == {"warga@example.com": 550}

    @pytest.mark.asyncio
    async def test_unconfigured_smtp(self, mock_smtp):
        smtp_cls, _ = mock_smtp

        result = await EmailDispatcher(Settings(smtp_host="")).dispatch(
            _submission(), SubmissionStatus.DIPROSES
        )

        assert result.success is False
        smtp_cls.assert_not_called()

    @pytest.mark.parametrize("email,expected", [
        ("warga@example.com", "warga@example.com"),
        ("  warga@example.com ", "warga@example.com"),
        ("", None),
        (None, None),
    ])
    def test_recipient(self, email, expected):
        assert EmailDispatcher(Settings()).recipient(_submission(email=email)) == expected
