"""
Pelayanan Backend — WhatsApp Dispatcher Tests
===============================================

What:  Number normalisation and the gateway client's failure mapping.
How:   httpx.MockTransport stands in for the gateway (no network).
"""

import json
import uuid

import httpx
import pytest

from pelayanan.config import Settings
from pelayanan.models.enums import NotificationChannel, SubmissionStatus
from pelayanan.models.submission import Submission
from pelayanan.services.whatsapp_service import WhatsAppDispatcher, normalize_phone

GATEWAY_URL = "https://gateway.test/send"


def _submission(**overrides) -> Submission:
    fields = dict(
        id=uuid.uuid4(),
        tracking_code="LYN-20261018-WA0001",
        nama="Dewi Lestari",
        nik="3201010101010001",
        email=None,
        no_wa="0812-3456-7890",
        jenis_layanan="KTP Elektronik",
        status=SubmissionStatus.PENGAJUAN_BARU,
    )
    fields.update(overrides)
    return Submission(**fields)


def _dispatcher(handler, **config) -> WhatsAppDispatcher:
    settings = Settings(
        wa_gateway_url=GATEWAY_URL,
        wa_gateway_token="gw-token",
        public_tracking_url="https://layanan.test/track",
        **config,
    )
    return WhatsAppDispatcher(settings, transport=httpx.MockTransport(handler))


class TestNormalizePhone:

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("0812-3456-7890", "6281234567890"),
            ("+62 812 3456 7890", "6281234567890"),
            ("6281234567890", "6281234567890"),
            ("81234567890", "6281234567890"),
            ("(0812) 3456 7890", "6281234567890"),
            ("", ""),
            ("abc", ""),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_phone(raw) == expected

    def test_other_country_code(self):
        assert normalize_phone("012 345 678", country_code="60") == "6012345678"


class TestWhatsAppDispatcher:

    @pytest.mark.asyncio
    async def test_success_request_shape(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"status": True, "id": "msg-1"})

        result = await _dispatcher(handler).dispatch(_submission(), SubmissionStatus.DIPROSES)

        assert result.success is True
        assert result.channel == NotificationChannel.WHATSAPP
        assert result.recipient == "6281234567890"
        assert result.detail["http_status"] == 200
        assert seen["url"] == GATEWAY_URL
        assert seen["auth"] == "Bearer gw-token"
        assert seen["body"]["target"] == "6281234567890"
        assert "LYN-20261018-WA0001" in seen["body"]["message"]
        assert "Sedang Diproses" in seen["body"]["message"]
        assert "https://layanan.test/track/LYN-20261018-WA0001" in seen["body"]["message"]

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        def handler(request):
            return httpx.Response(500, text="upstream down")

        result = await _dispatcher(handler).dispatch(_submission(), SubmissionStatus.SELESAI)

        assert result.success is False
        assert result.detail["http_status"] == 500
        assert "500" in result.error

    @pytest.mark.asyncio
    async def test_gateway_rejection_in_body(self):
        def handler(request):
            return httpx.Response(200, json={"status": False, "reason": "invalid target"})

        result = await _dispatcher(handler).dispatch(_submission(), SubmissionStatus.SELESAI)

        assert result.success is False
        assert result.error == "invalid target"

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        result = await _dispatcher(handler).dispatch(_submission(), SubmissionStatus.DITOLAK)

        assert result.success is False
        assert "ConnectError" in result.error

    @pytest.mark.asyncio
    async def test_unconfigured_gateway(self):
        def handler(request):
            raise AssertionError("no request expected")

        dispatcher = WhatsAppDispatcher(Settings(wa_gateway_url=""), transport=httpx.MockTransport(handler))

        result = await dispatcher.dispatch(_submission(), SubmissionStatus.DIPROSES)

        assert result.success is False
        assert "not configured" in result.error

    @pytest.mark.asyncio
    async def test_unusable_number(self):
        def handler(request):
            raise AssertionError("no request expected")

        result = await _dispatcher(handler).dispatch(_submission(no_wa="n/a"), SubmissionStatus.DIPROSES)

        assert result.success is False
        assert result.error == "Invalid WhatsApp number"

    def test_recipient_is_raw_number(self):
        dispatcher = WhatsAppDispatcher(Settings())
        assert dispatcher.recipient(_submission()) == "0812-3456-7890"
