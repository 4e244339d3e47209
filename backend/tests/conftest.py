"""
Pelayanan Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped, created fresh for each test):
    ├── mock_db_session: Mock database session (unit tests, no DB)
    ├── database: Real Database handle on a temporary SQLite file (aiosqlite)
    ├── submission_factory: Inserts submissions through `database`
    ├── whatsapp_dispatcher / email_dispatcher: Scriptable fake channels
    ├── dispatchers: Both fakes, in production order (WhatsApp, email)
    ├── stored_status / stored_logs: Read back committed state in a fresh session
    └── test_client: HTTPX AsyncClient over ASGITransport (no network, no lifespan)
"""

import os

# Override settings for testing BEFORE any pelayanan imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["JWT_SECRET_KEY"] = "test-secret-not-real"
os.environ["WA_GATEWAY_URL"] = ""
os.environ["SMTP_HOST"] = ""
os.environ["ADMIN_AUTH_REQUIRED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

from typing import List, Optional, Tuple
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from pelayanan.config import Settings
from pelayanan.database import Database
from pelayanan.main import create_app
from pelayanan.models.enums import NotificationChannel, SubmissionStatus
from pelayanan.models.submission import Submission
from pelayanan.repositories.submission_repository import submission_repository
from pelayanan.services.dispatcher_base import DispatchResult, NotificationDispatcher
from pelayanan.services.notification_service import NotificationDispatchers


# ══════════════════════════════════════════════════════════════════════════
# Fake notification channels
# ══════════════════════════════════════════════════════════════════════════

class FakeDispatcher(NotificationDispatcher):
    """
    In-memory channel that records every call.

    success: result reported by dispatch()
    raises:  exception raised by dispatch() instead of returning
    """

    def __init__(
        self,
        channel: NotificationChannel,
        success: bool = True,
        raises: Optional[Exception] = None,
    ):
        self.channel = channel
        self.success = success
        self.raises = raises
        self.calls: List[Tuple[Submission, SubmissionStatus]] = []

    def recipient(self, submission: Submission) -> Optional[str]:
        if self.channel == NotificationChannel.WHATSAPP:
            return submission.no_wa or None
        return (submission.email or "").strip() or None

    async def dispatch(self, submission: Submission, new_status: SubmissionStatus) -> DispatchResult:
        self.calls.append((submission, new_status))
        if self.raises is not None:
            raise self.raises
        if self.success:
            return DispatchResult(
                success=True,
                channel=self.channel,
                recipient=self.recipient(submission),
                detail={"fake": True},
            )
        return DispatchResult.failure(self.channel, "simulated failure", self.recipient(submission))


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_lookup(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = row
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing at a per-test SQLite file; no gateway, no SMTP."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'pelayanan_test.db'}",
        wa_gateway_url="",
        smtp_host="",
        db_connect_retries=1,
        db_connect_retry_wait=0,
    )


@pytest_asyncio.fixture
async def database(test_settings):
    """
    Real Database handle with all tables created.

    A file (not :memory:) so that the independent sessions used by the
    workflow see each other's committed rows.
    """
    db = Database.from_settings(test_settings)
    await db.create_tables()
    yield db
    await db.dispose()


@pytest.fixture
def submission_factory(database):
    """
    Inserts a submission and returns it.

    Usage:
        submission = await submission_factory(status=SubmissionStatus.DIPROSES, email="a@b.com")
    """
    counter = {"n": 0}

    async def _create(
        status: SubmissionStatus = SubmissionStatus.PENGAJUAN_BARU,
        email: Optional[str] = None,
        nik: str = "3201010101010001",
        no_wa: str = "081234567890",
    ) -> Submission:
        counter["n"] += 1
        async with database.session() as session:
            return await submission_repository.create(
                session,
                tracking_code=f"LYN-20261018-TEST{counter['n']:02d}",
                nama="Siti Aminah",
                nik=nik,
                email=email,
                no_wa=no_wa,
                jenis_layanan="Surat Keterangan Domisili",
                status=status,
            )

    return _create


@pytest.fixture
def whatsapp_dispatcher() -> FakeDispatcher:
    return FakeDispatcher(NotificationChannel.WHATSAPP)


@pytest.fixture
def email_dispatcher() -> FakeDispatcher:
    return FakeDispatcher(NotificationChannel.EMAIL)


@pytest.fixture
def dispatchers(whatsapp_dispatcher, email_dispatcher) -> NotificationDispatchers:
    return NotificationDispatchers(whatsapp_dispatcher, email_dispatcher)


@pytest_asyncio.fixture
async def test_client(database, dispatchers):
    """
    HTTPX AsyncClient wired to an app built around the test database and
    the fake dispatchers.

    raise_app_exceptions=False: unexpected errors come back as the 500
    response a real client would see.
    """
    app = create_app(database=database, dispatchers=dispatchers)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def stored_status(database):
    """Reads a submission's persisted status through a fresh session."""

    async def _read(submission_id) -> Optional[SubmissionStatus]:
        async with database.session() as session:
            submission = await submission_repository.get(session, submission_id)
            return submission.status if submission else None

    return _read


@pytest.fixture
def stored_logs(database):
    """Reads the notification log rows of a submission, oldest first."""

    async def _read(submission_id):
        async with database.session() as session:
            return await submission_repository.list_logs(session, submission_id)

    return _read
