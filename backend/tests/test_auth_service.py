"""
Pelayanan Backend — Admin Authentication Tests
================================================

What we test:
    ✅ bcrypt hashing and verification
    ✅ JWT issue/decode round trip and rejection of tampered tokens
    ✅ Login by username or email through POST /api/admin/login
    ✅ The create_admin script is idempotent
    ✅ An admin row cannot be stored without an email
"""

import uuid

import pytest
from sqlalchemy.exc import IntegrityError

from pelayanan.exceptions import AuthenticationError
from pelayanan.models.admin import Admin
from pelayanan.repositories.admin_repository import admin_repository
from pelayanan.scripts.create_admin import create_admin
from pelayanan.services.auth_service import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


@pytest.fixture
def admin_factory(database):
    async def _create(username="admin", email="admin@diskominfo-bogor.go.id", password="admin123"):
        async with database.session() as session:
            return await admin_repository.create(session, username, email, hash_password(password))

    return _create


class TestPasswords:

    def test_hash_and_verify(self):
        hashed = hash_password("rahasia")
        assert hashed != "rahasia"
        assert verify_password("rahasia", hashed)
        assert not verify_password("salah", hashed)

    def test_non_bcrypt_value_never_verifies(self):
        assert verify_password("admin123", "admin123") is False


class TestTokens:

    def test_round_trip(self):
        admin = Admin(id=uuid.uuid4(), username="petugas", email="p@example.go.id", password="x")

        claims = decode_access_token(create_access_token(admin))

        assert claims["sub"] == str(admin.id)
        assert claims["username"] == "petugas"

    def test_tampered_token_rejected(self):
        admin = Admin(id=uuid.uuid4(), username="petugas", email="p@example.go.id", password="x")
        token = create_access_token(admin)

        with pytest.raises(AuthenticationError):
            decode_access_token(token[:-4] + "abcd")


class TestLoginRoute:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("login", ["admin", "admin@diskominfo-bogor.go.id"])
    async def test_login_success(self, test_client, admin_factory, login):
        admin = await admin_factory()

        response = await test_client.post(
            "/api/admin/login",
            json={"username": login, "password": "admin123"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["admin"] == {
            "id": str(admin.id),
            "username": "admin",
            "email": "admin@diskominfo-bogor.go.id",
        }
        assert "password" not in data["admin"]
        assert decode_access_token(data["access_token"])["sub"] == str(admin.id)

    @pytest.mark.asyncio
    async def test_wrong_password(self, test_client, admin_factory):
        await admin_factory()

        response = await test_client.post(
            "/api/admin/login",
            json={"username": "admin", "password": "tebakan"},
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Username atau password salah"

    @pytest.mark.asyncio
    async def test_unknown_user_same_message(self, test_client):
        response = await test_client.post(
            "/api/admin/login",
            json={"username": "siapa", "password": "admin123"},
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Username atau password salah"

    @pytest.mark.asyncio
    async def test_missing_fields(self, test_client):
        response = await test_client.post("/api/admin/login", json={"username": "admin"})

        assert response.status_code == 400
        assert response.json()["message"] == "Username dan password wajib diisi"


class TestCreateAdminScript:

    @pytest.mark.asyncio
    async def test_idempotent(self, database):
        assert await create_admin(database, "admin", "admin@example.go.id", "admin123") is True
        assert await create_admin(database, "admin", "admin@example.go.id", "other") is False

        async with database.session() as session:
            assert await admin_repository.count(session) == 1
            admin = await admin_repository.get_by_login(session, "admin@example.go.id")
        assert verify_password("admin123", admin.password)

    @pytest.mark.asyncio
    async def test_admin_email_is_required(self, database):
        with pytest.raises(IntegrityError):
            async with database.session() as session:
                session.add(Admin(username="tanpa-email", password=hash_password("x")))
                await session.flush()
