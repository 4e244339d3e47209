"""
Pelayanan Backend — Health Endpoint Tests
"""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from pelayanan.database import Database


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "connected"

    @pytest.mark.asyncio
    async def test_database_down(self, test_client):
        unreachable = AsyncMock(side_effect=OperationalError("SELECT 1", {}, Exception("down")))

        with patch.object(Database, "ping", new=unreachable):
            response = await test_client.get("/health")

        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"
