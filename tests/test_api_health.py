"""Tests for health check endpoints."""

from httpx import AsyncClient

from professordex.main import app


class TestHealth:
    async def test_health(self, client: AsyncClient) -> None:
        """Liveness does not touch the database."""
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": None}

    async def test_ready(self, client: AsyncClient) -> None:
        response = await client.get("/ready")

        assert response.status_code == 200
        assert response.json() == {"status": "ready", "database": "connected"}

    def test_app_title(self) -> None:
        assert app.title == "ProfessorDex"
