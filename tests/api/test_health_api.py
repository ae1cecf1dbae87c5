"""Tests for health and activity endpoints."""

from httpx import AsyncClient

from fulfillment import __version__


class TestHealthAPI:
    async def test_root_health(self, api_client: AsyncClient):
        response = await api_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": __version__}

    async def test_api_health_reports_uptime(self, api_client: AsyncClient):
        response = await api_client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["uptime_seconds"] >= 0

    async def test_request_id_header(self, api_client: AsyncClient):
        response = await api_client.get("/api/health")

        assert len(response.headers["X-Request-ID"]) == 8
        assert "X-Response-Time" in response.headers


class TestActivityAPI:
    async def test_lists_recorded_events(self, api_client: AsyncClient):
        await api_client.post("/api/products", json={"name": "Cable", "sku": "CBL-1", "initial_stock": 4})

        response = await api_client.get("/api/activity", params={"limit": 1})

        assert response.status_code == 200
        events = response.json()
        assert [e["name"] for e in events] == ["product.created"]
        assert events[0]["payload"]["stock"] == 4

    async def test_empty_without_sink(self, mock_client: AsyncClient, mock_engine):
        mock_engine.sink = None

        response = await mock_client.get("/api/activity")

        assert response.status_code == 200
        assert response.json() == []
