import pytest

from httpx import ASGITransport, AsyncClient

from app.main import app


class TestCORSMiddleware:
    """Verify that CORS headers are present on responses."""

    @pytest.mark.asyncio
    async def test_cors_headers_on_preflight(self, async_client):
        """OPTIONS request should return Access-Control-Allow-Origin."""
        response = await async_client.options(
            "/api/health",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert "access-control-allow-origin" in response.headers

    @pytest.mark.asyncio
    async def test_cors_headers_on_get(self, async_client):
        """GET requests should echo the configured origin, not a wildcard."""
        response = await async_client.get(
            "/api/health", headers={"Origin": "http://localhost:3000"}
        )
        assert response.status_code == 200
        assert (
            response.headers.get("access-control-allow-origin")
            == "http://localhost:3000"
        )


class TestHealthEndpoint:
    @pytest.mark.asyncio
    async def test_health_returns_ok(self):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/health")
            assert response.status_code == 200
            assert response.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_public_config_has_no_service_role_key(self, async_client):
        response = await async_client.get("/api/config")
        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"supabase_url", "supabase_anon_key"}


class TestUnknownRoutes:
    @pytest.mark.asyncio
    async def test_unknown_path_uses_error_envelope(self, async_client):
        response = await async_client.get("/api/does-not-exist")
        assert response.status_code == 404
        body = response.json()
        assert body["type"] == "http_error"
        assert "error" in body
