"""
Tests for the application shell: health probes, envelopes, middleware
"""

import asyncio

import pytest
from httpx import AsyncClient

from app.config import settings


class TestHealth:
    """Test suite for health and info endpoints"""

    @pytest.mark.asyncio
    async def test_root(self, client: AsyncClient):
        response = await client.get("/")
        assert response.status_code == 200
        assert response.json()["name"] == settings.APP_NAME

    @pytest.mark.asyncio
    async def test_liveness(self, client: AsyncClient):
        response = await client.get("/api/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    @pytest.mark.asyncio
    async def test_readiness_checks_database(self, client: AsyncClient):
        response = await client.get("/api/health/ready")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert body["checks"]["database"] is True

    @pytest.mark.asyncio
    async def test_metrics_exposed(self, client: AsyncClient):
        await client.get("/api/health/live")
        response = await client.get("/metrics/")
        assert response.status_code == 200
        assert "explorer_requests_total" in response.text


class TestMiddleware:
    """Request tracking, CORS and timeouts"""

    @pytest.mark.asyncio
    async def test_request_tracking_headers(self, client: AsyncClient):
        response = await client.get("/api/health/live")
        assert "X-Request-ID" in response.headers
        assert float(response.headers["X-Process-Time"]) >= 0

    @pytest.mark.asyncio
    async def test_cors_allows_frontend_origin(self, client: AsyncClient):
        response = await client.options(
            "/api/stations",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "GET"
            }
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"

    @pytest.mark.asyncio
    async def test_slow_request_times_out(self, client: AsyncClient, monkeypatch):
        from app.services.station_service import station_service

        async def slow_list(db, descending=False):
            await asyncio.sleep(0.3)
            return []

        monkeypatch.setattr(settings, "REQUEST_TIMEOUT_SECONDS", 0.05)
        monkeypatch.setattr(station_service, "list_stations", slow_list)

        response = await client.get("/api/stations")
        assert response.status_code == 504
        assert response.json()["error"] == "Request timed out"


class TestErrorEnvelope:
    """Every failure uses the {error} envelope"""

    @pytest.mark.asyncio
    async def test_unknown_route(self, client: AsyncClient):
        response = await client.get("/api/nothing/here/at/all")
        assert response.status_code == 404
        assert "error" in response.json()

    @pytest.mark.asyncio
    async def test_malformed_json_body(self, client: AsyncClient):
        response = await client.post(
            "/api/places",
            content=b"{not json",
            headers={"content-type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Request body must be valid JSON"

    @pytest.mark.asyncio
    async def test_non_integer_id(self, client: AsyncClient):
        response = await client.delete("/api/places/abc")
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,path", [
        ("GET", "/api/places/detail/99999999999999999999"),
        ("PUT", "/api/places/99999999999999999999"),
        ("DELETE", "/api/places/99999999999999999999"),
        ("GET", "/api/reviews/place/99999999999999999999"),
        ("DELETE", "/api/reviews/99999999999999999999"),
        ("PUT", "/api/events/99999999999999999999"),
        ("DELETE", "/api/events/99999999999999999999"),
    ])
    async def test_out_of_range_id_is_rejected(self, client: AsyncClient, stations, method, path):
        body = {"name": "A", "station_id": "N8", "place_id": 1, "event_date": "2025-10-01", "title": "T"}
        response = await client.request(method, path, json=body)
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_review_for_out_of_range_place_is_rejected(self, client: AsyncClient, notifier):
        response = await client.post(
            "/api/places/99999999999999999999/reviews",
            json={"user": "Ploy", "rating": 5, "comment": "Great"}
        )
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert notifier.messages == []

    @pytest.mark.asyncio
    async def test_event_for_out_of_range_place_is_rejected(self, client: AsyncClient):
        response = await client.post("/api/events/add", json={
            "place_id": 99999999999999999999,
            "event_date": "2025-10-01",
            "title": "Fair"
        })
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestMetricsLabels:
    """Request metrics are labelled by route template"""

    @pytest.mark.asyncio
    async def test_ids_do_not_create_new_series(self, client: AsyncClient):
        await client.get("/api/places/detail/4242")
        response = await client.get("/metrics/")
        assert 'endpoint="/api/places/detail/{place_id}"' in response.text
        assert "/api/places/detail/4242" not in response.text

    @pytest.mark.asyncio
    async def test_unknown_paths_share_one_label(self, client: AsyncClient):
        await client.get("/no/such/ghost-route")
        response = await client.get("/metrics/")
        assert 'endpoint="unmatched"' in response.text
        assert "ghost-route" not in response.text
