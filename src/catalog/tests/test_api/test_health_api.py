import uuid

import httpx
import pytest


@pytest.mark.asyncio
class TestHealth:
    async def test_health(self, client: httpx.AsyncClient):
        resp = await client.get("/api/v1/health")

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "OK"
        assert body["api_version"] == "v1"
        assert body["environment"] == "testing"
        assert body["uptime"] >= 0
        assert "timestamp" in body

    async def test_api_info_lists_endpoints(self, client: httpx.AsyncClient):
        resp = await client.get("/api/v1/")

        assert resp.status_code == 200
        body = resp.json()
        assert body["api_versions"]["current"] == "v1"
        assert body["endpoints"]["v1"]["products"] == "/api/v1/products"


@pytest.mark.asyncio
class TestRequestId:
    """
    The request-id middleware echoes a well-formed incoming X-Request-ID and
    generates a fresh UUID otherwise.
    """

    async def test_incoming_id_is_echoed(self, client: httpx.AsyncClient):
        resp = await client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})
        assert resp.headers["X-Request-ID"] == "req-123"

    async def test_malformed_id_is_replaced(self, client: httpx.AsyncClient):
        resp = await client.get("/api/v1/health", headers={"X-Request-ID": "not valid!"})

        rid = resp.headers["X-Request-ID"]
        assert rid != "not valid!"
        uuid.UUID(rid)

    async def test_error_responses_carry_request_id(self, client: httpx.AsyncClient):
        resp = await client.get(f"/api/v1/products/{uuid.uuid4()}")

        assert resp.status_code == 404
        assert "X-Request-ID" in resp.headers
