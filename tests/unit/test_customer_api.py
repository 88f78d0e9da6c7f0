"""HTTP-level tests: routing, envelope and error mapping.

The router's service is swapped for one backed by in-memory fakes and the DB
session dependency is overridden, so no PostgreSQL/Redis is needed.
"""

import uuid
from unittest.mock import AsyncMock

import pytest

from src.cs_common.database import get_db_session
from src.cs_common.errors import StoreUnavailableError
from src.cs_customer.application.service import CustomerService
from src.main import app
from tests.unit.fakes import FakeSession

BASE = "/api/v1/customers"


@pytest.fixture(autouse=True)
def wired(monkeypatch, repo, cache):
    service = CustomerService(repo=repo, cache=cache)
    monkeypatch.setattr("src.cs_customer.api.router._service", service)

    async def _session():
        yield FakeSession()

    app.dependency_overrides[get_db_session] = _session
    yield service
    app.dependency_overrides.clear()


async def _create(client, tenant="t1", email="alice@example.com", **extra):
    body = {"tenant_id": tenant, "email": email, "password": "Secret123", **extra}
    return await client.post(BASE, json=body)


class TestCreate:
    async def test_created_with_envelope(self, client):
        resp = await _create(client, full_name="Alice", address={"city": "Oxford"})

        assert resp.status_code == 201
        body = resp.json()
        assert body["code"] == 0
        assert body["data"]["email"] == "alice@example.com"
        assert body["data"]["address"] == {"city": "Oxford"}
        assert "password" not in body["data"]
        assert "password_hash" not in body["data"]
        assert body["request_id"] == resp.headers["X-Request-ID"]

    async def test_duplicate_is_409(self, client):
        await _create(client)
        resp = await _create(client)

        assert resp.status_code == 409
        assert resp.json()["code"] == 2002
        assert resp.json()["data"] is None

    async def test_missing_required_fields_is_400(self, client):
        resp = await client.post(BASE, json={"email": "a@example.com"})

        assert resp.status_code == 400
        body = resp.json()
        assert body["code"] == 1001
        assert "tenant_id" in body["message"]
        assert "password" in body["message"]


class TestList:
    async def test_requires_tenant(self, client):
        resp = await client.get(BASE)
        assert resp.status_code == 400
        assert resp.json()["message"] == "tenant_id is required"

    async def test_shape(self, client):
        await _create(client)
        resp = await client.get(BASE, params={"tenant_id": "t1", "search": "ALI"})

        data = resp.json()["data"]
        assert resp.status_code == 200
        assert set(data) == {"customers", "total", "limit", "offset"}
        assert data["total"] == 1
        assert data["limit"] == 50

    async def test_non_integer_limit_is_400(self, client):
        resp = await client.get(BASE, params={"tenant_id": "t1", "limit": "lots"})
        assert resp.status_code == 400
        assert resp.json()["code"] == 1000


    async def test_offset_beyond_bigint_is_400(self, client, repo):
        resp = await client.get(BASE, params={"tenant_id": "t1", "offset": str(2**63)})

        assert resp.status_code == 400
        assert resp.json()["code"] == 1003
        assert repo.calls == []


class TestGetAndUpdate:
    async def test_get_round_trip(self, client):
        created = (await _create(client)).json()["data"]

        resp = await client.get(f"{BASE}/{created['id']}", params={"tenant_id": "t1"})

        assert resp.status_code == 200
        assert resp.json()["data"]["loyalty_points"] == 0

    async def test_get_other_tenant_is_404(self, client):
        created = (await _create(client)).json()["data"]
        resp = await client.get(f"{BASE}/{created['id']}", params={"tenant_id": "t2"})
        assert resp.status_code == 404
        assert resp.json()["code"] == 2001

    async def test_malformed_id_is_400(self, client):
        resp = await client.get(f"{BASE}/not-a-uuid", params={"tenant_id": "t1"})
        assert resp.status_code == 400

    async def test_partial_update(self, client):
        created = (await _create(client, full_name="Alice")).json()["data"]

        resp = await client.put(
            f"{BASE}/{created['id']}", json={"tenant_id": "t1", "loyalty_points": 12}
        )

        data = resp.json()["data"]
        assert resp.status_code == 200
        assert data["loyalty_points"] == 12
        assert data["full_name"] == "Alice"

    async def test_update_without_fields_is_400(self, client):
        created = (await _create(client)).json()["data"]
        resp = await client.put(f"{BASE}/{created['id']}", json={"tenant_id": "t1"})
        assert resp.status_code == 400
        assert resp.json()["code"] == 1002

    async def test_update_rejects_non_whitelisted_field(self, client):
        created = (await _create(client)).json()["data"]
        resp = await client.put(
            f"{BASE}/{created['id']}",
            json={"tenant_id": "t1", "password_hash": "x"},
        )
        assert resp.status_code == 400

    async def test_update_unknown_customer_is_404(self, client):
        resp = await client.put(
            f"{BASE}/{uuid.uuid4()}", json={"tenant_id": "t1", "phone": "1"}
        )
        assert resp.status_code == 404


class TestStats:
    async def test_stats_shape(self, client):
        await _create(client)
        resp = await client.get(f"{BASE}/stats/t1")

        assert resp.status_code == 200
        assert resp.json()["data"] == {
            "total_customers": 1,
            "total_loyalty_points": 0,
            "avg_loyalty_points": 0.0,
        }


class TestFailures:
    async def test_store_outage_is_503(self, client, wired, repo):
        repo.get_stats = AsyncMock(side_effect=StoreUnavailableError())
        resp = await client.get(f"{BASE}/stats/t1")
        assert resp.status_code == 503
        assert resp.json()["code"] == 9003

    async def test_unexpected_error_is_generic_500(self, client, repo):
        repo.get_stats = AsyncMock(
            side_effect=RuntimeError("SELECT secret FROM customers exploded")
        )
        resp = await client.get(f"{BASE}/stats/t1")

        assert resp.status_code == 500
        assert resp.json()["code"] == 9002
        assert "SELECT" not in resp.text
