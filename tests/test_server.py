"""
HTTP-тесты FastAPI-приложения covenant-service.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from covenant_service.config import CovenantConfig
from covenant_service.divisions import DivisionRegistry
from covenant_service.server import create_app


@pytest.fixture
def app():
    config = CovenantConfig(boot_agents=True, retry_backoff_seconds=0.0, domain_registry_url=None)
    return create_app(config=config)


@pytest.fixture
def client(app):
    return TestClient(app)


class TestServiceEndpoints:
    """Health, метрики и capability."""

    def test_health(self, client):
        resp = client.get("/health")

        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
        assert resp.json()["agents"] == 5

    def test_capabilities(self, client):
        body = client.get("/capabilities").json()

        assert body["success"] is True
        assert "scribe" in body["data"]
        assert "timestamp" in body

    def test_metrics_after_delegation(self, client):
        client.post("/delegations", json={"task": "draft", "capability": "scribe"})

        resp = client.get("/metrics")

        assert resp.status_code == 200
        assert 'delegations_total{capability="scribe"} 1.0' in resp.text
        assert "registered_agents 5.0" in resp.text

    def test_metrics_disabled(self):
        config = CovenantConfig(boot_agents=False, enable_monitoring=False)
        client = TestClient(create_app(config=config))

        resp = client.get("/metrics")

        assert resp.text == "# monitoring disabled\n"

    def test_shutdown_closes_domain_registry(self):
        config = CovenantConfig(boot_agents=False, domain_registry_url="http://registry.test")
        app = create_app(config=config)
        registry = app.state.system.domain_registry

        with TestClient(app) as client:
            assert client.get("/health").status_code == 200
            registry._client = httpx.AsyncClient(base_url=registry.base_url)

        assert registry._client is None

    def test_apps_are_isolated(self, app):
        """Агенты одного приложения не видны другому."""
        TestClient(app).post("/agents", json={"capability": "fortress", "name": "Bastion"})
        other = TestClient(create_app(config=CovenantConfig(boot_agents=False)))

        assert other.get("/agents/Bastion").status_code == 404


class TestAgentEndpoints:
    """CRUD реестра и маппинг ошибок."""

    def test_spawn_then_conflict(self, client):
        payload = {"capability": "scribe", "name": "A", "args": {}}

        first = client.post("/agents", json=payload)
        second = client.post("/agents", json=payload)

        assert first.status_code == 201
        assert first.json()["data"]["name"] == "A"
        assert second.status_code == 409
        assert second.json()["success"] is False
        assert second.json()["error"] == "AlreadyExists"

    def test_get_missing_agent(self, client):
        resp = client.get("/agents/Ghost")

        assert resp.status_code == 404
        assert resp.json()["error"] == "NotFound"
        assert resp.json()["details"] == {
            "available": sorted(["Ironwall", "TechAdmin", "Lorekeeper", "Spymaster", "Gatewatcher"])
        }
        assert "timestamp" in resp.json()

    def test_spawn_unknown_capability(self, client):
        resp = client.post("/agents", json={"capability": "oracle", "name": "Seer"})

        assert resp.status_code == 400
        assert resp.json()["error"] == "UnknownCapability"

    def test_spawn_bad_args(self, client):
        resp = client.post(
            "/agents",
            json={"capability": "research", "name": "Scout", "args": {"latency_seconds": -1}},
        )

        assert resp.status_code == 400
        assert resp.json()["error"] == "InvalidInput"

    def test_validation_error_mapped(self, client):
        resp = client.post("/agents", json={"capability": "scribe"})

        assert resp.status_code == 400
        assert resp.json()["error"] == "InvalidInput"
        assert resp.json()["details"][0]["loc"] == ["body", "name"]

    def test_list_and_retire(self, client):
        names = [a["name"] for a in client.get("/agents").json()["data"]]
        assert names == sorted(["Ironwall", "TechAdmin", "Lorekeeper", "Spymaster", "Gatewatcher"])

        resp = client.delete("/agents/Ironwall")

        assert resp.status_code == 200
        assert client.get("/agents/Ironwall").status_code == 404
        assert client.delete("/agents/Ironwall").status_code == 404


class TestDelegationEndpoint:
    def test_delegate_to_booted_agent(self, client):
        resp = client.post("/delegations", json={"task": "draft a report", "capability": "scribe"})

        body = resp.json()
        assert resp.status_code == 200
        assert body["success"] is True
        assert body["data"]["action"] == "assistantDelegation"
        assert body["data"]["source"] == "Genesis"
        assert body["data"]["payload"]["task"] == "draft a report"
        assert body["data"]["payload"]["handled_by"] == "Lorekeeper"

    def test_unknown_capability_is_data(self, client):
        """Неизвестная capability не меняет HTTP-статус."""
        resp = client.post("/delegations", json={"task": "appraise", "capability": "valuation"})

        body = resp.json()
        assert resp.status_code == 200
        assert body["success"] is False
        assert "UnknownCapability" in body["data"]["payload"]["result"]


class TestDivisionEndpoints:
    def test_list_divisions(self, client):
        body = client.get("/divisions").json()

        assert len(body["data"]) == 8

    def test_division_detail_includes_samples(self, client):
        body = client.get("/divisions/real-estate").json()

        assert body["data"]["division"]["id"] == "real-estate"
        assert [e["name"] for e in body["data"]["entities"]] == ["Dragon Properties LLC"]

    def test_create_and_fetch_entity(self, client):
        resp = client.post(
            "/entities",
            json={
                "division_id": "education",
                "name": "Oak Academy",
                "jurisdiction": "Oregon",
                "entity_type": "Nonprofit",
            },
        )

        assert resp.status_code == 201
        entity_id = resp.json()["data"]["id"]
        assert client.get(f"/entities/{entity_id}").json()["data"]["name"] == "Oak Academy"

    def test_create_entity_unknown_division(self, client):
        resp = client.post(
            "/entities",
            json={"division_id": "space", "name": "X", "jurisdiction": "Y", "entity_type": "Z"},
        )

        assert resp.status_code == 404

    def test_search_and_update(self, client):
        found = client.get("/entities", params={"search": "oak"}).json()
        assert found["count"] == 1
        entity_id = found["data"][0]["id"]

        resp = client.put(f"/entities/{entity_id}", json={"status": "Dormant"})

        assert resp.json()["data"]["status"] == "Dormant"
        assert client.get("/entities", params={"status": "Dormant"}).json()["count"] == 1

    def test_activities(self, client):
        entity_id = client.get("/entities", params={"search": "dragon"}).json()["data"][0]["id"]

        resp = client.post(
            f"/entities/{entity_id}/activities",
            json={"type": "deed", "description": "Deed sealed"},
        )
        listed = client.get(f"/entities/{entity_id}/activities", params={"limit": 1}).json()

        assert resp.status_code == 201
        assert listed["total"] == 2
        assert listed["data"][0]["type"] == "deed"

    def test_stats(self, client):
        body = client.get("/stats").json()

        assert body["data"]["total_entities"] == 3

    def test_export_import(self, client):
        exported = client.get("/divisions/self-banking/export").json()["data"]
        other_app = create_app(config=CovenantConfig(boot_agents=False))
        other_app.state.divisions = DivisionRegistry()

        resp = TestClient(other_app).post("/divisions/import", json=exported)

        assert resp.status_code == 201
        assert resp.json()["data"]["entities_imported"] == 1


class TestProductEndpoints:
    def test_search_requires_query(self, client):
        assert client.get("/products").json()["data"] == []
        assert [p["sku"] for p in client.get("/products", params={"search": "mug"}).json()["data"]] == [
            "MUG001"
        ]

    def test_create_conflict(self, client):
        payload = {"name": "Oak Candle", "sku": "CANDLE001", "price": 9.5}

        assert client.post("/products", json=payload).status_code == 201
        resp = client.post("/products", json=payload)

        assert resp.status_code == 409
        assert resp.json()["error"] == "AlreadyExists"

    def test_get_by_sku(self, client):
        assert client.get("/products/DIGI001").json()["data"]["name"] == "Digital Download"

        resp = client.get("/products/NOPE")

        assert resp.status_code == 404
        assert resp.json()["error"] == "NotFound"

    def test_update_and_delete(self, client):
        assert client.put("/products/MUG001", json={"price": 14}).json()["data"]["price"] == 14
        assert client.put("/products/NOPE", json={"price": 1}).status_code == 404
        assert client.delete("/products/MUG001").status_code == 200
        assert client.delete("/products/MUG001").status_code == 404


class TestBankingEndpoints:
    def test_transfer(self, client):
        resp = client.post("/banking/transfer", json={"from": "main", "to": "reserve", "amount": 100})

        assert resp.status_code == 200
        assert resp.json()["data"]["to"]["balance"] == 200_100
        assert client.get("/banking/dashboard").json()["data"]["reserve"] == 200_100

    def test_insufficient_funds(self, client):
        resp = client.post(
            "/banking/transfer",
            json={"from": "reserve", "to": "main", "amount": 10_000_000},
        )

        assert resp.status_code == 400
        assert resp.json()["error"] == "InvalidInput"
        assert resp.json()["message"] == "Insufficient funds"

    def test_accounts_lifecycle(self, client):
        assert client.post("/banking/accounts", json={"id": "ops", "name": "Ops"}).status_code == 201
        assert client.post("/banking/accounts", json={"id": "ops", "name": "Ops"}).status_code == 409
        assert client.post("/banking/accounts/ops/close").json()["data"]["status"] == "closed"
        assert client.post("/banking/accounts/ghost/close").status_code == 404

        audit = client.get("/banking/audit").json()["data"]
        assert audit[-1]["type"] == "account-close"

    def test_loans(self, client):
        resp = client.post("/banking/loans", json={"id": "1003", "amount": 5_000})

        assert resp.status_code == 201
        assert resp.json()["data"]["status"] == "active"
        assert [loan["id"] for loan in client.get("/banking/loans").json()["data"]] == ["1001", "1002", "1003"]
        assert client.get("/banking/audit").json()["data"][-1]["type"] == "loan-create"
        assert len(client.get("/banking/dashboard").json()["data"]["loans"]) == 3

    def test_loan_requires_id_and_amount(self, client):
        for payload in ({"amount": 100}, {"id": "1004"}, {"id": "1004", "amount": 0}):
            resp = client.post("/banking/loans", json=payload)

            assert resp.status_code == 400
            assert resp.json()["error"] == "InvalidInput"
        assert client.post("/banking/loans", json={"id": "1001", "amount": 1}).status_code == 409


class TestUnhandledErrors:
    def test_internal_error(self, app):
        @app.get("/boom")
        async def boom():
            raise RuntimeError("kaboom")

        client = TestClient(app, raise_server_exceptions=False)

        resp = client.get("/boom")

        assert resp.status_code == 500
        assert resp.json()["error"] == "Internal"
        assert "kaboom" in resp.json()["message"]
