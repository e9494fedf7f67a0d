"""
Тесты встроенных обработчиков capability.
"""

import httpx
import pytest

pytestmark = pytest.mark.anyio

from covenant_service.capabilities import (
    ComplianceCheckAgent,
    DeepResearchAgent,
    FortressAgent,
    HttpDomainRegistry,
    NameLoreAgent,
    OfflineDomainRegistry,
    ScrollscribeAgent,
)
from covenant_service.core import ContextBinder, InvalidInputError, TransientNetworkError


class TestScrollscribe:
    """Черновики документов и символический контекст."""

    async def test_default_tone(self):
        agent = ScrollscribeAgent("Lorekeeper")

        draft = await agent.handle("quarterly report")

        assert draft.startswith("--- Standard Document ---")
        assert "Topic: quarterly report" in draft
        assert "Formal tone" in draft
        assert draft.endswith("--- END DRAFT ---")

    def test_initiation_rite(self):
        binder = ContextBinder()
        binder.bind("s1", rite="initiation")
        agent = ScrollscribeAgent("Lorekeeper", context_binder=binder)

        draft = agent.draft_content("oath", session_id="s1")

        assert "Rite of Initiation Scroll" in draft
        assert "Mythic and Solemn" in draft

    def test_sigil_overrides_rite(self):
        """Сигил emberward перекрывает обряд."""
        binder = ContextBinder()
        binder.bind("s1", rite="initiation", sigil="emberward")
        agent = ScrollscribeAgent("Lorekeeper", context_binder=binder, session_id="s1")

        draft = agent.draft_content("budget")

        assert "Emberward Finance Directive" in draft
        assert "Urgent and Financial" in draft


class TestContextBinder:
    def test_unknown_session_is_empty(self):
        assert ContextBinder().get("missing").is_empty

    def test_bind_and_clear(self):
        binder = ContextBinder()
        ctx = binder.bind("s1", sigil="wyrmroot", lineage="oak")

        assert ctx.extras == {"lineage": "oak"}
        binder.clear("s1")
        assert binder.get("s1").is_empty

    def test_empty_session_id(self):
        with pytest.raises(ValueError):
            ContextBinder().bind("", rite="initiation")


class TestDeepResearch:
    async def test_research(self):
        agent = DeepResearchAgent("Spymaster")

        result = await agent.handle("market trends")

        assert result == "[Data Retrieved] Results for query: market trends"
        assert agent.last_query == "market trends"
        assert agent.last_result == result

    def test_aggregate_and_anomalies(self):
        agent = DeepResearchAgent("Spymaster")
        data = [{"v": 1}, {"v": 2, "anomaly": True}, {"v": 3, "anomaly": "yes"}]

        assert agent.aggregate(data) == "Aggregated 3 data points."
        assert agent.detect_anomalies(data) == [{"v": 2, "anomaly": True}]

    def test_negative_latency(self):
        with pytest.raises(ValueError):
            DeepResearchAgent("Spymaster", latency_seconds=-1)


class TestComplianceCheck:
    async def test_compliant(self):
        agent = ComplianceCheckAgent("Gatewatcher")

        report = await agent.handle("acquire licensed parcel")

        assert report == {"subject": "acquire licensed parcel", "compliant": True, "issues": []}

    def test_blocked_terms(self):
        agent = ComplianceCheckAgent("Gatewatcher", blocked_terms=["Offshore"])

        report = agent.check("offshore shell company")

        assert report["compliant"] is False
        assert report["issues"] == ["Blocked term found: offshore"]
        assert agent.reports == [report]


class TestFortress:
    async def test_protocol_and_breach(self):
        agent = FortressAgent("Ironwall")

        assert await agent.handle("Lockdown") == "Protocol Activated: Lockdown"
        assert agent.report_breach("gate 3") == "SECURITY ALERT: Breach reported - gate 3"
        assert agent.security_log == [
            "Protocol Activated: Lockdown",
            "SECURITY ALERT: Breach reported - gate 3",
        ]


class FlakyDomainRegistry:
    """Падает TransientNetworkError заданное число раз."""

    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls = 0

    async def check_availability(self, domain: str) -> dict:
        self.calls += 1
        if self.calls <= self.failures:
            raise TransientNetworkError("registry unreachable")
        return {"domain": domain, "available": True}


class TestNameLore:
    """Проверка доменов и DNS-записи."""

    async def test_available_domain(self):
        agent = NameLoreAgent("TechAdmin")

        result = await agent.handle("OakDragon.com")

        assert result == {"domain": "oakdragon.com", "available": True, "suggestion": []}

    async def test_taken_domain_suggestions(self):
        agent = NameLoreAgent("TechAdmin", registry_service=OfflineDomainRegistry(["oakdragon.com"]))

        result = await agent.check_availability("oakdragon.com")

        assert result.available is False
        assert result.suggestion == ["oakdragon.net", "oakdragon.io"]

    async def test_invalid_domain(self):
        with pytest.raises(InvalidInputError):
            await NameLoreAgent("TechAdmin").check_availability("not a domain")

    async def test_retries_once_on_transient_failure(self):
        service = FlakyDomainRegistry(failures=1)
        agent = NameLoreAgent("TechAdmin", registry_service=service)

        result = await agent.check_availability("oak.io")

        assert result.available is True
        assert service.calls == 2

    async def test_gives_up_after_second_failure(self):
        service = FlakyDomainRegistry(failures=2)
        agent = NameLoreAgent("TechAdmin", registry_service=service)

        with pytest.raises(TransientNetworkError):
            await agent.check_availability("oak.io")
        assert service.calls == 2

    def test_dns_records(self):
        agent = NameLoreAgent("TechAdmin")

        record = agent.create_dns_record("oak.io", "cname", "edge.oak.io")

        assert record.type == "CNAME"
        assert agent.list_configurations() == {"oak.io": [record]}

    def test_dns_record_bad_type(self):
        with pytest.raises(InvalidInputError, match="Unsupported DNS record type"):
            NameLoreAgent("TechAdmin").create_dns_record("oak.io", "SRVX", "x")


def _http_registry(handler) -> HttpDomainRegistry:
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        base_url="http://registry.test",
    )
    return HttpDomainRegistry("http://registry.test", client=client)


class TestHttpDomainRegistry:
    """HTTP-клиент реестра доменов и нормализация ошибок."""

    async def test_success(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/availability"
            assert request.url.params["domain"] == "oak.io"
            return httpx.Response(200, json={"available": False, "suggestions": ["oak.net"]})

        data = await _http_registry(handler).check_availability("oak.io")

        assert data == {"available": False, "suggestions": ["oak.net"]}

    async def test_server_error_is_transient(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json={"error": "maintenance"})

        with pytest.raises(TransientNetworkError):
            await _http_registry(handler).check_availability("oak.io")

    async def test_client_error_is_invalid_input(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(422, json={"error": "bad domain"})

        with pytest.raises(InvalidInputError):
            await _http_registry(handler).check_availability("oak.io")

    async def test_connection_error_retried_by_agent(self):
        """Сетевой сбой повторяется NameLoreAgent ровно один раз."""
        calls = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            if calls["n"] == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"available": True})

        agent = NameLoreAgent("TechAdmin", registry_service=_http_registry(handler))

        result = await agent.check_availability("oak.io")

        assert result.available is True
        assert result.domain == "oak.io"
        assert calls["n"] == 2

    async def test_missing_available_field(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"status": "unknown"})

        agent = NameLoreAgent("TechAdmin", registry_service=_http_registry(handler))

        with pytest.raises(InvalidInputError, match="no 'available' field"):
            await agent.check_availability("oak.io")
