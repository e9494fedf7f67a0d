"""
NameLoreAgent — DNS-конфигурации и проверка доступности доменов.

Реальной регистрации доменов нет: сервис реестра доменов внедряется
через конструктор. HttpDomainRegistry ходит во внешний HTTP-реестр,
по умолчанию используется детерминированный офлайн-мок.
Проверка доступности повторяется один раз при временном сетевом сбое.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Optional, Protocol

import httpx
from pydantic import BaseModel, Field

from ..core.base_agent import BaseCovenantAgent
from ..core.envelope import utc_now
from ..core.errors import InvalidInputError, TransientNetworkError
from ..core.retry import call_with_retry

logger = logging.getLogger(__name__)

NAME_LORE = "name-lore"

DNS_RECORD_TYPES = {"A", "AAAA", "CNAME", "MX", "TXT", "NS"}
_DOMAIN_RE = re.compile(r"^(?=.{1,253}$)([a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,63}$")


class DomainRegistryService(Protocol):
    """Протокол внешнего реестра доменов."""

    async def check_availability(self, domain: str) -> dict[str, Any]:
        ...


class OfflineDomainRegistry:
    """
    Запасной мок реестра доменов.

    Домены из `taken` считаются занятыми, для них предлагаются
    альтернативы в других зонах.
    """

    ALTERNATIVE_ZONES = ("net", "io")

    def __init__(self, taken: Iterable[str] = ()) -> None:
        self.taken = {d.lower() for d in taken}

    async def check_availability(self, domain: str) -> dict[str, Any]:
        available = domain not in self.taken
        stem = domain.rsplit(".", 1)[0]
        suggestions = [] if available else [f"{stem}.{zone}" for zone in self.ALTERNATIVE_ZONES]
        return {"domain": domain, "available": available, "suggestions": suggestions}


class HttpDomainRegistry:
    """
    HTTP-клиент внешнего реестра доменов.

    Ожидает эндпоинт `GET /availability?domain=...`, возвращающий JSON
    с полями `available` и (опционально) `suggestions`.

    Таймауты, сетевые сбои и ответы 5xx нормализуются в
    TransientNetworkError (их повторяет NameLoreAgent), ответы 4xx и
    некорректный JSON в InvalidInputError.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout_seconds)
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def check_availability(self, domain: str) -> dict[str, Any]:
        client = await self._get_client()
        try:
            response = await client.get("/availability", params={"domain": domain})
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise TransientNetworkError(f"Domain registry timeout: {e}") from e
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            if 500 <= status_code < 600:
                raise TransientNetworkError(
                    f"Domain registry returned HTTP {status_code}",
                    details={"status_code": status_code},
                ) from e
            raise InvalidInputError(
                f"Domain registry rejected '{domain}' with HTTP {status_code}",
                details={"status_code": status_code},
            ) from e
        except httpx.RequestError as e:
            raise TransientNetworkError(f"Domain registry unreachable: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise InvalidInputError("Domain registry returned invalid JSON") from e
        if not isinstance(data, dict):
            raise InvalidInputError("Domain registry returned unexpected payload")
        return data


class DomainAvailability(BaseModel):
    domain: str
    available: bool
    suggestion: list[str] = Field(default_factory=list)


class DnsRecord(BaseModel):
    type: str
    value: str
    created_at: str


class NameLoreAgent(BaseCovenantAgent):
    """
    Агент технической конфигурации доменов.

    Attributes:
        registry_service: Внешний реестр доменов.
        max_retries: Сколько раз повторять проверку при TransientNetworkError.
        retry_backoff_seconds: Базовая задержка между попытками.
    """

    def __init__(
        self,
        name: str,
        registry_service: Optional[DomainRegistryService] = None,
        max_retries: int = 1,
        retry_backoff_seconds: float = 0.0,
    ) -> None:
        super().__init__(
            name,
            capability=NAME_LORE,
            description="Manages DNS records and checks domain availability",
        )
        self.registry_service: DomainRegistryService = registry_service or OfflineDomainRegistry()
        self.max_retries = max_retries
        self.retry_backoff_seconds = retry_backoff_seconds
        self._dns: dict[str, list[DnsRecord]] = {}

    async def handle(self, task: str) -> dict[str, Any]:
        availability = await self.check_availability(task)
        return availability.model_dump()

    async def check_availability(self, domain: str) -> DomainAvailability:
        """
        Проверить доступность домена через внешний реестр.

        Raises:
            InvalidInputError: Некорректное имя домена или ответ реестра.
            TransientNetworkError: Если сбой повторился после всех попыток.
        """
        normalized = self._normalize_domain(domain)
        response = await call_with_retry(
            lambda: self.registry_service.check_availability(normalized),
            max_retries=self.max_retries,
            backoff_seconds=self.retry_backoff_seconds,
        )
        if "available" not in response:
            raise InvalidInputError(
                "Domain registry response has no 'available' field",
                details={"domain": normalized},
            )
        return DomainAvailability(
            domain=response.get("domain", normalized),
            available=bool(response["available"]),
            suggestion=list(response.get("suggestions") or []),
        )

    def create_dns_record(self, domain: str, record_type: str, value: str) -> DnsRecord:
        normalized = self._normalize_domain(domain)
        record_type = record_type.upper()
        if record_type not in DNS_RECORD_TYPES:
            raise InvalidInputError(
                f"Unsupported DNS record type '{record_type}'",
                details={"supported": sorted(DNS_RECORD_TYPES)},
            )
        if not value:
            raise InvalidInputError("DNS record value must not be empty")
        record = DnsRecord(type=record_type, value=value, created_at=utc_now().isoformat())
        self._dns.setdefault(normalized, []).append(record)
        logger.info("%s created %s record for %s -> %s", self.name, record_type, normalized, value)
        return record

    def list_configurations(self) -> dict[str, list[DnsRecord]]:
        return {domain: list(records) for domain, records in self._dns.items()}

    @staticmethod
    def _normalize_domain(domain: str) -> str:
        normalized = (domain or "").strip().lower()
        if not _DOMAIN_RE.match(normalized):
            raise InvalidInputError(f"Invalid domain name: {domain!r}")
        return normalized
