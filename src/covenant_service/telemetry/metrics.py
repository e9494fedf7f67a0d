from __future__ import annotations

from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)


class BaseMetrics:
    """Интерфейс метрик делегирования."""

    def inc_delegation(self, capability: str) -> None:
        raise NotImplementedError

    def inc_delegation_error(self, capability: str, error_type: str) -> None:
        raise NotImplementedError

    def observe_latency(self, capability: str, seconds: float) -> None:
        raise NotImplementedError

    def set_registered_agents(self, count: int) -> None:
        raise NotImplementedError

    def render(self) -> tuple[str, str]:
        """
        Вернуть сериализованные метрики и MIME-тип.
        """
        raise NotImplementedError


class NullMetrics(BaseMetrics):
    """Пустая реализация, когда мониторинг выключен."""

    def inc_delegation(self, capability: str) -> None:  # pragma: no cover - простая заглушка
        return None

    def inc_delegation_error(self, capability: str, error_type: str) -> None:  # pragma: no cover - простая заглушка
        return None

    def observe_latency(self, capability: str, seconds: float) -> None:  # pragma: no cover - простая заглушка
        return None

    def set_registered_agents(self, count: int) -> None:  # pragma: no cover - простая заглушка
        return None

    def render(self) -> tuple[str, str]:
        return "# monitoring disabled\n", "text/plain"


class CovenantMetrics(BaseMetrics):
    """
    Prometheus-метрики covenant-service.

    Экспортирует:
    - delegations_total{capability}
    - delegation_errors_total{capability,error_type}
    - delegation_latency_seconds{capability}
    - registered_agents (gauge)
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self.registry = registry or CollectorRegistry()
        self.delegations_total = Counter(
            "delegations_total",
            "Total number of task delegations.",
            ["capability"],
            registry=self.registry,
        )
        self.delegation_errors_total = Counter(
            "delegation_errors_total",
            "Total number of failed delegations by error type.",
            ["capability", "error_type"],
            registry=self.registry,
        )
        self.delegation_latency_seconds = Histogram(
            "delegation_latency_seconds",
            "Latency of capability handlers in seconds.",
            ["capability"],
            registry=self.registry,
            buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10),
        )
        self.registered_agents = Gauge(
            "registered_agents",
            "Number of agents currently held by the registry.",
            registry=self.registry,
        )

    def inc_delegation(self, capability: str) -> None:
        self.delegations_total.labels(capability=capability).inc()

    def inc_delegation_error(self, capability: str, error_type: str) -> None:
        self.delegation_errors_total.labels(capability=capability, error_type=error_type).inc()

    def observe_latency(self, capability: str, seconds: float) -> None:
        self.delegation_latency_seconds.labels(capability=capability).observe(seconds)

    def set_registered_agents(self, count: int) -> None:
        self.registered_agents.set(count)

    def render(self) -> tuple[str, str]:
        body = generate_latest(self.registry).decode("utf-8")
        return body, CONTENT_TYPE_LATEST
