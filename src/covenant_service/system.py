"""
CovenantSystem — контекст приложения: реестр, фабрика, делегатор.

Связывает ядро с обработчиками capability и запускает базовых агентов.
Все объекты создаются явно и живут столько же, сколько экземпляр
CovenantSystem (обычно это FastAPI-приложение).
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Any, Mapping, Optional

from .capabilities import (
    COMPLIANCE_CHECK,
    FORTRESS,
    NAME_LORE,
    RESEARCH,
    SCRIBE,
    ComplianceCheckAgent,
    DeepResearchAgent,
    FortressAgent,
    HttpDomainRegistry,
    NameLoreAgent,
    ScrollscribeAgent,
)
from .config import CovenantConfig
from .core import (
    AgentRegistry,
    AlreadyExistsError,
    BaseCovenantAgent,
    CapabilityFactory,
    ContextBinder,
    TaskDelegator,
    TaskEnvelope,
)
from .telemetry import BaseMetrics, CovenantMetrics, NullMetrics

logger = logging.getLogger(__name__)

# Базовые агенты, которых поднимает boot(): имя → capability.
FOUNDATIONAL_AGENTS: tuple[tuple[str, str], ...] = (
    ("Ironwall", FORTRESS),
    ("TechAdmin", NAME_LORE),
    ("Lorekeeper", SCRIBE),
    ("Spymaster", RESEARCH),
    ("Gatewatcher", COMPLIANCE_CHECK),
)


def build_domain_registry(config: CovenantConfig) -> HttpDomainRegistry:
    logger.info("NameLoreAgent: using domain registry at %s", config.domain_registry_url)
    return HttpDomainRegistry(
        config.domain_registry_url,
        timeout_seconds=config.domain_registry_timeout_seconds,
    )


def build_default_factory(
    registry: AgentRegistry,
    context_binder: ContextBinder,
    config: CovenantConfig,
    domain_registry: Optional[HttpDomainRegistry] = None,
) -> CapabilityFactory:
    """
    Собрать фабрику со всеми встроенными capability.

    Зависимости (context binder, реестр доменов, настройки ретраев)
    связываются здесь, поэтому транзитные обработчики создаются без аргументов.
    Если `domain_registry` не передан, а в config задан URL реестра доменов,
    клиент создаётся здесь.
    """
    name_lore_args: dict[str, Any] = {
        "max_retries": config.name_lore_max_retries,
        "retry_backoff_seconds": config.retry_backoff_seconds,
    }
    if domain_registry is None and config.domain_registry_url:
        domain_registry = build_domain_registry(config)
    if domain_registry is not None:
        name_lore_args["registry_service"] = domain_registry
    return CapabilityFactory(
        registry,
        {
            SCRIBE: partial(ScrollscribeAgent, context_binder=context_binder),
            RESEARCH: DeepResearchAgent,
            COMPLIANCE_CHECK: ComplianceCheckAgent,
            NAME_LORE: partial(NameLoreAgent, **name_lore_args),
            FORTRESS: FortressAgent,
        },
    )


class CovenantSystem:
    """
    Центральный контекст Covenant.

    Attributes:
        config: Конфигурация сервиса.
        registry: Реестр именованных агентов.
        context_binder: Символический контекст сессий.
        factory: Фабрика capability.
        delegator: Делегатор задач.
        metrics: Метрики (Null при выключенном мониторинге).
        domain_registry: HTTP-клиент реестра доменов, если он создан системой.
    """

    def __init__(
        self,
        config: Optional[CovenantConfig] = None,
        factory: Optional[CapabilityFactory] = None,
        metrics: Optional[BaseMetrics] = None,
    ) -> None:
        self.config = config or CovenantConfig.from_env()
        self.context_binder = ContextBinder()
        self.domain_registry: Optional[HttpDomainRegistry] = None
        if factory is not None:
            self.registry = factory.registry
            self.factory = factory
        else:
            self.registry = AgentRegistry()
            if self.config.domain_registry_url:
                self.domain_registry = build_domain_registry(self.config)
            self.factory = build_default_factory(
                self.registry,
                self.context_binder,
                self.config,
                domain_registry=self.domain_registry,
            )
        if metrics is None:
            metrics = CovenantMetrics() if self.config.enable_monitoring else NullMetrics()
        self.metrics = metrics
        self.delegator = TaskDelegator(
            registry=self.registry,
            factory=self.factory,
            source=self.config.source_name,
            default_timeout=self.config.delegation_timeout_seconds,
            metrics=self.metrics,
        )
        logger.info(
            "Covenant system initialized with capabilities: %s",
            self.factory.known_capabilities(),
        )

    def boot(self) -> list[str]:
        """
        Поднять базовых агентов.

        Уже существующие имена пропускаются, поэтому повторный boot()
        ничего не меняет.

        Returns:
            Имена агентов, созданных этим вызовом.
        """
        logger.info("Boot sequence initiated by %s", self.config.source_name)
        spawned: list[str] = []
        for name, capability in FOUNDATIONAL_AGENTS:
            try:
                self.spawn(capability, name)
            except AlreadyExistsError:
                logger.warning("Boot: agent '%s' already exists, skipping", name)
                continue
            spawned.append(name)
        logger.info("Boot sequence complete, %d agents spawned", len(spawned))
        return spawned

    def spawn(
        self,
        capability: str,
        name: str,
        constructor_args: Optional[Mapping[str, Any]] = None,
    ) -> BaseCovenantAgent:
        agent = self.factory.spawn(capability, name, constructor_args)
        self.metrics.set_registered_agents(len(self.registry))
        return agent

    def retire(self, name: str) -> BaseCovenantAgent:
        """Удалить агента из реестра и деактивировать его."""
        agent = self.registry.unregister(name)
        agent.deactivate()
        self.metrics.set_registered_agents(len(self.registry))
        return agent

    def lookup(self, name: str) -> BaseCovenantAgent:
        return self.registry.lookup(name)

    async def aclose(self) -> None:
        """Закрыть внешние клиенты (HTTP-реестр доменов)."""
        if self.domain_registry is not None:
            await self.domain_registry.close()

    async def delegate(
        self,
        task: str,
        capability: str,
        *,
        name: Optional[str] = None,
        source: Optional[str] = None,
    ) -> TaskEnvelope:
        return await self.delegator.delegate(task, capability, name=name, source=source)
