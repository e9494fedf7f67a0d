"""
TaskDelegator — маршрутизация задачи к обработчику capability.

Находит экземпляр, отвечающий за capability (по имени, в реестре или
через фабрику), вызывает его `handle` и упаковывает исход в TaskEnvelope.
Делегирование никогда не бросает исключений вызывающему: любые сбои
становятся текстом в `payload.result`.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional

from ..telemetry import BaseMetrics, NullMetrics
from .base_agent import BaseCovenantAgent
from .envelope import HandlerOutcome, TaskEnvelope
from .errors import CovenantError, HandlerFailureError, InvalidInputError
from .factory import CapabilityFactory
from .registry import AgentRegistry

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "Genesis"
TRANSIENT_SUFFIX = "-transient"


class TaskDelegator:
    """
    Делегатор задач по capability.

    Порядок разрешения обработчика:
    1. явное имя → AgentRegistry.lookup (capability должна совпадать);
    2. первый зарегистрированный агент с этой capability (по имени);
    3. транзитный экземпляр от CapabilityFactory (не регистрируется).

    Attributes:
        registry: Реестр именованных агентов.
        factory: Фабрика для транзитных обработчиков.
        source: Имя вызывающей стороны по умолчанию (поле конверта `source`).
        default_timeout: Ограничение времени обработчика в секундах (None: без ограничения).
        metrics: Метрики делегирования.
    """

    def __init__(
        self,
        registry: AgentRegistry,
        factory: CapabilityFactory,
        source: str = DEFAULT_SOURCE,
        default_timeout: Optional[float] = None,
        metrics: Optional[BaseMetrics] = None,
    ) -> None:
        self.registry = registry
        self.factory = factory
        self.source = source
        self.default_timeout = default_timeout
        self.metrics = metrics or NullMetrics()

    async def delegate(
        self,
        task: str,
        capability: str,
        *,
        name: Optional[str] = None,
        source: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> TaskEnvelope:
        """
        Делегировать задачу обработчику capability.

        Args:
            task: Описание задачи.
            capability: Идентификатор capability.
            name: Имя конкретного экземпляра (опционально).
            source: Имя вызывающей стороны; по умолчанию self.source.
            timeout: Таймаут для этого вызова; по умолчанию default_timeout.

        Returns:
            TaskEnvelope — всегда, в том числе при ошибке.
        """
        source = source or self.source
        timeout = timeout if timeout is not None else self.default_timeout
        start = time.perf_counter()
        self.metrics.inc_delegation(capability)

        logger.info(
            "%s delegating '%s' task: %s",
            source,
            capability,
            task[:100],
        )

        try:
            if not task or not task.strip():
                raise InvalidInputError("Task description must not be empty")
            agent = self._resolve(capability, name)
        except CovenantError as exc:
            logger.warning("Delegation of '%s' rejected: %s", capability, exc.message)
            return self._error(source, task, capability, exc.error_type, exc.message)

        try:
            outcome = await self._execute_with_timeout(agent, task, timeout)
        except asyncio.TimeoutError:
            outcome = HandlerOutcome.failed(f"Timeout after {timeout}s")
        except Exception as e:
            logger.exception("Agent '%s' raised outside safe_handle", agent.name)
            outcome = HandlerOutcome.failed(f"{type(e).__name__}: {e}")
        finally:
            self.metrics.observe_latency(capability, time.perf_counter() - start)

        if not outcome.success:
            return self._error(
                source,
                task,
                capability,
                HandlerFailureError.error_type,
                outcome.error or "Handler failed",
                handled_by=agent.name,
            )

        logger.info("Agent '%s' completed '%s' task", agent.name, capability)
        return TaskEnvelope.success(
            source=source,
            task=task,
            capability=capability,
            result=outcome.result,
            handled_by=agent.name,
        )

    def _resolve(self, capability: str, name: Optional[str]) -> BaseCovenantAgent:
        """
        Найти обработчик для capability.

        Raises:
            NotFoundError: Имя не зарегистрировано.
            InvalidInputError: Агент с этим именем обслуживает другую capability.
            UnknownCapabilityError: Нет ни зарегистрированного агента, ни конструктора.
        """
        if name:
            agent = self.registry.lookup(name)
            if agent.capability != capability:
                raise InvalidInputError(
                    f"Agent '{name}' handles '{agent.capability}', not '{capability}'"
                )
            return agent

        candidates = self.registry.find_by_capability(capability)
        if candidates:
            return candidates[0]

        logger.debug("No registered agent for '%s', creating transient handler", capability)
        return self.factory.create(capability, f"{capability}{TRANSIENT_SUFFIX}")

    async def _execute_with_timeout(
        self,
        agent: BaseCovenantAgent,
        task: str,
        timeout: Optional[float],
    ) -> HandlerOutcome:
        """
        Выполнить обработчик с таймаутом (если задан).

        Raises:
            asyncio.TimeoutError: При превышении таймаута.
        """
        if timeout is None:
            return await agent.safe_handle(task)
        return await asyncio.wait_for(agent.safe_handle(task), timeout=timeout)

    def _error(
        self,
        source: str,
        task: str,
        capability: str,
        error_type: str,
        message: str,
        handled_by: Optional[str] = None,
    ) -> TaskEnvelope:
        self.metrics.inc_delegation_error(capability, error_type)
        return TaskEnvelope.create_error(
            source=source,
            task=task,
            capability=capability,
            error_type=error_type,
            message=message,
            handled_by=handled_by,
        )
