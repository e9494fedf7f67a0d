"""
BaseCovenantAgent — абстрактный базовый класс для всех агентов Covenant.

Определяет единый интерфейс обработчика capability (`handle`), который
вызывает делегатор, и жизненный цикл агента (статус, счётчик ошибок).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .envelope import HandlerOutcome, utc_now

logger = logging.getLogger(__name__)

AgentStatus = Literal["initialized", "active", "inactive", "error_limit_exceeded"]

DEFAULT_MAX_ERRORS = 5


class NamedEntity(BaseModel):
    """
    Лёгкая запись `{name, kind}`, общая для всех экземпляров агентов.

    Attributes:
        name: Уникальное имя экземпляра в реестре.
        kind: Capability, к которой привязан экземпляр.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    kind: str = Field(..., min_length=1)


class AgentHealth(BaseModel):
    """Снимок состояния агента для health-эндпоинтов."""

    name: str
    kind: str
    status: AgentStatus
    last_activity: datetime
    uptime_seconds: float
    error_count: int
    healthy: bool


class BaseCovenantAgent(ABC):
    """
    Абстрактный базовый класс для всех агентов.

    Каждый обработчик capability обязан реализовать `handle(task)`.
    Проверка интерфейса выполняется при регистрации в AgentRegistry
    (через isinstance), а не в момент вызова.

    Attributes:
        _name: Уникальное имя агента.
        _capability: Идентификатор capability.
        _description: Человекочитаемое описание.
        status: Текущее состояние жизненного цикла.
        error_count: Количество ошибок с последнего сброса.
        max_errors: Порог, после которого статус становится error_limit_exceeded.
    """

    def __init__(
        self,
        name: str,
        capability: str,
        description: str = "",
        max_errors: int = DEFAULT_MAX_ERRORS,
    ) -> None:
        self._name = name
        self._capability = capability
        self._description = description
        self.status: AgentStatus = "initialized"
        self.created_at = utc_now()
        self.last_activity = self.created_at
        self.error_count = 0
        self.max_errors = max_errors
        logger.debug("Agent '%s' of kind '%s' initialized", name, capability)

    @property
    def name(self) -> str:
        """Уникальное имя агента (ключ в AgentRegistry)."""
        return self._name

    @property
    def capability(self) -> str:
        """Capability, которую обслуживает агент."""
        return self._capability

    @property
    def description(self) -> str:
        return self._description

    @property
    def identity(self) -> NamedEntity:
        """Запись `{name, kind}` для сериализации и логов."""
        return NamedEntity(name=self._name, kind=self._capability)

    @abstractmethod
    async def handle(self, task: str) -> Any:
        """
        Обработать задачу.

        Единственная точка входа, которую использует TaskDelegator.

        Args:
            task: Описание задачи.

        Returns:
            Произвольное значение-результат.

        Raises:
            Любые исключения; делегатор превращает их в данные конверта.
        """

    async def safe_handle(self, task: str) -> HandlerOutcome:
        """
        Безопасный вызов `handle` с учётом активности и ошибок.

        Returns:
            HandlerOutcome — всегда, даже если обработчик упал.
        """
        self.touch()
        try:
            result = await self.handle(task)
        except Exception as e:
            self.record_failure(e)
            error_msg = f"{type(e).__name__}: {e}"
            logger.exception("Agent '%s' failed to handle task", self.name)
            return HandlerOutcome.failed(error_msg)
        self.record_success()
        return HandlerOutcome.ok(result)

    def activate(self) -> None:
        self.status = "active"
        self.touch()
        logger.info("Agent '%s' activated", self.name)

    def deactivate(self) -> None:
        self.status = "inactive"
        logger.info("Agent '%s' deactivated", self.name)

    def touch(self) -> None:
        """Обновить отметку последней активности."""
        self.last_activity = utc_now()

    def record_success(self) -> None:
        if self.status == "initialized":
            self.status = "active"

    def record_failure(self, exc: BaseException) -> None:
        """
        Учесть ошибку обработчика.

        При достижении max_errors агент переводится в error_limit_exceeded.
        """
        self.error_count += 1
        if self.error_count >= self.max_errors and self.status != "error_limit_exceeded":
            self.status = "error_limit_exceeded"
            logger.error(
                "Agent '%s' exceeded maximum error count (%d), last error: %s",
                self.name,
                self.max_errors,
                exc,
            )

    def reset_errors(self) -> None:
        """Сбросить счётчик ошибок (сценарий восстановления)."""
        self.error_count = 0
        if self.status == "error_limit_exceeded":
            self.status = "active"
        logger.info("Agent '%s' error count reset", self.name)

    def health_status(self) -> AgentHealth:
        now = utc_now()
        return AgentHealth(
            name=self.name,
            kind=self.capability,
            status=self.status,
            last_activity=self.last_activity,
            uptime_seconds=(now - self.created_at).total_seconds(),
            error_count=self.error_count,
            healthy=self.status == "active" and self.error_count < self.max_errors,
        )

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__}("
            f"name={self.name!r}, "
            f"capability={self.capability!r})>"
        )

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"
