"""
AgentRegistry — реестр именованных экземпляров агентов.

Единственный владелец всех экземпляров: имена уникальны, повторная вставка
не перезаписывает запись, отсутствие имени всегда сообщается вызывающему.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Iterator, Optional

from .base_agent import BaseCovenantAgent
from .errors import AlreadyExistsError, InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)


class AgentRegistry:
    """
    Реестр агентов с thread-safe доступом.

    Все чтения и записи идут под одной блокировкой, поэтому проверка
    имени и вставка атомарны: из двух конкурентных register() с одним
    именем успешен ровно один. Внутри блокировки нет await, так что
    реестр безопасен и для корутин одного event loop.

    Реестр не является глобальным: его создаёт приложение и передаёт
    фабрике, делегатору и HTTP-слою.

    Example:
        >>> registry = AgentRegistry()
        >>> registry.register("Lorekeeper", ScrollscribeAgent("Lorekeeper"))
        >>> registry.lookup("Lorekeeper").capability
        'scribe'
    """

    def __init__(self) -> None:
        self._agents: dict[str, BaseCovenantAgent] = {}
        self._lock = Lock()

    def register(self, name: str, agent: BaseCovenantAgent) -> None:
        """
        Зарегистрировать экземпляр под именем.

        Args:
            name: Уникальное имя.
            agent: Экземпляр, реализующий BaseCovenantAgent.

        Raises:
            InvalidInputError: Пустое имя или объект без интерфейса агента.
            AlreadyExistsError: Имя уже занято (запись не меняется).
        """
        if not name:
            raise InvalidInputError("Agent name must not be empty")
        if not isinstance(agent, BaseCovenantAgent):
            raise InvalidInputError(
                f"Object of type {type(agent).__name__} does not implement BaseCovenantAgent",
                details={"name": name},
            )
        with self._lock:
            if name in self._agents:
                raise AlreadyExistsError(
                    f"Agent '{name}' is already registered",
                    details={"name": name, "capability": self._agents[name].capability},
                )
            self._agents[name] = agent
        logger.info("Registered agent '%s' with capability '%s'", name, agent.capability)

    def lookup(self, name: str) -> BaseCovenantAgent:
        """
        Получить агента по имени.

        Raises:
            NotFoundError: Если имя не зарегистрировано.
        """
        with self._lock:
            agent = self._agents.get(name)
            if agent is None:
                available = sorted(self._agents)
        if agent is None:
            raise NotFoundError(
                f"Agent '{name}' not found",
                details={"available": available},
            )
        return agent

    def get(self, name: str) -> Optional[BaseCovenantAgent]:
        """Получить агента по имени или None."""
        with self._lock:
            return self._agents.get(name)

    def unregister(self, name: str) -> BaseCovenantAgent:
        """
        Явно удалить агента из реестра.

        Returns:
            Удалённый экземпляр.

        Raises:
            NotFoundError: Если имя не зарегистрировано.
        """
        with self._lock:
            agent = self._agents.pop(name, None)
        if agent is None:
            raise NotFoundError(f"Agent '{name}' not found")
        logger.info("Unregistered agent '%s'", name)
        return agent

    def list_available(self) -> list[str]:
        """Отсортированный список имён."""
        with self._lock:
            return sorted(self._agents.keys())

    def list_all(self) -> list[BaseCovenantAgent]:
        with self._lock:
            return [self._agents[name] for name in sorted(self._agents)]

    def find_by_capability(self, capability: str) -> list[BaseCovenantAgent]:
        """
        Найти агентов с указанной capability.

        Returns:
            Список агентов, отсортированный по имени.
        """
        with self._lock:
            return [
                self._agents[name]
                for name in sorted(self._agents)
                if self._agents[name].capability == capability
            ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._agents)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._agents

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(sorted(self._agents))

    def __repr__(self) -> str:
        with self._lock:
            names = sorted(self._agents)
        return f"<AgentRegistry(agents={names})>"
