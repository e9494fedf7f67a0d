"""
CapabilityFactory — таблица capability → конструктор.

Таблица заполняется при старте приложения; фабрика создаёт экземпляры
по идентификатору capability и передаёт их в AgentRegistry.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Any, Callable, Mapping, Optional

from .base_agent import BaseCovenantAgent
from .errors import (
    AlreadyExistsError,
    CovenantError,
    InvalidInputError,
    UnknownCapabilityError,
)
from .registry import AgentRegistry

logger = logging.getLogger(__name__)

AgentConstructor = Callable[..., BaseCovenantAgent]


class CapabilityFactory:
    """
    Фабрика агентов по capability.

    Конструктор вызывается как `constructor(name, **constructor_args)` и
    обязан вернуть BaseCovenantAgent, привязанный к той же capability.

    Attributes:
        registry: Реестр, в который spawn() кладёт новые экземпляры.
    """

    def __init__(
        self,
        registry: AgentRegistry,
        constructors: Optional[Mapping[str, AgentConstructor]] = None,
    ) -> None:
        self.registry = registry
        self._constructors: dict[str, AgentConstructor] = {}
        self._lock = Lock()
        for capability, constructor in (constructors or {}).items():
            self.register_capability(capability, constructor)

    def register_capability(self, capability: str, constructor: AgentConstructor) -> None:
        """
        Добавить конструктор для capability.

        Raises:
            InvalidInputError: Пустой идентификатор или не-callable конструктор.
            AlreadyExistsError: Capability уже объявлена.
        """
        if not capability:
            raise InvalidInputError("Capability identifier must not be empty")
        if not callable(constructor):
            raise InvalidInputError(f"Constructor for '{capability}' is not callable")
        with self._lock:
            if capability in self._constructors:
                raise AlreadyExistsError(f"Capability '{capability}' is already declared")
            self._constructors[capability] = constructor
        logger.debug("Declared capability '%s'", capability)

    def known_capabilities(self) -> list[str]:
        with self._lock:
            return sorted(self._constructors)

    def supports(self, capability: str) -> bool:
        with self._lock:
            return capability in self._constructors

    def create(self, capability: str, name: str, **constructor_args: Any) -> BaseCovenantAgent:
        """
        Создать экземпляр без регистрации (транзитный обработчик).

        Raises:
            UnknownCapabilityError: Capability не объявлена.
            InvalidInputError: Конструктор упал или вернул не того агента.
        """
        with self._lock:
            constructor = self._constructors.get(capability)
        if constructor is None:
            raise UnknownCapabilityError(
                f"No handler for capability '{capability}'",
                details={"known": self.known_capabilities()},
            )
        try:
            agent = constructor(name, **constructor_args)
        except CovenantError:
            raise
        except Exception as exc:
            raise InvalidInputError(
                f"Failed to construct '{capability}' agent '{name}': {type(exc).__name__}: {exc}"
            ) from exc

        if not isinstance(agent, BaseCovenantAgent):
            raise InvalidInputError(
                f"Constructor for '{capability}' returned {type(agent).__name__}, "
                "expected BaseCovenantAgent"
            )
        if agent.capability != capability:
            raise InvalidInputError(
                f"Constructor for '{capability}' produced an agent bound to '{agent.capability}'"
            )
        return agent

    def spawn(
        self,
        capability: str,
        name: str,
        constructor_args: Optional[Mapping[str, Any]] = None,
    ) -> BaseCovenantAgent:
        """
        Создать экземпляр и зарегистрировать его под именем.

        При любой ошибке реестр не меняется.

        Args:
            capability: Идентификатор capability.
            name: Уникальное имя экземпляра.
            constructor_args: Именованные аргументы конструктора.

        Returns:
            Зарегистрированный экземпляр.

        Raises:
            UnknownCapabilityError: Capability не объявлена.
            AlreadyExistsError: Имя уже занято.
            InvalidInputError: Некорректное имя или аргументы.
        """
        if not name:
            raise InvalidInputError("Agent name must not be empty")
        # Быстрый отказ до конструирования; атомарную проверку делает register().
        if name in self.registry:
            raise AlreadyExistsError(f"Agent '{name}' is already registered", details={"name": name})

        agent = self.create(capability, name, **dict(constructor_args or {}))
        self.registry.register(name, agent)
        agent.activate()
        logger.info("Spawned agent '%s' for capability '%s'", name, capability)
        return agent

    def __repr__(self) -> str:
        return f"<CapabilityFactory(capabilities={self.known_capabilities()})>"
