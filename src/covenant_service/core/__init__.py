"""
Core модуль covenant-service.

Содержит базовые абстракции реестра агентов и делегирования:
- BaseCovenantAgent — интерфейс обработчика capability
- AgentRegistry — реестр именованных экземпляров
- CapabilityFactory — таблица capability → конструктор
- TaskDelegator — делегирование задач с конвертом результата
- TaskEnvelope — стандартизированный результат делегирования

Пример использования:

    from covenant_service.core import (
        AgentRegistry,
        BaseCovenantAgent,
        CapabilityFactory,
        TaskDelegator,
    )

    class EchoAgent(BaseCovenantAgent):
        def __init__(self, name: str) -> None:
            super().__init__(name, capability="echo")

        async def handle(self, task: str) -> str:
            return task

    registry = AgentRegistry()
    factory = CapabilityFactory(registry, {"echo": EchoAgent})
    factory.spawn("echo", "Echo-1")
    envelope = await TaskDelegator(registry, factory).delegate("ping", "echo")
"""

from .base_agent import AgentHealth, BaseCovenantAgent, NamedEntity
from .context import ContextBinder, SymbolicContext
from .delegator import TaskDelegator
from .envelope import DELEGATION_ACTION, HandlerOutcome, TaskEnvelope, TaskPayload
from .errors import (
    AlreadyExistsError,
    CovenantError,
    HandlerFailureError,
    InvalidInputError,
    NotFoundError,
    TransientNetworkError,
    UnknownCapabilityError,
)
from .factory import AgentConstructor, CapabilityFactory
from .registry import AgentRegistry
from .retry import call_with_retry

__all__ = [
    # Основные классы
    "AgentHealth",
    "AgentRegistry",
    "BaseCovenantAgent",
    "CapabilityFactory",
    "ContextBinder",
    "NamedEntity",
    "SymbolicContext",
    "TaskDelegator",
    # Результаты
    "DELEGATION_ACTION",
    "HandlerOutcome",
    "TaskEnvelope",
    "TaskPayload",
    # Ошибки
    "AlreadyExistsError",
    "CovenantError",
    "HandlerFailureError",
    "InvalidInputError",
    "NotFoundError",
    "TransientNetworkError",
    "UnknownCapabilityError",
    # Утилиты
    "AgentConstructor",
    "call_with_retry",
]
