"""
TaskEnvelope — стандартизированный ответ делегатора.

Унифицирует формат результата делегирования: конверт возвращается всегда,
в том числе когда обработчик упал или capability неизвестна.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

DELEGATION_ACTION = "assistantDelegation"


def utc_now() -> datetime:
    """Вернуть текущее время в UTC (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


class HandlerOutcome(BaseModel):
    """
    Результат одного вызова `handle` внутри `safe_handle`.

    Attributes:
        success: Завершился ли обработчик без исключения.
        result: Значение, которое вернул обработчик.
        error: Текст ошибки вида "<ExceptionType>: <message>".
    """

    success: bool
    result: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, result: Any) -> HandlerOutcome:
        return cls(success=True, result=result)

    @classmethod
    def failed(cls, error: str) -> HandlerOutcome:
        return cls(success=False, error=error)


class TaskPayload(BaseModel):
    """
    Полезная нагрузка конверта.

    Attributes:
        task: Исходное описание задачи.
        capability: Запрошенная capability.
        result: Результат обработчика или текст ошибки.
        status: "success" либо "error".
        handled_by: Имя экземпляра, который обработал задачу (если найден).
    """

    model_config = ConfigDict(frozen=True)

    task: str
    capability: str
    result: Any = None
    status: Literal["success", "error"] = "success"
    handled_by: Optional[str] = None


class TaskEnvelope(BaseModel):
    """
    Конверт результата делегирования.

    Создаётся заново на каждый вызов, неизменяем и нигде не сохраняется.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "source": "Genesis",
                    "action": DELEGATION_ACTION,
                    "payload": {
                        "task": "draft a report",
                        "capability": "scribe",
                        "result": "--- Standard Document ---",
                        "status": "success",
                        "handled_by": "Lorekeeper",
                    },
                    "timestamp": "2025-01-01T00:00:00+00:00",
                },
                {
                    "source": "Genesis",
                    "action": DELEGATION_ACTION,
                    "payload": {
                        "task": "appraise",
                        "capability": "valuation",
                        "result": "UnknownCapability: no handler for 'valuation'",
                        "status": "error",
                        "handled_by": None,
                    },
                    "timestamp": "2025-01-01T00:00:00+00:00",
                },
            ]
        },
    )

    source: str = Field(..., description="Имя вызывающей стороны")
    action: str = Field(default=DELEGATION_ACTION, description="Фиксированный тег действия")
    payload: TaskPayload
    timestamp: datetime = Field(default_factory=utc_now)

    @classmethod
    def success(
        cls,
        source: str,
        task: str,
        capability: str,
        result: Any,
        handled_by: Optional[str] = None,
    ) -> TaskEnvelope:
        """Конверт успешного делегирования."""
        return cls(
            source=source,
            payload=TaskPayload(
                task=task,
                capability=capability,
                result=result,
                status="success",
                handled_by=handled_by,
            ),
        )

    @classmethod
    def create_error(
        cls,
        source: str,
        task: str,
        capability: str,
        error_type: str,
        message: str,
        handled_by: Optional[str] = None,
    ) -> TaskEnvelope:
        """
        Конверт неуспешного делегирования.

        Args:
            error_type: Тег из таксономии ошибок (UnknownCapability, NotFound, HandlerFailure).
            message: Описание ошибки.

        Returns:
            TaskEnvelope, где payload.result = "<error_type>: <message>".
        """
        return cls(
            source=source,
            payload=TaskPayload(
                task=task,
                capability=capability,
                result=f"{error_type}: {message}",
                status="error",
                handled_by=handled_by,
            ),
        )

    @property
    def is_success(self) -> bool:
        return self.payload.status == "success"

    @property
    def is_error(self) -> bool:
        return self.payload.status == "error"
