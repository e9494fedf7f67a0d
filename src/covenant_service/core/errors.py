"""
Нормализованная иерархия исключений covenant-service.

Реестр, фабрика и доменные хранилища бросают эти исключения, а HTTP-слой
маппит их в статус-код и `error_type` без разбора деталей.
"""

from __future__ import annotations

from typing import Any, Optional


class CovenantError(Exception):
    """Базовый класс для всех ошибок сервиса."""

    error_type: str = "Internal"
    status_code: int = 500

    def __init__(self, message: str, *, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Представление ошибки для JSON-ответа."""
        body: dict[str, Any] = {
            "success": False,
            "error": self.error_type,
            "message": self.message,
        }
        if self.details is not None:
            body["details"] = self.details
        return body

    def __repr__(self) -> str:  # pragma: no cover - мелкий хелпер
        return f"{self.__class__.__name__}(message={self.message!r})"


class InvalidInputError(CovenantError):
    """Выбрасывается при некорректных входных данных."""

    error_type = "InvalidInput"
    status_code = 400


class UnknownCapabilityError(CovenantError):
    """Выбрасывается, если для capability нет зарегистрированного конструктора."""

    error_type = "UnknownCapability"
    status_code = 400


class NotFoundError(CovenantError):
    """Выбрасывается, когда запрошенная запись отсутствует."""

    error_type = "NotFound"
    status_code = 404


class AlreadyExistsError(CovenantError):
    """Выбрасывается при попытке вставить уже занятое имя/ключ."""

    error_type = "AlreadyExists"
    status_code = 409


class HandlerFailureError(CovenantError):
    """Ошибка обработчика capability (в делегаторе превращается в данные)."""

    error_type = "HandlerFailure"
    status_code = 500


class TransientNetworkError(CovenantError):
    """Временный сетевой сбой внешнего сервиса, допускающий повтор."""

    error_type = "TransientNetwork"
    status_code = 503
