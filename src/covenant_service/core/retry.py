"""
Повтор асинхронных вызовов внешних сервисов при временных сбоях.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from .errors import TransientNetworkError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    max_retries: int = 1,
    backoff_seconds: float = 0.0,
    retry_on: tuple[type[BaseException], ...] = (TransientNetworkError,),
) -> T:
    """
    Выполнить операцию с повтором на временных ошибках.

    Повторяются только исключения из `retry_on`; всё остальное
    пробрасывается сразу. После исчерпания попыток пробрасывается
    последняя ошибка.

    Args:
        operation: Фабрика корутины (вызывается заново на каждую попытку).
        max_retries: Количество дополнительных попыток.
        backoff_seconds: Базовая задержка (линейный backoff).
        retry_on: Классы ошибок, которые можно повторять.
    """
    if max_retries < 0:
        raise ValueError("max_retries must be non-negative")

    last_error: Optional[BaseException] = None
    for attempt in range(max_retries + 1):
        try:
            return await operation()
        except retry_on as exc:
            last_error = exc
            if attempt < max_retries:
                delay = _retry_delay(backoff_seconds, attempt)
                logger.warning(
                    "Transient failure (attempt %d/%d): %s; retrying in %.2fs",
                    attempt + 1,
                    max_retries + 1,
                    exc,
                    delay,
                )
                if delay:
                    await asyncio.sleep(delay)
                continue
            raise

    if last_error:
        raise last_error
    raise RuntimeError("Unexpected state: call_with_retry exhausted attempts without result")


def _retry_delay(backoff_seconds: float, attempt_index: int) -> float:
    return max(0.0, backoff_seconds * (attempt_index + 1))
