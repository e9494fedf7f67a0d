"""
DeepResearchAgent — быстрые исследовательские задачи, агрегация и поиск аномалий.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Optional

from ..core.base_agent import BaseCovenantAgent

logger = logging.getLogger(__name__)

RESEARCH = "research"


class DeepResearchAgent(BaseCovenantAgent):
    """Исследовательский агент с детерминированной заглушкой поиска."""

    def __init__(self, name: str, latency_seconds: float = 0.0) -> None:
        super().__init__(
            name,
            capability=RESEARCH,
            description="Focused research tasks, data aggregation and anomaly detection",
        )
        if latency_seconds < 0:
            raise ValueError("latency_seconds must be non-negative")
        self.latency_seconds = latency_seconds
        self.last_query: Optional[str] = None
        self.last_result: Optional[str] = None

    async def handle(self, task: str) -> str:
        return await self.perform_research(task)

    async def perform_research(self, query: str) -> str:
        self.last_query = query
        logger.info("%s researching: %s", self.name, query)
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)
        self.last_result = f"[Data Retrieved] Results for query: {query}"
        return self.last_result

    def aggregate(self, data: Iterable[Any]) -> str:
        """Сводка по набору записей."""
        count = sum(1 for _ in data)
        return f"Aggregated {count} data points."

    def detect_anomalies(self, data: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
        """Вернуть записи, помеченные флагом `anomaly`."""
        anomalies = [item for item in data if item.get("anomaly") is True]
        logger.info("%s detected %d anomalies", self.name, len(anomalies))
        return anomalies
