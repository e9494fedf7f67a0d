"""
FortressAgent — журнал протоколов безопасности Covenant.
"""

from __future__ import annotations

import logging

from ..core.base_agent import BaseCovenantAgent

logger = logging.getLogger(__name__)

FORTRESS = "fortress"


class FortressAgent(BaseCovenantAgent):
    """Активирует протоколы безопасности и ведёт журнал инцидентов."""

    def __init__(self, name: str) -> None:
        super().__init__(
            name,
            capability=FORTRESS,
            description="Activates security protocols and records breach reports",
        )
        self._security_log: list[str] = []

    async def handle(self, task: str) -> str:
        return self.activate_protocol(task)

    def activate_protocol(self, protocol_name: str) -> str:
        entry = f"Protocol Activated: {protocol_name}"
        self._security_log.append(entry)
        logger.info("%s: %s", self.name, entry)
        return entry

    def report_breach(self, details: str) -> str:
        entry = f"SECURITY ALERT: Breach reported - {details}"
        self._security_log.append(entry)
        logger.error("%s: %s", self.name, entry)
        return entry

    @property
    def security_log(self) -> list[str]:
        return list(self._security_log)
