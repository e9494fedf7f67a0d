"""
ComplianceCheckAgent — заглушка проверки соответствия для сделок.

Реальной юридической логики нет: задача считается несоответствующей,
если содержит один из запрещённых терминов.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from ..core.base_agent import BaseCovenantAgent

logger = logging.getLogger(__name__)

COMPLIANCE_CHECK = "compliance-check"

DEFAULT_BLOCKED_TERMS = ("sanctioned", "unlicensed", "unzoned")


class ComplianceCheckAgent(BaseCovenantAgent):
    def __init__(self, name: str, blocked_terms: Optional[Iterable[str]] = None) -> None:
        super().__init__(
            name,
            capability=COMPLIANCE_CHECK,
            description="Stub legal and zoning checks for acquisitions",
        )
        terms = DEFAULT_BLOCKED_TERMS if blocked_terms is None else blocked_terms
        self.blocked_terms = tuple(t.lower() for t in terms)
        self.reports: list[dict[str, Any]] = []

    async def handle(self, task: str) -> dict[str, Any]:
        return self.check(task)

    def check(self, subject: str) -> dict[str, Any]:
        lowered = subject.lower()
        issues = [f"Blocked term found: {term}" for term in self.blocked_terms if term in lowered]
        report = {"subject": subject, "compliant": not issues, "issues": issues}
        self.reports.append(report)
        if issues:
            logger.warning("%s flagged '%s': %s", self.name, subject, issues)
        return report
