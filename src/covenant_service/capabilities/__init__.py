"""
Обработчики capability covenant-service.

Содержит агентов-заглушек бизнес-логики:
- ScrollscribeAgent — черновики документов ("scribe")
- DeepResearchAgent — исследовательские задачи ("research")
- ComplianceCheckAgent — проверка соответствия ("compliance-check")
- NameLoreAgent — DNS и доступность доменов ("name-lore")
- FortressAgent — протоколы безопасности ("fortress")
"""

from .compliance import COMPLIANCE_CHECK, ComplianceCheckAgent
from .fortress import FORTRESS, FortressAgent
from .name_lore import (
    NAME_LORE,
    DomainRegistryService,
    HttpDomainRegistry,
    NameLoreAgent,
    OfflineDomainRegistry,
)
from .research import RESEARCH, DeepResearchAgent
from .scribe import SCRIBE, ScrollscribeAgent

__all__ = [
    "COMPLIANCE_CHECK",
    "FORTRESS",
    "NAME_LORE",
    "RESEARCH",
    "SCRIBE",
    "ComplianceCheckAgent",
    "DeepResearchAgent",
    "DomainRegistryService",
    "FortressAgent",
    "HttpDomainRegistry",
    "NameLoreAgent",
    "OfflineDomainRegistry",
    "ScrollscribeAgent",
]
