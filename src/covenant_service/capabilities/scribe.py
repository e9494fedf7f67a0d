"""
ScrollscribeAgent — составитель документов Covenant.

Тон и заголовок документа зависят от символического контекста сессии.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..core.base_agent import BaseCovenantAgent
from ..core.context import ContextBinder, SymbolicContext

logger = logging.getLogger(__name__)

SCRIBE = "scribe"

DEFAULT_TONE = "Formal"
DEFAULT_HEADER = "Standard Document"


class ScrollscribeAgent(BaseCovenantAgent):
    """
    Агент-писарь: превращает задачу в черновик документа.

    Attributes:
        context_binder: Источник символического контекста (опционально).
        session_id: Сессия, контекст которой используется по умолчанию.
    """

    def __init__(
        self,
        name: str,
        context_binder: Optional[ContextBinder] = None,
        session_id: Optional[str] = None,
    ) -> None:
        super().__init__(
            name,
            capability=SCRIBE,
            description="Drafts documents whose tone follows the active symbolic context",
        )
        self.context_binder = context_binder
        self.session_id = session_id

    async def handle(self, task: str) -> str:
        return self.draft_content(task)

    def draft_content(self, prompt: str, session_id: Optional[str] = None) -> str:
        """
        Составить черновик.

        Args:
            prompt: Тема документа.
            session_id: Сессия для выбора тона; по умолчанию self.session_id.

        Returns:
            Текст черновика с заголовком и строкой тона.
        """
        header, tone = self._style_for(self._context(session_id or self.session_id))
        logger.info("%s drafting '%s' with a %s tone", self.name, header, tone)
        return (
            f"--- {header} ---\n"
            f"Topic: {prompt}\n\n"
            f"This text is written with a {tone} tone, reflecting the gravity of the current context.\n"
            "--- END DRAFT ---"
        )

    def _context(self, session_id: Optional[str]) -> SymbolicContext:
        if self.context_binder is None:
            return SymbolicContext()
        return self.context_binder.get(session_id)

    @staticmethod
    def _style_for(context: SymbolicContext) -> tuple[str, str]:
        header, tone = DEFAULT_HEADER, DEFAULT_TONE
        if context.rite == "initiation":
            header, tone = "Rite of Initiation Scroll", "Mythic and Solemn"
        # сигил перекрывает обряд
        if context.sigil == "emberward":
            header, tone = "Emberward Finance Directive", "Urgent and Financial"
        return header, tone
