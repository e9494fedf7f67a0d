"""
ContextBinder — символический контекст (сигилы, обряды, преемственность) по сессиям.

Агенты читают контекст сессии, чтобы подстроить результат (например,
тон документа у ScrollscribeAgent).
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class SymbolicContext(BaseModel):
    """
    Символический контекст сессии.

    Attributes:
        rite: Активный обряд (например, "initiation").
        sigil: Активный сигил (например, "emberward", "wyrmroot").
        succession: Линия преемственности (опционально).
        extras: Произвольные дополнительные символы.
    """

    model_config = ConfigDict(frozen=True)

    rite: Optional[str] = None
    sigil: Optional[str] = None
    succession: Optional[str] = None
    extras: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (self.rite or self.sigil or self.succession or self.extras)


class ContextBinder:
    """Простое in-memory хранилище SymbolicContext по session_id."""

    def __init__(self) -> None:
        self._contexts: dict[str, SymbolicContext] = {}

    def bind(
        self,
        session_id: str,
        *,
        rite: Optional[str] = None,
        sigil: Optional[str] = None,
        succession: Optional[str] = None,
        **extras: Any,
    ) -> SymbolicContext:
        """Привязать контекст к сессии (заменяет предыдущий)."""
        if not session_id:
            raise ValueError("session_id is required")
        context = SymbolicContext(rite=rite, sigil=sigil, succession=succession, extras=extras)
        self._contexts[session_id] = context
        return context

    def get(self, session_id: Optional[str]) -> SymbolicContext:
        """Контекст сессии или пустой контекст."""
        if not session_id:
            return SymbolicContext()
        return self._contexts.get(session_id) or SymbolicContext()

    def clear(self, session_id: str) -> None:
        self._contexts.pop(session_id, None)
