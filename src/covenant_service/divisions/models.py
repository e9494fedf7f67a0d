"""
Pydantic-модели дивизионов, юрлиц и журнала активностей.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..core.envelope import utc_now

MAX_ACTIVITIES_PER_ENTITY = 100
RECENT_ACTIVITIES_LIMIT = 20


class Division(BaseModel):
    """
    Отраслевой дивизион Covenant.

    Attributes:
        id: Идентификатор (slug), например "real-estate".
        capabilities: Операционные возможности дивизиона.
        default_tabs: Вкладки, которые получает каждое новое юрлицо.
        entities: Идентификаторы юрлиц дивизиона (в порядке создания).
    """

    id: str
    name: str
    glyph: str
    color: str
    description: str
    capabilities: list[str] = Field(default_factory=list)
    default_tabs: list[str] = Field(default_factory=list)
    entities: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    last_updated: datetime = Field(default_factory=utc_now)


class Activity(BaseModel):
    id: str
    timestamp: datetime = Field(default_factory=utc_now)
    type: str
    description: str
    data: dict[str, Any] = Field(default_factory=dict)
    agent_id: Optional[str] = None
    ritual_context: Optional[str] = None


class ActivityCreate(BaseModel):
    """Входные данные для добавления активности."""

    type: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    agent_id: str = "API"
    ritual_context: Optional[str] = None
    data: dict[str, Any] = Field(default_factory=dict)


class Entity(BaseModel):
    """Юридическое лицо, закреплённое за дивизионом."""

    id: str
    division_id: str
    name: str
    jurisdiction: str
    entity_type: str
    status: str = "Active"
    ritual_tier: str = "Core"
    assigned_agents: list[str] = Field(default_factory=list)
    tabs: list[str] = Field(default_factory=list)
    activities: list[Activity] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    last_updated: datetime = Field(default_factory=utc_now)


class EntityCreate(BaseModel):
    """Входные данные для создания юрлица."""

    division_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    jurisdiction: str = Field(..., min_length=1)
    entity_type: str = Field(..., min_length=1)
    id: Optional[str] = None
    status: str = "Active"
    ritual_tier: str = "Core"
    assigned_agents: list[str] = Field(default_factory=list)
    custom_tabs: list[str] = Field(default_factory=list)


class EntityUpdate(BaseModel):
    """Частичное обновление юрлица: None означает «не менять»."""

    name: Optional[str] = None
    jurisdiction: Optional[str] = None
    entity_type: Optional[str] = None
    status: Optional[str] = None
    ritual_tier: Optional[str] = None
    assigned_agents: Optional[list[str]] = None


class SystemStats(BaseModel):
    total_divisions: int
    total_entities: int
    entities_by_division: dict[str, int]
    entities_by_status: dict[str, int]
    entities_by_tier: dict[str, int]
    recent_activities: list[dict[str, Any]]


class DivisionExport(BaseModel):
    division: Division
    entities: list[Entity]
    export_timestamp: datetime = Field(default_factory=utc_now)
    entity_count: int
