"""
DivisionRegistry — in-memory CRUD дивизионов и их юрлиц.
"""

from __future__ import annotations

import logging
import uuid
from collections import Counter
from threading import Lock
from typing import Any, Optional

from ..core.envelope import utc_now
from ..core.errors import AlreadyExistsError, InvalidInputError, NotFoundError
from .models import (
    MAX_ACTIVITIES_PER_ENTITY,
    RECENT_ACTIVITIES_LIMIT,
    Activity,
    ActivityCreate,
    Division,
    DivisionExport,
    Entity,
    EntityCreate,
    EntityUpdate,
    SystemStats,
)

logger = logging.getLogger(__name__)

DIVISION_CONFIGS: tuple[dict[str, Any], ...] = (
    {
        "id": "real-estate",
        "name": "Real Estate",
        "glyph": "🏡",
        "color": "#8B4513",
        "description": "Land acquisition, asset tokenization and property stewardship",
        "capabilities": ["Asset Registry", "Deed Rituals", "Zoning Overlays", "Sacred Land Tokens"],
        "default_tabs": ["Land Deed Vault", "Zoning & Compliance", "Asset Tokenization", "Property Timeline"],
    },
    {
        "id": "crypto-trading",
        "name": "Crypto Trading",
        "glyph": "🪙",
        "color": "#FFD700",
        "description": "Multi-exchange automation and bot orchestration",
        "capabilities": ["Exchange Mapping", "Bot Deployments", "Fee Optimization", "Trading Rituals"],
        "default_tabs": ["Exchange Registry", "Bot Command Center", "Fee Analysis", "Trading History"],
    },
    {
        "id": "stock-investing",
        "name": "Stock Investing",
        "glyph": "📈",
        "color": "#006400",
        "description": "Portfolio management and equity governance",
        "capabilities": ["Portfolio Management", "Market Analysis", "Risk Assessment", "Dividend Tracking"],
        "default_tabs": ["Portfolio Overview", "Market Positions", "Performance Analytics", "Investment Timeline"],
    },
    {
        "id": "e-commerce",
        "name": "E-Commerce",
        "glyph": "🛒",
        "color": "#FF6347",
        "description": "Digital storefronts, brand sanctums and order handling",
        "capabilities": ["Store Management", "Inventory Tracking", "Order Processing", "Customer Analytics"],
        "default_tabs": ["Store Dashboard", "Product Catalog", "Order Management", "Analytics Hub"],
    },
    {
        "id": "education",
        "name": "Education & Coaching",
        "glyph": "🎓",
        "color": "#4169E1",
        "description": "Curricula, mentor lineages and certification",
        "capabilities": ["Curriculum Design", "Student Tracking", "Certification", "Mentor Network"],
        "default_tabs": ["Course Library", "Student Portal", "Certification Vault", "Mentor Registry"],
    },
    {
        "id": "self-banking",
        "name": "Self Banking",
        "glyph": "🏦",
        "color": "#2F4F4F",
        "description": "Personal finance, cashflow and budget planning",
        "capabilities": ["Account Management", "Transaction Tracking", "Budget Planning", "Investment Allocation"],
        "default_tabs": ["Account Overview", "Transaction History", "Budget Dashboard", "Investment Tracker"],
    },
    {
        "id": "private-insurance",
        "name": "Private Insurance",
        "glyph": "🛡️",
        "color": "#8A2BE2",
        "description": "Risk mitigation, coverage analysis and claims",
        "capabilities": ["Policy Management", "Claims Processing", "Risk Assessment", "Coverage Analysis"],
        "default_tabs": ["Policy Vault", "Claims Center", "Risk Dashboard", "Coverage Map"],
    },
    {
        "id": "business-acquisition",
        "name": "Business Acquisition",
        "glyph": "🏢",
        "color": "#DC143C",
        "description": "Target analysis, due diligence and integration planning",
        "capabilities": ["Target Analysis", "Due Diligence", "Deal Management", "Integration Planning"],
        "default_tabs": ["Target Registry", "Deal Pipeline", "Due Diligence", "Integration Hub"],
    },
)

SAMPLE_ENTITIES: tuple[dict[str, Any], ...] = (
    {
        "division_id": "real-estate",
        "name": "Dragon Properties LLC",
        "jurisdiction": "Delaware",
        "entity_type": "LLC",
        "ritual_tier": "Core",
        "assigned_agents": ["PropertyAgent", "ValuationAgent"],
    },
    {
        "division_id": "crypto-trading",
        "name": "Covenant Digital Assets Corp",
        "jurisdiction": "Wyoming",
        "entity_type": "Corporation",
        "ritual_tier": "Core",
        "assigned_agents": ["TradingBot", "AnalyticsAgent"],
    },
    {
        "division_id": "self-banking",
        "name": "Oak Financial Trust",
        "jurisdiction": "Nevada",
        "entity_type": "Trust",
        "ritual_tier": "Legacy",
        "assigned_agents": ["BankingAgent", "ComplianceAgent"],
    },
)


class DivisionRegistry:
    """
    Реестр дивизионов и юрлиц с thread-safe доступом.

    Наружу отдаются копии моделей, поэтому изменения возможны только
    через методы реестра.
    """

    def __init__(self) -> None:
        self._divisions: dict[str, Division] = {}
        self._entities: dict[str, Entity] = {}
        self._lock = Lock()
        for config in DIVISION_CONFIGS:
            division = Division(**config)
            self._divisions[division.id] = division

    @classmethod
    def with_samples(cls) -> DivisionRegistry:
        """Реестр с демонстрационными юрлицами."""
        registry = cls()
        for sample in SAMPLE_ENTITIES:
            registry.create_entity(EntityCreate(**sample))
        return registry

    # ------------------------------------------------------------------ #
    # Дивизионы
    # ------------------------------------------------------------------ #
    def get_division(self, division_id: str) -> Division:
        with self._lock:
            return self._require_division(division_id).model_copy(deep=True)

    def list_divisions(self) -> list[Division]:
        with self._lock:
            return [d.model_copy(deep=True) for d in self._divisions.values()]

    def entities_by_division(self, division_id: str) -> list[Entity]:
        with self._lock:
            division = self._require_division(division_id)
            return [
                self._entities[eid].model_copy(deep=True)
                for eid in division.entities
                if eid in self._entities
            ]

    # ------------------------------------------------------------------ #
    # Юрлица
    # ------------------------------------------------------------------ #
    def create_entity(self, data: EntityCreate, *, agent_id: str = "DivisionRegistry") -> Entity:
        """
        Создать юрлицо в дивизионе.

        Вкладки = вкладки дивизиона по умолчанию + custom_tabs.
        Событие создания записывается в журнал активностей.

        Raises:
            NotFoundError: Дивизион не найден.
            AlreadyExistsError: Явно заданный id уже занят.
        """
        with self._lock:
            division = self._require_division(data.division_id)
            entity_id = data.id or f"{division.id}-entity-{uuid.uuid4().hex[:8]}"
            if entity_id in self._entities:
                raise AlreadyExistsError(f"Entity '{entity_id}' already exists")

            now = utc_now()
            entity = Entity(
                id=entity_id,
                division_id=division.id,
                name=data.name,
                jurisdiction=data.jurisdiction,
                entity_type=data.entity_type,
                status=data.status,
                ritual_tier=data.ritual_tier,
                assigned_agents=list(data.assigned_agents),
                tabs=[*division.default_tabs, *data.custom_tabs],
                created_at=now,
                last_updated=now,
            )
            self._entities[entity_id] = entity
            division.entities.append(entity_id)
            division.last_updated = now
            self._append_activity(
                entity,
                ActivityCreate(
                    type="creation",
                    description=f"Entity {entity.name} created",
                    agent_id=agent_id,
                ),
            )
            logger.info("Created entity '%s' in division '%s'", entity_id, division.id)
            return entity.model_copy(deep=True)

    def get_entity(self, entity_id: str) -> Entity:
        with self._lock:
            return self._require_entity(entity_id).model_copy(deep=True)

    def update_entity(
        self,
        entity_id: str,
        changes: EntityUpdate,
        *,
        agent_id: str = "DivisionRegistry",
    ) -> Entity:
        with self._lock:
            entity = self._require_entity(entity_id)
            updates = changes.model_dump(exclude_none=True)
            for field_name, value in updates.items():
                if isinstance(value, str) and not value:
                    raise InvalidInputError(f"Field '{field_name}' must not be empty")
            for field_name, value in updates.items():
                setattr(entity, field_name, value)
            entity.last_updated = utc_now()
            self._append_activity(
                entity,
                ActivityCreate(
                    type="update",
                    description=f"Entity {entity.name} updated",
                    agent_id=agent_id,
                    data={"fields": sorted(updates)},
                ),
            )
            return entity.model_copy(deep=True)

    def search_entities(
        self,
        query: Optional[str] = None,
        *,
        division: Optional[str] = None,
        status: Optional[str] = None,
        ritual_tier: Optional[str] = None,
    ) -> list[Entity]:
        """
        Поиск юрлиц.

        Текст ищется (без учёта регистра) в name, jurisdiction и entity_type;
        фильтры сравниваются на точное совпадение.
        """
        needle = (query or "").lower()
        with self._lock:
            result = []
            for entity in self._entities.values():
                if needle and not any(
                    needle in field.lower()
                    for field in (entity.name, entity.jurisdiction, entity.entity_type)
                ):
                    continue
                if division and entity.division_id != division:
                    continue
                if status and entity.status != status:
                    continue
                if ritual_tier and entity.ritual_tier != ritual_tier:
                    continue
                result.append(entity.model_copy(deep=True))
            return result

    # ------------------------------------------------------------------ #
    # Активности
    # ------------------------------------------------------------------ #
    def add_activity(self, entity_id: str, data: ActivityCreate) -> Activity:
        with self._lock:
            entity = self._require_entity(entity_id)
            activity = self._append_activity(entity, data)
            return activity.model_copy(deep=True)

    def list_activities(self, entity_id: str, limit: int = 50) -> tuple[list[Activity], int]:
        """
        Последние активности юрлица (новые первыми).

        Returns:
            (активности в пределах limit, общее количество).
        """
        if limit < 0:
            raise InvalidInputError("limit must be non-negative")
        with self._lock:
            entity = self._require_entity(entity_id)
            return [a.model_copy() for a in entity.activities[:limit]], len(entity.activities)

    # ------------------------------------------------------------------ #
    # Статистика и экспорт
    # ------------------------------------------------------------------ #
    def system_stats(self) -> SystemStats:
        with self._lock:
            by_status = Counter(e.status for e in self._entities.values())
            by_tier = Counter(e.ritual_tier for e in self._entities.values())
            activities = [
                {
                    **activity.model_dump(mode="json"),
                    "entity_name": entity.name,
                    "entity_id": entity.id,
                    "division_id": entity.division_id,
                    "_ts": activity.timestamp,
                }
                for entity in self._entities.values()
                for activity in entity.activities
            ]
            activities.sort(key=lambda item: item["_ts"], reverse=True)
            recent = [
                {k: v for k, v in item.items() if k != "_ts"}
                for item in activities[:RECENT_ACTIVITIES_LIMIT]
            ]
            return SystemStats(
                total_divisions=len(self._divisions),
                total_entities=len(self._entities),
                entities_by_division={d.id: len(d.entities) for d in self._divisions.values()},
                entities_by_status=dict(by_status),
                entities_by_tier=dict(by_tier),
                recent_activities=recent,
            )

    def export_division(self, division_id: str) -> DivisionExport:
        entities = self.entities_by_division(division_id)
        return DivisionExport(
            division=self.get_division(division_id),
            entities=entities,
            entity_count=len(entities),
        )

    def import_division(self, payload: DivisionExport) -> dict[str, int]:
        """
        Импортировать дивизион с юрлицами (замещает записи с теми же id).

        Юрлица, уже числящиеся за дивизионом, остаются в его списке;
        юрлицо, ранее принадлежавшее другому дивизиону, переносится.

        Raises:
            InvalidInputError: Юрлицо принадлежит другому дивизиону.
        """
        division = payload.division.model_copy(deep=True)
        for entity in payload.entities:
            if entity.division_id != division.id:
                raise InvalidInputError(
                    f"Entity '{entity.id}' belongs to '{entity.division_id}', not '{division.id}'"
                )
        with self._lock:
            existing = self._divisions.get(division.id)
            candidates = list(existing.entities) if existing else []
            candidates += division.entities
            for entity in payload.entities:
                previous = self._entities.get(entity.id)
                if previous is not None and previous.division_id != division.id:
                    owner = self._divisions.get(previous.division_id)
                    if owner is not None and entity.id in owner.entities:
                        owner.entities.remove(entity.id)
                self._entities[entity.id] = entity.model_copy(deep=True)
                candidates.append(entity.id)
            # dict.fromkeys: порядок сохраняется, дубликаты отбрасываются
            division.entities = [
                eid
                for eid in dict.fromkeys(candidates)
                if eid in self._entities and self._entities[eid].division_id == division.id
            ]
            self._divisions[division.id] = division
        logger.info("Imported division '%s' with %d entities", division.id, len(payload.entities))
        return {"divisions_imported": 1, "entities_imported": len(payload.entities)}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entities)

    # ------------------------------------------------------------------ #
    # Внутренние вспомогательные методы (вызываются под блокировкой)
    # ------------------------------------------------------------------ #
    def _require_division(self, division_id: str) -> Division:
        division = self._divisions.get(division_id)
        if division is None:
            raise NotFoundError(f"Division '{division_id}' not found")
        return division

    def _require_entity(self, entity_id: str) -> Entity:
        entity = self._entities.get(entity_id)
        if entity is None:
            raise NotFoundError(f"Entity '{entity_id}' not found")
        return entity

    @staticmethod
    def _append_activity(entity: Entity, data: ActivityCreate) -> Activity:
        activity = Activity(
            id=f"activity-{uuid.uuid4().hex[:12]}",
            type=data.type,
            description=data.description,
            data=dict(data.data),
            agent_id=data.agent_id,
            ritual_context=data.ritual_context,
        )
        entity.activities.insert(0, activity)
        del entity.activities[MAX_ACTIVITIES_PER_ENTITY:]
        entity.last_updated = activity.timestamp
        return activity
