from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status

from ..divisions import ActivityCreate, DivisionExport, DivisionRegistry, EntityCreate, EntityUpdate
from .common import get_divisions, ok

divisions_router = APIRouter(tags=["divisions"])


# =============================================================================
# DIVISIONS
# =============================================================================

@divisions_router.get("/divisions")
async def list_divisions(divisions: DivisionRegistry = Depends(get_divisions)) -> dict[str, Any]:
    return ok(divisions.list_divisions())


@divisions_router.post("/divisions/import", status_code=status.HTTP_201_CREATED)
async def import_division(
    payload: DivisionExport,
    divisions: DivisionRegistry = Depends(get_divisions),
) -> dict[str, Any]:
    """Импортировать дивизион из ранее сделанного экспорта."""
    return ok(divisions.import_division(payload))


@divisions_router.get("/divisions/{division_id}")
async def get_division(
    division_id: str,
    divisions: DivisionRegistry = Depends(get_divisions),
) -> dict[str, Any]:
    division = divisions.get_division(division_id)
    return ok({"division": division, "entities": divisions.entities_by_division(division_id)})


@divisions_router.get("/divisions/{division_id}/export")
async def export_division(
    division_id: str,
    divisions: DivisionRegistry = Depends(get_divisions),
) -> dict[str, Any]:
    return ok(divisions.export_division(division_id))


# =============================================================================
# ENTITIES
# =============================================================================

@divisions_router.get("/entities")
async def search_entities(
    search: Optional[str] = None,
    division: Optional[str] = None,
    entity_status: Optional[str] = Query(default=None, alias="status"),
    tier: Optional[str] = None,
    divisions: DivisionRegistry = Depends(get_divisions),
) -> dict[str, Any]:
    """Поиск юрлиц по тексту и фильтрам."""
    entities = divisions.search_entities(
        search,
        division=division,
        status=entity_status,
        ritual_tier=tier,
    )
    return ok(entities, count=len(entities))


@divisions_router.post("/entities", status_code=status.HTTP_201_CREATED)
async def create_entity(
    payload: EntityCreate,
    divisions: DivisionRegistry = Depends(get_divisions),
) -> dict[str, Any]:
    return ok(divisions.create_entity(payload, agent_id="API"))


@divisions_router.get("/entities/{entity_id}")
async def get_entity(
    entity_id: str,
    divisions: DivisionRegistry = Depends(get_divisions),
) -> dict[str, Any]:
    return ok(divisions.get_entity(entity_id))


@divisions_router.put("/entities/{entity_id}")
async def update_entity(
    entity_id: str,
    payload: EntityUpdate,
    divisions: DivisionRegistry = Depends(get_divisions),
) -> dict[str, Any]:
    return ok(divisions.update_entity(entity_id, payload, agent_id="API"))


@divisions_router.post("/entities/{entity_id}/activities", status_code=status.HTTP_201_CREATED)
async def add_activity(
    entity_id: str,
    payload: ActivityCreate,
    divisions: DivisionRegistry = Depends(get_divisions),
) -> dict[str, Any]:
    return ok(divisions.add_activity(entity_id, payload))


@divisions_router.get("/entities/{entity_id}/activities")
async def list_activities(
    entity_id: str,
    limit: int = Query(default=50, ge=0),
    divisions: DivisionRegistry = Depends(get_divisions),
) -> dict[str, Any]:
    activities, total = divisions.list_activities(entity_id, limit)
    return ok(activities, total=total)


@divisions_router.get("/stats")
async def system_stats(divisions: DivisionRegistry = Depends(get_divisions)) -> dict[str, Any]:
    return ok(divisions.system_stats())
