"""
Общие хелперы HTTP-слоя: доступ к состоянию приложения и формат ответа.
"""

from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder

from ..banking import Ledger
from ..catalog import ProductCatalog
from ..core.envelope import utc_now
from ..divisions import DivisionRegistry
from ..system import CovenantSystem


def ok(data: Any = None, **extra: Any) -> dict[str, Any]:
    """Успешный ответ `{success, data, timestamp}`."""
    body: dict[str, Any] = {"success": True, "data": jsonable_encoder(data)}
    body.update(jsonable_encoder(extra))
    body["timestamp"] = utc_now().isoformat()
    return body


def get_system(request: Request) -> CovenantSystem:
    return request.app.state.system


def get_divisions(request: Request) -> DivisionRegistry:
    return request.app.state.divisions


def get_catalog(request: Request) -> ProductCatalog:
    return request.app.state.catalog


def get_ledger(request: Request) -> Ledger:
    return request.app.state.ledger
