"""
Дивизионы Covenant: отраслевые направления, юрлица и журнал активностей.
"""

from .models import (
    Activity,
    ActivityCreate,
    Division,
    DivisionExport,
    Entity,
    EntityCreate,
    EntityUpdate,
    SystemStats,
)
from .registry import DIVISION_CONFIGS, DivisionRegistry

__all__ = [
    "DIVISION_CONFIGS",
    "Activity",
    "ActivityCreate",
    "Division",
    "DivisionExport",
    "DivisionRegistry",
    "Entity",
    "EntityCreate",
    "EntityUpdate",
    "SystemStats",
]
