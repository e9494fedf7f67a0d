"""
FastAPI-роутеры демонстрационных доменов.
"""

from .banking import banking_router
from .divisions import divisions_router
from .products import products_router

__all__ = ["banking_router", "divisions_router", "products_router"]
