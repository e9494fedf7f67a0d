from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, status

from ..catalog import Product, ProductCatalog, ProductUpdate
from .common import get_catalog, ok

products_router = APIRouter(prefix="/products", tags=["products"])


@products_router.get("")
async def search_products(
    search: Optional[str] = None,
    catalog: ProductCatalog = Depends(get_catalog),
) -> dict[str, Any]:
    """Поиск по name/sku; без параметра search возвращает пустой список."""
    return ok(catalog.search(search))


@products_router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: Product,
    catalog: ProductCatalog = Depends(get_catalog),
) -> dict[str, Any]:
    return ok(catalog.create(payload))


@products_router.get("/{sku}")
async def get_product(sku: str, catalog: ProductCatalog = Depends(get_catalog)) -> dict[str, Any]:
    return ok(catalog.get(sku))


@products_router.put("/{sku}")
async def update_product(
    sku: str,
    payload: ProductUpdate,
    catalog: ProductCatalog = Depends(get_catalog),
) -> dict[str, Any]:
    return ok(catalog.update(sku, payload))


@products_router.delete("/{sku}")
async def delete_product(sku: str, catalog: ProductCatalog = Depends(get_catalog)) -> dict[str, Any]:
    return ok(catalog.delete(sku))
