"""
ProductCatalog — in-memory каталог товаров e-commerce дивизиона.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from .core.errors import AlreadyExistsError, NotFoundError

logger = logging.getLogger(__name__)


class Product(BaseModel):
    name: str = Field(..., min_length=1)
    sku: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)


class ProductUpdate(BaseModel):
    """Частичное обновление товара: SKU не меняется."""

    name: Optional[str] = Field(default=None, min_length=1)
    price: Optional[float] = Field(default=None, ge=0)


SAMPLE_PRODUCTS: tuple[Product, ...] = (
    Product(name="Sample T-Shirt", sku="TSHIRT001", price=19.99),
    Product(name="Coffee Mug", sku="MUG001", price=12.5),
    Product(name="Digital Download", sku="DIGI001", price=7.99),
)


class ProductCatalog:
    """Каталог товаров с уникальным SKU."""

    def __init__(self, products: Iterable[Product] = ()) -> None:
        self._products: dict[str, Product] = {}
        self._lock = Lock()
        for product in products:
            self.create(product)

    @classmethod
    def with_samples(cls) -> ProductCatalog:
        return cls(SAMPLE_PRODUCTS)

    def search(self, query: Optional[str]) -> list[Product]:
        """
        Найти товары по подстроке в name или sku (без учёта регистра).

        Пустой запрос возвращает пустой список, а не весь каталог.
        """
        needle = (query or "").strip().lower()
        if not needle:
            return []
        with self._lock:
            return [
                product.model_copy()
                for product in self._products.values()
                if needle in product.name.lower() or needle in product.sku.lower()
            ]

    def get(self, sku: str) -> Product:
        with self._lock:
            return self._require(sku).model_copy()

    def create(self, product: Product) -> Product:
        """
        Добавить товар.

        Raises:
            AlreadyExistsError: SKU уже есть в каталоге.
        """
        with self._lock:
            if product.sku in self._products:
                raise AlreadyExistsError(f"SKU '{product.sku}' already exists")
            self._products[product.sku] = product.model_copy()
        logger.info("Product '%s' added to catalog", product.sku)
        return product.model_copy()

    def update(self, sku: str, changes: ProductUpdate) -> Product:
        with self._lock:
            current = self._require(sku)
            updated = current.model_copy(update=changes.model_dump(exclude_none=True))
            self._products[sku] = updated
            return updated.model_copy()

    def delete(self, sku: str) -> Product:
        with self._lock:
            removed = self._require(sku)
            del self._products[sku]
        logger.info("Product '%s' removed from catalog", sku)
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._products)

    def _require(self, sku: str) -> Product:
        product = self._products.get(sku)
        if product is None:
            raise NotFoundError(f"Product '{sku}' not found")
        return product
