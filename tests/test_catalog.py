"""
Тесты для ProductCatalog.
"""

import pydantic
import pytest

from covenant_service.catalog import Product, ProductCatalog, ProductUpdate
from covenant_service.core import AlreadyExistsError, NotFoundError


@pytest.fixture
def catalog():
    return ProductCatalog.with_samples()


class TestSearch:
    def test_empty_query_returns_nothing(self, catalog):
        assert catalog.search("") == []
        assert catalog.search(None) == []

    def test_matches_name_and_sku(self, catalog):
        assert [p.sku for p in catalog.search("mug")] == ["MUG001"]
        assert [p.sku for p in catalog.search("digi")] == ["DIGI001"]
        assert catalog.search("sword") == []


class TestMutations:
    def test_create_duplicate_sku(self, catalog):
        with pytest.raises(AlreadyExistsError):
            catalog.create(Product(name="Other Mug", sku="MUG001", price=1))

    def test_update(self, catalog):
        updated = catalog.update("MUG001", ProductUpdate(price=15.0))

        assert updated.price == 15.0
        assert updated.name == "Coffee Mug"

    def test_update_missing(self, catalog):
        with pytest.raises(NotFoundError):
            catalog.update("NOPE", ProductUpdate(name="x"))

    def test_delete(self, catalog):
        removed = catalog.delete("DIGI001")

        assert removed.name == "Digital Download"
        assert len(catalog) == 2
        with pytest.raises(NotFoundError):
            catalog.delete("DIGI001")

    def test_negative_price_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            Product(name="Cursed Ring", sku="RING001", price=-1)
