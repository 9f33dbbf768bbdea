"""
Unit tests for ProductService against the fake document store.
"""

from __future__ import annotations

import pytest

from storefront.core.document_store import DocumentStore
from storefront.core.exceptions import ProductAlreadyExistsError, ProductNotFoundError
from storefront.schemas.product import ProductCreate, ProductUpdate
from storefront.services.product_service import ProductService


def _product(product_id: int = 1, **overrides) -> ProductCreate:
    fields = {
        "id": product_id,
        "name": "Ceramic Mug",
        "category": "Kitchen",
        "description": "Stoneware mug, 350ml",
        "price": 14.0,
        "in_stock": True,
    }
    fields.update(overrides)
    return ProductCreate(**fields)


class TestAddProduct:
    async def test_add_and_list(self, store: DocumentStore):
        service = ProductService()
        assert await service.add_product(store, _product(2)) == 2
        await service.add_product(store, _product(1, name="Teapot"))

        products = await service.get_all_products(store)
        assert [p.id for p in products] == [1, 2]
        assert products[0].name == "Teapot"
        assert products[0].created_at is not None

    async def test_duplicate_id_rejected(self, store: DocumentStore):
        service = ProductService()
        await service.add_product(store, _product(1))
        with pytest.raises(ProductAlreadyExistsError):
            await service.add_product(store, _product(1, name="Other"))

    async def test_stored_under_generated_document_id(self, store: DocumentStore):
        await ProductService().add_product(store, _product(5))
        (snapshot,) = await store.query_all("products")
        assert snapshot.id != "5"
        assert snapshot.data["id"] == 5
        assert snapshot.data["inStock"] is True


class TestUpdateProduct:
    async def test_partial_update(self, store: DocumentStore):
        service = ProductService()
        await service.add_product(store, _product(1))

        updated = await service.update_product(store, 1, ProductUpdate(price=12.5, in_stock=False))
        assert updated.price == 12.5
        assert updated.in_stock is False
        assert updated.name == "Ceramic Mug"
        assert updated.updated_at is not None

    async def test_update_missing_raises(self, store: DocumentStore):
        with pytest.raises(ProductNotFoundError):
            await ProductService().update_product(store, 404, ProductUpdate(price=1))


class TestDeleteProduct:
    async def test_delete(self, store: DocumentStore):
        service = ProductService()
        await service.add_product(store, _product(1))
        await service.delete_product(store, 1)

        with pytest.raises(ProductNotFoundError):
            await service.get_product(store, 1)

    async def test_delete_missing_raises(self, store: DocumentStore):
        with pytest.raises(ProductNotFoundError):
            await ProductService().delete_product(store, 404)
