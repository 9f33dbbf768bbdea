"""
Product catalog service.

Products are looked up by their numeric catalog id, which is stored as a
field of a document with a generated id.
"""

from __future__ import annotations
from typing import List, Optional
import logging

from storefront.core.document_store import DocumentStore, ServerTimestamp
from storefront.core.exceptions import ProductAlreadyExistsError, ProductNotFoundError
from storefront.repositories.product_repository import ProductRepository
from storefront.schemas.product import Product, ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


class ProductService:
    """Service for catalog CRUD with distinguishable not-found / already-exists errors."""

    def __init__(self, product_repo: Optional[ProductRepository] = None):
        self.product_repo = product_repo or ProductRepository()

    async def get_all_products(self, store: DocumentStore) -> List[Product]:
        try:
            return await self.product_repo.get_all(store, order_by="id")
        except Exception as e:
            logger.error(f"Error fetching products: {e}")
            raise

    async def get_product(self, store: DocumentStore, product_id: int) -> Product:
        match = await self.product_repo.find_by_catalog_id(store, product_id)
        if match is None:
            raise ProductNotFoundError(product_id)
        return match[1]

    async def add_product(self, store: DocumentStore, product_in: ProductCreate) -> int:
        """
        Add a product to the catalog.

        Returns:
            The catalog id of the new product

        Raises:
            ProductAlreadyExistsError: If a product with this id exists
        """
        if await self.product_repo.find_by_catalog_id(store, product_in.id) is not None:
            raise ProductAlreadyExistsError(product_in.id)

        document = product_in.model_dump(by_alias=True)
        document["createdAt"] = ServerTimestamp()
        document["updatedAt"] = ServerTimestamp()
        await self.product_repo.create(store, document)

        logger.info("Product %s added", product_in.id)
        return product_in.id

    async def update_product(
        self,
        store: DocumentStore,
        product_id: int,
        product_in: ProductUpdate
    ) -> Product:
        """
        Apply a partial update; only fields set on product_in are written.

        Raises:
            ProductNotFoundError: If no product has this id
        """
        match = await self.product_repo.find_by_catalog_id(store, product_id)
        if match is None:
            raise ProductNotFoundError(product_id)

        doc_id, _ = match
        changes = product_in.model_dump(by_alias=True, exclude_unset=True)
        changes["updatedAt"] = ServerTimestamp()
        await self.product_repo.update(store, doc_id, changes)
        return await self.product_repo.get(store, doc_id)

    async def delete_product(self, store: DocumentStore, product_id: int) -> None:
        """
        Raises:
            ProductNotFoundError: If no product has this id
        """
        match = await self.product_repo.find_by_catalog_id(store, product_id)
        if match is None:
            raise ProductNotFoundError(product_id)
        await self.product_repo.delete(store, match[0])
        logger.info("Product %s deleted", product_id)


# Global instance
product_service = ProductService()
