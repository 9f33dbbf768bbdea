from __future__ import annotations
from typing import Optional
import logging

from storefront.core.document_store import DocumentStore
from storefront.schemas.product import Product
from .base import BaseRepository

logger = logging.getLogger(__name__)


class ProductRepository(BaseRepository[Product]):
    """
    Repository for the product catalog (``products`` collection).

    Products are stored under generated document ids; the numeric catalog id
    is a regular ``id`` field and is what callers look products up by.
    """

    def __init__(self):
        super().__init__(Product, "products")

    async def find_by_catalog_id(
        self,
        store: DocumentStore,
        product_id: int
    ) -> Optional[tuple[str, Product]]:
        """
        Returns:
            (document id, product) for the first match, or None
        """
        matches = await self.find_by(store, "id", product_id)
        return matches[0] if matches else None
