from __future__ import annotations
import logging

from storefront.core.document_store import DocumentStore
from storefront.schemas.sales import SaleRecord
from storefront.utils.dates import as_utc
from .base import BaseRepository

logger = logging.getLogger(__name__)


class SalesRepository(BaseRepository[SaleRecord]):
    """Read-only access to the historical sales log (``sales`` collection)."""

    def __init__(self):
        super().__init__(SaleRecord, "sales")

    async def get_all_by_date(self, store: DocumentStore) -> list[SaleRecord]:
        """
        All valid sales, newest first.

        Sorted after validation, on parsed datetimes, so a malformed ``date``
        only drops its own sale.
        """
        sales = await self.get_all(store)
        return sorted(sales, key=lambda sale: as_utc(sale.date), reverse=True)
