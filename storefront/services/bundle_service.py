"""
Bundle recommendation service.

Mines co-purchases from the sales log: sales are grouped into baskets (one
buyer, one calendar day), every pair of distinct products in a basket is
counted, and pairs bought together often enough are offered as a bundle at a
fixed discount.

Everything is recomputed from the full sales log on each call; there is no
cached or incremental aggregate.
"""

from __future__ import annotations
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple
import logging

from storefront.core.config import settings
from storefront.core.document_store import DocumentStore
from storefront.core.exceptions import SalesDataUnavailableError
from storefront.repositories.sales_repository import SalesRepository
from storefront.schemas.bundle import BundleProduct, ProductPair
from storefront.schemas.sales import SaleRecord
from storefront.utils.dates import as_utc

logger = logging.getLogger(__name__)

BasketKey = Tuple[str, date]
PairKey = Tuple[str, str]


def purchase_day(moment: datetime) -> date:
    """Calendar day of a sale in UTC; naive datetimes are taken as UTC."""
    return as_utc(moment).date()


def pair_key(first_id: str, second_id: str) -> PairKey:
    """Order-independent key for a product pair."""
    return tuple(sorted((str(first_id), str(second_id))))


class BundleAnalysisService:
    """
    Service for deriving bundle suggestions from historical sales.

    The analysis itself (analyze_bundle_opportunities) is pure and operates
    on an in-memory snapshot; only get_bundle_suggestions touches the store.
    """

    def __init__(
        self,
        sales_repo: Optional[SalesRepository] = None,
        discount_percentage: Optional[float] = None
    ):
        """
        Initialize service with repositories.

        Args:
            sales_repo: SalesRepository instance (creates new if None)
            discount_percentage: Bundle discount in percent (settings if None)
        """
        self.sales_repo = sales_repo or SalesRepository()
        self.discount_percentage = (
            discount_percentage if discount_percentage is not None else settings.bundle_discount_percentage
        )

    @staticmethod
    def group_baskets(sales: List[SaleRecord]) -> Dict[BasketKey, List[SaleRecord]]:
        """Group sales by (buyer, purchase day), preserving log order."""
        baskets: Dict[BasketKey, List[SaleRecord]] = {}
        for sale in sales:
            baskets.setdefault((sale.buyer, purchase_day(sale.date)), []).append(sale)
        return baskets

    def _new_pair(self, first: SaleRecord, second: SaleRecord) -> ProductPair:
        original_price = first.price + second.price
        discount = round(original_price * self.discount_percentage / 100, 2)
        return ProductPair(
            product1=BundleProduct(id=first.product_id, name=first.product_name, price=first.price),
            product2=BundleProduct(id=second.product_id, name=second.product_name, price=second.price),
            frequency=0,
            buyers=[],
            bundle_price=round(original_price - discount, 2),
            original_price=original_price,
            discount=discount,
            discount_percentage=self.discount_percentage,
        )

    def analyze_bundle_opportunities(
        self,
        sales: List[SaleRecord],
        min_frequency: Optional[int] = None
    ) -> List[ProductPair]:
        """
        Find product pairs that are frequently bought together.

        Args:
            sales: Sales log snapshot
            min_frequency: Minimum number of co-purchases of a pair, counted
                once per pair of line items in a basket, so a basket holding A
                once and B twice adds 2 to (A, B)
                (settings.bundle_min_frequency if None)

        Returns:
            Pairs with frequency >= min_frequency, most frequent first. Ties
            keep the order in which pairs were first seen.

        Example:
            pairs = service.analyze_bundle_opportunities(sales, min_frequency=2)
            for pair in pairs:
                print(pair.product1.name, pair.product2.name, pair.bundle_price)
        """
        if min_frequency is None:
            min_frequency = settings.bundle_min_frequency

        product_pairs: Dict[PairKey, ProductPair] = {}

        for (buyer, _), purchases in self.group_baskets(sales).items():
            if len(purchases) < 2:
                continue

            for i in range(len(purchases)):
                for j in range(i + 1, len(purchases)):
                    first, second = purchases[i], purchases[j]
                    if first.product_id == second.product_id:
                        continue

                    key = pair_key(first.product_id, second.product_id)
                    pair = product_pairs.get(key)
                    if pair is None:
                        # Names and prices are frozen at the first basket seen
                        pair = product_pairs[key] = self._new_pair(first, second)

                    pair.frequency += 1
                    if buyer not in pair.buyers:
                        pair.buyers.append(buyer)

        results = [pair for pair in product_pairs.values() if pair.frequency >= min_frequency]
        results.sort(key=lambda pair: pair.frequency, reverse=True)
        logger.info(
            "Bundle analysis: %d sales, %d candidate pairs, %d with frequency >= %d",
            len(sales), len(product_pairs), len(results), min_frequency,
        )
        return results

    async def fetch_sales_data(self, store: DocumentStore) -> List[SaleRecord]:
        """
        Fetch the full sales log, newest first.

        Raises:
            SalesDataUnavailableError: If the store cannot be read
        """
        try:
            return await self.sales_repo.get_all_by_date(store)
        except Exception as e:
            logger.error(f"Error fetching sales data: {e}")
            raise SalesDataUnavailableError("Failed to fetch sales data") from e

    async def get_bundle_suggestions(
        self,
        store: DocumentStore,
        min_frequency: Optional[int] = None
    ) -> List[ProductPair]:
        """Fetch sales and analyze them; fetch failures propagate to the caller."""
        sales = await self.fetch_sales_data(store)
        return self.analyze_bundle_opportunities(sales, min_frequency)


# Global instance
bundle_analysis_service = BundleAnalysisService()
