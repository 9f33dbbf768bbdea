"""
Sales analytics service for the seller dashboard.

Aggregates the sales log into monthly quantity/revenue/order series and
headline statistics, optionally restricted to one product.
"""

from __future__ import annotations
from typing import Dict, List, Optional
import logging

from storefront.core.document_store import DocumentStore
from storefront.schemas.sales import MonthlySales, SaleRecord, SalesStats
from storefront.services.bundle_service import BundleAnalysisService, bundle_analysis_service
from storefront.utils.dates import as_utc

logger = logging.getLogger(__name__)


def filter_by_product(sales: List[SaleRecord], product_name: Optional[str]) -> List[SaleRecord]:
    if not product_name or product_name == "all":
        return sales
    return [sale for sale in sales if sale.product_name == product_name]


class SalesAnalyticsService:
    """
    Service for monthly sales series and summary statistics.

    Reads go through BundleAnalysisService.fetch_sales_data so both
    dashboards share one fail-visible fetch path.
    """

    def __init__(self, bundle_service: Optional[BundleAnalysisService] = None):
        self.bundle_service = bundle_service or bundle_analysis_service

    @staticmethod
    def monthly_sales(
        sales: List[SaleRecord],
        product_name: Optional[str] = None
    ) -> List[MonthlySales]:
        """
        Group sales by calendar month in UTC, the same clock bundle baskets use.

        Returns:
            One entry per month that has sales, oldest month first:
            [MonthlySales(month="2024-01", label="Jan 2024", quantity=3, revenue=60.0, orders=2), ...]
        """
        groups: Dict[str, List[SaleRecord]] = {}
        for sale in filter_by_product(sales, product_name):
            groups.setdefault(as_utc(sale.date).strftime("%Y-%m"), []).append(sale)

        series = []
        for month in sorted(groups):
            month_sales = groups[month]
            series.append(MonthlySales(
                month=month,
                label=as_utc(month_sales[0].date).strftime("%b %Y"),
                quantity=sum(sale.quantity or 0 for sale in month_sales),
                revenue=sum(sale.total or 0 for sale in month_sales),
                orders=len(month_sales),
            ))
        return series

    @staticmethod
    def sales_stats(
        sales: List[SaleRecord],
        product_name: Optional[str] = None
    ) -> SalesStats:
        filtered = filter_by_product(sales, product_name)
        total_revenue = sum(sale.total or 0 for sale in filtered)
        total_orders = len(filtered)
        return SalesStats(
            total_orders=total_orders,
            total_quantity=sum(sale.quantity or 0 for sale in filtered),
            total_revenue=total_revenue,
            avg_order_value=total_revenue / total_orders if total_orders > 0 else 0,
        )

    async def get_monthly_sales(
        self,
        store: DocumentStore,
        product_name: Optional[str] = None
    ) -> List[MonthlySales]:
        sales = await self.bundle_service.fetch_sales_data(store)
        return self.monthly_sales(sales, product_name)

    async def get_sales_stats(
        self,
        store: DocumentStore,
        product_name: Optional[str] = None
    ) -> SalesStats:
        sales = await self.bundle_service.fetch_sales_data(store)
        return self.sales_stats(sales, product_name)


# Global instance
sales_analytics_service = SalesAnalyticsService()
