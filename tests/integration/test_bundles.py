"""
Integration tests for bundle and sales dashboard endpoints.

Covers:
  GET /api/v1/bundles
  GET /api/v1/sales/monthly
  GET /api/v1/sales/stats
"""

from __future__ import annotations

from unittest.mock import AsyncMock

from httpx import AsyncClient

from storefront.services.bundle_service import bundle_analysis_service


class TestBundles:
    async def test_bundle_example(self, async_client: AsyncClient, seeded_sales):
        response = await async_client.get("/api/v1/bundles", params={"min_frequency": 2})
        assert response.status_code == 200
        (pair,) = response.json()
        assert pair["frequency"] == 2
        assert pair["originalPrice"] == 30
        assert pair["discount"] == 3
        assert pair["bundlePrice"] == 27
        assert pair["discountPercentage"] == 10
        assert sorted(pair["buyers"]) == ["u1", "u2"]

    async def test_wrong_typed_sale_date_does_not_break_dashboard(
        self, async_client: AsyncClient, store, seeded_sales
    ):
        await store.add("sales", {"buyer": "u9", "productId": "Z", "price": 1, "date": ["2024-01-01"]})
        await store.add("sales", {"buyer": "u9", "productId": "Y", "price": 1, "date": 1704067200})

        response = await async_client.get("/api/v1/bundles")
        assert response.status_code == 200
        assert len(response.json()) == 1

    async def test_no_sales_returns_empty_list(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/bundles")
        assert response.status_code == 200
        assert response.json() == []

    async def test_min_frequency_validated(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/bundles", params={"min_frequency": 0})
        assert response.status_code == 422

    async def test_fetch_failure_returns_503(self, async_client: AsyncClient, monkeypatch):
        monkeypatch.setattr(
            bundle_analysis_service.sales_repo,
            "get_all_by_date",
            AsyncMock(side_effect=ConnectionError("store down")),
        )
        response = await async_client.get("/api/v1/bundles")
        assert response.status_code == 503


class TestSales:
    async def test_monthly(self, async_client: AsyncClient, seeded_sales):
        response = await async_client.get("/api/v1/sales/monthly")
        assert response.status_code == 200
        assert response.json() == [
            {"month": "2024-01", "label": "Jan 2024", "quantity": 4, "revenue": 60.0, "orders": 4}
        ]

    async def test_stats_for_product(self, async_client: AsyncClient, seeded_sales):
        response = await async_client.get("/api/v1/sales/stats", params={"product_name": "Product A"})
        assert response.status_code == 200
        data = response.json()
        assert data["totalOrders"] == 2
        assert data["totalRevenue"] == 20.0
        assert data["avgOrderValue"] == 10.0
