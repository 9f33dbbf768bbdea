"""
Top-level pytest configuration.

Provides:
  - A fakeredis-backed DocumentStore, fresh for every test.
  - An async_client fixture wired to the FastAPI app with the document store
    dependency pointed at the fake store.
  - Builders for seeding sales and products.
"""

from __future__ import annotations

import os
from typing import AsyncGenerator

# ---------------------------------------------------------------------------
# Environment must be set BEFORE any storefront module is imported so that
# pydantic-settings picks up the test values.
# ---------------------------------------------------------------------------
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("STORE_KEY_PREFIX", "test")
os.environ.setdefault("EMBEDDING_ENABLED", "false")

import fakeredis
import fakeredis.aioredis as fakeredis_async
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from storefront.core.document_store import DocumentStore


# ---------------------------------------------------------------------------
# Redis: fakeredis, so all store-dependent code works without a real server.
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def fake_redis():
    server = fakeredis.FakeServer()
    client = fakeredis_async.FakeRedis(server=server, decode_responses=True)
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def store(fake_redis) -> DocumentStore:
    return DocumentStore(fake_redis, prefix="test")


@pytest.fixture(autouse=True)
def mock_redis(monkeypatch, fake_redis):
    """Replace the shared Redis client with the per-test fake instance."""

    async def _get_redis():
        return fake_redis

    monkeypatch.setattr("storefront.core.redis_client.get_redis", _get_redis)


# ---------------------------------------------------------------------------
# FastAPI client
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def async_client(store: DocumentStore) -> AsyncGenerator[AsyncClient, None]:
    """
    Provide an httpx AsyncClient backed by the FastAPI app.

    The document store dependency is overridden so requests and test
    assertions share one fake store.
    """
    from storefront.core.redis_client import get_document_store
    from storefront.main import app

    async def _override_get_document_store():
        return store

    app.dependency_overrides[get_document_store] = _override_get_document_store

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as client:
        yield client

    app.dependency_overrides.clear()
    scheduler = getattr(app.state, "cart_scheduler", None)
    if scheduler is not None:
        scheduler.cancel_all()
        app.state.cart_scheduler = None


# ---------------------------------------------------------------------------
# Seeding helpers
# ---------------------------------------------------------------------------
def make_sale(
    buyer: str,
    day: str,
    product_id: str,
    price: float,
    product_name: str | None = None,
    quantity: int = 1,
) -> dict:
    """Sale document in the store's camelCase shape."""
    return {
        "buyer": buyer,
        "date": day if "T" in day else f"{day}T12:00:00+00:00",
        "productId": product_id,
        "productName": product_name or f"Product {product_id}",
        "price": price,
        "quantity": quantity,
        "total": price * quantity,
        "region": "EU",
        "paymentMethod": "card",
    }


@pytest_asyncio.fixture
async def seeded_sales(store: DocumentStore) -> list[dict]:
    """The A/B example: bought together by u1 and u2 on different days."""
    sales = [
        make_sale("u1", "2024-01-01", "A", 10),
        make_sale("u1", "2024-01-01", "B", 20),
        make_sale("u2", "2024-01-02", "A", 10),
        make_sale("u2", "2024-01-02", "B", 20),
    ]
    for sale in sales:
        await store.add("sales", sale)
    return sales


@pytest.fixture
def product_payload() -> dict:
    return {
        "id": 1,
        "name": "Trail Running Shoes",
        "category": "Footwear",
        "description": "Lightweight shoes for trail running",
        "price": 120.0,
        "inStock": True,
    }
