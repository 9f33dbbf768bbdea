"""
Cart abandonment detection.

When a product is added to the cart a countdown starts. If the product is
neither removed nor purchased before it elapses, a ``cart_abandon`` event is
tracked for it. Each product has at most one pending countdown; adding the
same product again restarts it.

Timers live in memory on the running event loop and are lost on restart.
"""

from __future__ import annotations
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set

from storefront.core.config import settings
from storefront.core.document_store import DocumentStore
from storefront.schemas.analytics import EventType, ProductId
from storefront.services.scoring_service import ScoringService, scoring_service as default_scoring_service

logger = logging.getLogger(__name__)


class CartTimerScheduler:
    """
    Owns the pending abandonment countdowns for one store/session.

    Must be used from within a running asyncio event loop.

    Example:
        scheduler = CartTimerScheduler(store)
        await scheduler.track_add_to_cart(42, user_id="u1")
        ...
        scheduler.track_purchase(42)  # no abandonment fires
    """

    def __init__(
        self,
        store: DocumentStore,
        scoring: Optional[ScoringService] = None,
        timeout_seconds: Optional[float] = None
    ):
        self.store = store
        self.scoring = scoring or default_scoring_service
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.cart_abandon_timeout_seconds
        )
        self._timers: Dict[str, asyncio.TimerHandle] = {}
        self._firing: Set[asyncio.Task] = set()

    @staticmethod
    def _key(product_id: ProductId) -> str:
        return str(product_id)

    def pending(self, product_id: ProductId) -> bool:
        return self._key(product_id) in self._timers

    def start_cart_timer(self, product_id: ProductId) -> None:
        """Start (or restart) the abandonment countdown for a product."""
        key = self._key(product_id)
        existing = self._timers.pop(key, None)
        if existing is not None:
            existing.cancel()

        loop = asyncio.get_running_loop()
        self._timers[key] = loop.call_later(self.timeout_seconds, self._expire, key, product_id)

    def clear_cart_timer(self, product_id: ProductId) -> None:
        """Cancel the countdown for a product; no-op if none is pending."""
        timer = self._timers.pop(self._key(product_id), None)
        if timer is not None:
            timer.cancel()

    def _expire(self, key: str, product_id: ProductId) -> None:
        self._timers.pop(key, None)
        logger.info("Cart abandonment timeout for product %s", product_id)
        task = asyncio.get_running_loop().create_task(
            self.scoring.track_event(self.store, product_id, EventType.CART_ABANDON)
        )
        self._firing.add(task)
        task.add_done_callback(self._firing.discard)

    async def track_cart_removal(
        self,
        product_id: ProductId,
        user_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """Explicit removal: stop the countdown and record the abandonment now."""
        self.clear_cart_timer(product_id)
        await self.scoring.track_event(
            self.store, product_id, EventType.CART_ABANDON, user_id, metadata
        )

    async def track_add_to_cart(
        self,
        product_id: ProductId,
        user_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """Record an add-to-cart and start the abandonment countdown."""
        self.clear_cart_timer(product_id)
        await self.scoring.track_event(
            self.store,
            product_id,
            EventType.ADD_TO_CART,
            user_id,
            {"addedAt": datetime.now(timezone.utc).isoformat(), **(metadata or {})},
        )
        self.start_cart_timer(product_id)

    def track_purchase(self, product_id: ProductId) -> None:
        """Checkout completed: stop the countdown without a penalty."""
        self.clear_cart_timer(product_id)

    def cancel_all(self) -> None:
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()

    async def drain(self) -> None:
        """Wait for abandonment events that have already fired."""
        if self._firing:
            await asyncio.gather(*list(self._firing), return_exceptions=True)
