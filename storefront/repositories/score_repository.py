"""
Repository for per-product engagement scores (``productScores`` collection).

The score document id is the product id, so every event for a product lands
on the same hash and can be applied with server-side increments.
"""

from __future__ import annotations
from typing import Callable, Optional
from redis.exceptions import RedisError
import logging

from storefront.core.document_store import DocumentStore, Increment, ServerTimestamp
from storefront.schemas.analytics import ProductId, ProductScore
from .base import BaseRepository

logger = logging.getLogger(__name__)


class ScoreRepository(BaseRepository[ProductScore]):
    """
    Repository for ProductScore documents.

    Provides methods for:
    - Applying an event's point delta as an atomic upsert
    - Re-deriving the normalized score from the stored raw score
    """

    def __init__(self):
        """Initialize with ProductScore schema."""
        super().__init__(ProductScore, "productScores")

    async def get_by_product(
        self,
        store: DocumentStore,
        product_id: ProductId
    ) -> Optional[ProductScore]:
        return await self.get(store, str(product_id))

    async def apply_event(
        self,
        store: DocumentStore,
        product_id: ProductId,
        event_type: str,
        points: int
    ) -> dict:
        """
        Add one event to a product's score, creating the document if needed.

        The count and the raw score are incremented in the same MULTI/EXEC, so
        concurrent first events for a new product both land and the raw score
        always equals the weighted sum of the counts.

        Args:
            store: Document store
            product_id: Product the event belongs to
            event_type: Event type value (e.g. "add_to_cart")
            points: Point delta for this event type

        Returns:
            Post-increment values, e.g. {"rawScore": 19, "eventCounts": {"add_to_cart": 1}}
        """
        try:
            return await store.update(
                self.collection,
                str(product_id),
                {
                    "productId": product_id,
                    "rawScore": Increment(points),
                    "eventCounts": {event_type: Increment(1)},
                    "lastUpdated": ServerTimestamp(),
                },
                create=True,
            )
        except RedisError as e:
            logger.error(f"Error applying {event_type} to score of product {product_id}: {e}")
            raise

    async def refresh_normalized(
        self,
        store: DocumentStore,
        product_id: ProductId,
        normalize: Callable[[float], float]
    ) -> Optional[ProductScore]:
        """
        Recompute normalizedScore from the stored rawScore.

        Runs as a WATCHed transaction so the written value always matches the
        raw score it was derived from, even when another event lands between
        the read and the write.

        Returns:
            The updated score, or None if the product has no score document
        """
        def _recompute(document: dict) -> dict:
            return {
                "normalizedScore": normalize(document.get("rawScore", 0)),
                "lastUpdated": ServerTimestamp(),
            }

        try:
            document = await store.transaction(self.collection, str(product_id), _recompute)
        except RedisError as e:
            logger.error(f"Error refreshing normalized score of product {product_id}: {e}")
            raise
        if document is None:
            return None
        return self.parse(str(product_id), document)
