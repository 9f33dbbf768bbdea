from __future__ import annotations
from typing import Any, Dict, Optional
import logging

from storefront.core.document_store import DocumentStore, ServerTimestamp
from storefront.schemas.analytics import InteractionEvent, ProductId
from .base import BaseRepository

logger = logging.getLogger(__name__)


class EventRepository(BaseRepository[InteractionEvent]):
    """Append-only log of interaction events (``analytics`` collection)."""

    def __init__(self):
        super().__init__(InteractionEvent, "analytics")

    async def append(
        self,
        store: DocumentStore,
        product_id: ProductId,
        event_type: str,
        session_id: str,
        user_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> str:
        """Record one event; optional fields are only stored when they have values."""
        document: Dict[str, Any] = {
            "productId": product_id,
            "eventType": event_type,
            "sessionId": session_id,
            "timestamp": ServerTimestamp(),
        }
        if user_id:
            document["userId"] = user_id
        if metadata:
            document["metadata"] = metadata
        return await self.create(store, document)

    async def get_for_product(
        self,
        store: DocumentStore,
        product_id: ProductId
    ) -> list[InteractionEvent]:
        return [event for _, event in await self.find_by(store, "productId", product_id)]
