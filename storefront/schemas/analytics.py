"""
Engagement analytics schemas.

Documents in the store use camelCase field names (``productId``,
``eventCounts``); these models accept either spelling and serialize with the
camelCase aliases so dashboards read the same shape the store holds.
"""

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, Dict, Any, Union
from datetime import datetime
from enum import Enum

ProductId = Union[int, str]


class EventType(str, Enum):
    HOVER_2S = "hover_2s"
    HOVER_5S = "hover_5s"
    PRODUCT_CLICK = "product_click"
    ADD_TO_CART = "add_to_cart"
    CART_ABANDON = "cart_abandon"


def empty_event_counts() -> Dict[str, int]:
    return {event.value: 0 for event in EventType}


class InteractionEvent(BaseModel):
    """Append-only record of a single tracked interaction"""
    product_id: ProductId
    event_type: EventType
    session_id: str
    timestamp: Optional[datetime] = None  # Assigned by the store
    user_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ProductScore(BaseModel):
    """Accumulated engagement score for one product"""
    product_id: ProductId
    raw_score: float = 0
    normalized_score: float = 0
    event_counts: Dict[str, int] = Field(default_factory=empty_event_counts)
    last_updated: Optional[datetime] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @field_validator("event_counts", mode="before")
    @classmethod
    def fill_missing_counts(cls, value):
        counts = empty_event_counts()
        counts.update(value or {})
        return counts


class TrackEventRequest(BaseModel):
    product_id: ProductId
    event_type: EventType
    user_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class CartActionRequest(BaseModel):
    user_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class AnalyticsSummary(BaseModel):
    """Totals across every scored product for the dashboard summary cards"""
    tracked_products: int
    total_events: int
    event_totals: Dict[str, int]
    point_labels: Dict[str, str]  # e.g. {"hover_2s": "+2"}

    class Config:
        alias_generator = to_camel
        populate_by_name = True
