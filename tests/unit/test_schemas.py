"""
Unit tests for store-facing schemas.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from storefront.schemas.analytics import EventType, ProductScore, TrackEventRequest
from storefront.schemas.product import ProductCreate, ProductUpdate
from storefront.schemas.sales import SaleRecord


class TestProductScore:
    def test_missing_counts_are_filled_with_zero(self):
        score = ProductScore.model_validate({"productId": 1, "eventCounts": {"hover_2s": 3}})
        assert score.event_counts == {
            "hover_2s": 3,
            "hover_5s": 0,
            "product_click": 0,
            "add_to_cart": 0,
            "cart_abandon": 0,
        }

    def test_serializes_with_camel_case(self):
        dumped = ProductScore(product_id="a", raw_score=2).model_dump(by_alias=True)
        assert {"productId", "rawScore", "normalizedScore", "eventCounts"} <= dumped.keys()


class TestTrackEventRequest:
    def test_accepts_int_and_str_product_ids(self):
        assert TrackEventRequest(productId=7, eventType="hover_2s").product_id == 7
        assert TrackEventRequest(productId="sku-7", eventType="hover_2s").product_id == "sku-7"

    def test_event_type_is_enum(self):
        request = TrackEventRequest(productId=1, eventType="add_to_cart")
        assert request.event_type is EventType.ADD_TO_CART

    def test_unknown_event_type_rejected(self):
        with pytest.raises(ValidationError):
            TrackEventRequest(productId=1, eventType="scroll")


class TestSaleRecord:
    def test_numeric_product_id_becomes_string(self):
        sale = SaleRecord.model_validate({
            "buyer": "u1",
            "date": "2024-01-01T12:00:00+00:00",
            "productId": 12,
            "price": 10,
        })
        assert sale.product_id == "12"

    def test_missing_date_rejected(self):
        with pytest.raises(ValidationError):
            SaleRecord.model_validate({"buyer": "u1", "productId": "A", "price": 10})


class TestProductSchemas:
    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            ProductCreate(id=1, name="Mug", category="Kitchen", price=-1)

    def test_update_dumps_only_given_fields(self):
        update = ProductUpdate(inStock=False)
        assert update.model_dump(exclude_unset=True, by_alias=True) == {"inStock": False}
