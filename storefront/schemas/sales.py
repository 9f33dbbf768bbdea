from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime


class SaleRecord(BaseModel):
    """One line item of the historical sales log (read-only)"""
    id: Optional[str] = None
    buyer: str
    date: datetime
    product_id: str
    product_name: str = ""
    price: float
    quantity: int = 1
    total: float = 0
    region: Optional[str] = None
    payment_method: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @field_validator("product_id", "id", mode="before")
    @classmethod
    def ids_as_strings(cls, value):
        # Older sales documents store numeric product ids
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class MonthlySales(BaseModel):
    month: str  # "2024-01"
    label: str  # "Jan 2024"
    quantity: int
    revenue: float
    orders: int


class SalesStats(BaseModel):
    total_orders: int
    total_quantity: int
    total_revenue: float
    avg_order_value: float

    class Config:
        alias_generator = to_camel
        populate_by_name = True
