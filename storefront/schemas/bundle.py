from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import List


class BundleProduct(BaseModel):
    """Product snapshot taken from the first basket containing the pair"""
    id: str
    name: str
    price: float


class ProductPair(BaseModel):
    """Frequently co-purchased pair offered as a discounted bundle"""
    product1: BundleProduct
    product2: BundleProduct
    frequency: int
    buyers: List[str]
    bundle_price: float
    original_price: float
    discount: float
    discount_percentage: float

    class Config:
        alias_generator = to_camel
        populate_by_name = True
