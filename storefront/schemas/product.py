from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime


class ProductBase(BaseModel):
    name: str
    category: str
    description: str = ""
    price: float = Field(ge=0)
    image: Optional[str] = None
    in_stock: bool = True

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ProductCreate(ProductBase):
    id: int  # Catalog id, stored as a field; the document id is generated


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    image: Optional[str] = None
    in_stock: Optional[bool] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class Product(ProductBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SimilarProduct(BaseModel):
    product: Product
    score: float


class SimilarityResult(BaseModel):
    most_similar_product: Product
    similarity_score: float
    all_similarities: List[SimilarProduct]

    class Config:
        alias_generator = to_camel
        populate_by_name = True
