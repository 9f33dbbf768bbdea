# Repositories package
from .base import BaseRepository
from .event_repository import EventRepository
from .score_repository import ScoreRepository
from .sales_repository import SalesRepository
from .product_repository import ProductRepository

__all__ = [
    "BaseRepository",
    "EventRepository",
    "ScoreRepository",
    "SalesRepository",
    "ProductRepository",
]
