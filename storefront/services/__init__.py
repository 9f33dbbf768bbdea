from .scoring_service import ScoringService, normalize_score
from .cart_timer_service import CartTimerScheduler
from .bundle_service import BundleAnalysisService
from .sales_analytics_service import SalesAnalyticsService
from .product_service import ProductService
from .similarity_service import ProductSimilarityService
from .embedding_service import EmbeddingService

__all__ = [
    "ScoringService",
    "normalize_score",
    "CartTimerScheduler",
    "BundleAnalysisService",
    "SalesAnalyticsService",
    "ProductService",
    "ProductSimilarityService",
    "EmbeddingService",
]
