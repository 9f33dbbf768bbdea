from .analytics import (
    EventType,
    InteractionEvent,
    ProductScore,
    TrackEventRequest,
    CartActionRequest,
    AnalyticsSummary,
)
from .bundle import BundleProduct, ProductPair
from .sales import SaleRecord, MonthlySales, SalesStats
from .product import (
    Product,
    ProductCreate,
    ProductUpdate,
    SimilarProduct,
    SimilarityResult,
)
