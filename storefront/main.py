from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from storefront.core.config import settings
from storefront.core.logging import configure_logging
from storefront.core.redis_client import close_redis_pool, ping
from storefront.api.v1 import analytics, bundles, cart, products, sales
from storefront.services.scoring_service import scoring_service

configure_logging(settings.app_env)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Pending abandonment countdowns are in-memory only; drop them on shutdown
    scheduler = getattr(app.state, "cart_scheduler", None)
    if scheduler is not None:
        scheduler.cancel_all()
        await scheduler.drain()
    await scoring_service.drain()
    await close_redis_pool()


app = FastAPI(
    title="Storefront Insights API",
    description="Engagement scoring and bundle recommendations for the seller dashboard",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(analytics.router, prefix="/api/v1/analytics", tags=["Analytics"])
app.include_router(cart.router, prefix="/api/v1/cart", tags=["Cart"])
app.include_router(bundles.router, prefix="/api/v1/bundles", tags=["Bundles"])
app.include_router(products.router, prefix="/api/v1/products", tags=["Products"])
app.include_router(sales.router, prefix="/api/v1/sales", tags=["Sales"])


@app.get("/healthz")
async def health_check():
    """Health check endpoint"""
    redis_ok = await ping()
    return {"status": "ok" if redis_ok else "degraded", "redis": redis_ok, "version": "1.0.0"}


@app.get("/")
async def root():
    """Root endpoint"""
    return {"message": "Storefront Insights API", "docs": "/docs"}
