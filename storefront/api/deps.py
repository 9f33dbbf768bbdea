from fastapi import Depends, Request
from storefront.core.document_store import DocumentStore
from storefront.core.redis_client import get_document_store
from storefront.services.cart_timer_service import CartTimerScheduler
from storefront.services.scoring_service import ScoringService, scoring_service


def get_scoring_service() -> ScoringService:
    return scoring_service


def get_cart_scheduler(
    request: Request,
    store: DocumentStore = Depends(get_document_store),
    scoring: ScoringService = Depends(get_scoring_service)
) -> CartTimerScheduler:
    """One scheduler per application; created lazily on the first cart call"""
    scheduler = getattr(request.app.state, "cart_scheduler", None)
    if scheduler is None:
        scheduler = CartTimerScheduler(store, scoring=scoring)
        request.app.state.cart_scheduler = scheduler
    return scheduler
