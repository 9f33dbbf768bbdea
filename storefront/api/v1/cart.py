from fastapi import APIRouter, Depends
from typing import Optional
from storefront.api.deps import get_cart_scheduler
from storefront.schemas.analytics import CartActionRequest
from storefront.services.cart_timer_service import CartTimerScheduler

router = APIRouter()


@router.post("/{product_id}/add")
async def add_to_cart(
    product_id: str,
    action: Optional[CartActionRequest] = None,
    scheduler: CartTimerScheduler = Depends(get_cart_scheduler)
):
    """Track an add-to-cart and start the abandonment countdown"""
    action = action or CartActionRequest()
    await scheduler.track_add_to_cart(product_id, action.user_id, action.metadata)
    return {"productId": product_id, "timerPending": scheduler.pending(product_id)}


@router.post("/{product_id}/remove")
async def remove_from_cart(
    product_id: str,
    action: Optional[CartActionRequest] = None,
    scheduler: CartTimerScheduler = Depends(get_cart_scheduler)
):
    """Explicit removal counts as an abandonment"""
    action = action or CartActionRequest()
    metadata = {"reason": "manual_removal", **(action.metadata or {})}
    await scheduler.track_cart_removal(product_id, action.user_id, metadata)
    return {"productId": product_id, "timerPending": False}


@router.post("/{product_id}/purchase")
async def purchase(
    product_id: str,
    scheduler: CartTimerScheduler = Depends(get_cart_scheduler)
):
    scheduler.track_purchase(product_id)
    return {"productId": product_id, "timerPending": False}
