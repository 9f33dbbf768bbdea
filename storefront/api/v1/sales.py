from fastapi import APIRouter, Depends, HTTPException
from typing import List, Optional
from storefront.core.document_store import DocumentStore
from storefront.core.exceptions import SalesDataUnavailableError
from storefront.core.redis_client import get_document_store
from storefront.schemas.sales import MonthlySales, SalesStats
from storefront.services.sales_analytics_service import sales_analytics_service

router = APIRouter()


@router.get("/monthly", response_model=List[MonthlySales])
async def monthly_sales(
    product_name: Optional[str] = None,
    store: DocumentStore = Depends(get_document_store)
):
    try:
        return await sales_analytics_service.get_monthly_sales(store, product_name)
    except SalesDataUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/stats", response_model=SalesStats)
async def sales_stats(
    product_name: Optional[str] = None,
    store: DocumentStore = Depends(get_document_store)
):
    try:
        return await sales_analytics_service.get_sales_stats(store, product_name)
    except SalesDataUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
