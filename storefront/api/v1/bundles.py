from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List
from storefront.core.document_store import DocumentStore
from storefront.core.exceptions import SalesDataUnavailableError
from storefront.core.redis_client import get_document_store
from storefront.schemas.bundle import ProductPair
from storefront.services.bundle_service import bundle_analysis_service

router = APIRouter()


@router.get("", response_model=List[ProductPair])
async def get_bundle_suggestions(
    min_frequency: int = Query(default=2, ge=1),
    store: DocumentStore = Depends(get_document_store)
):
    """Frequently co-purchased pairs with their bundle pricing, most frequent first"""
    try:
        return await bundle_analysis_service.get_bundle_suggestions(store, min_frequency)
    except SalesDataUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
