from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from typing import List
from storefront.api.deps import get_scoring_service
from storefront.core.document_store import DocumentStore
from storefront.core.redis_client import get_document_store
from storefront.schemas.analytics import AnalyticsSummary, ProductScore, TrackEventRequest
from storefront.services.scoring_service import ScoringService

router = APIRouter()


@router.post("/events", status_code=status.HTTP_202_ACCEPTED)
async def track_event(
    event: TrackEventRequest,
    background_tasks: BackgroundTasks,
    store: DocumentStore = Depends(get_document_store),
    scoring: ScoringService = Depends(get_scoring_service)
):
    """Accept an interaction event; scoring happens after the response is sent"""
    background_tasks.add_task(
        scoring.track_event,
        store,
        event.product_id,
        event.event_type,
        event.user_id,
        event.metadata,
    )
    return {"status": "accepted", "sessionId": scoring.get_session_id()}


@router.get("/scores", response_model=List[ProductScore])
async def list_scores(
    store: DocumentStore = Depends(get_document_store),
    scoring: ScoringService = Depends(get_scoring_service)
):
    """All product scores, highest normalized score first"""
    return await scoring.get_ranked_product_scores(store)


@router.get("/scores/{product_id}", response_model=ProductScore)
async def get_score(
    product_id: str,
    store: DocumentStore = Depends(get_document_store),
    scoring: ScoringService = Depends(get_scoring_service)
):
    score = await scoring.get_product_score(store, product_id)
    if score is None:
        raise HTTPException(status_code=404, detail="No score recorded for this product")
    return score


@router.post("/scores/recalculate")
async def recalculate_scores(
    store: DocumentStore = Depends(get_document_store),
    scoring: ScoringService = Depends(get_scoring_service)
):
    """Re-derive every normalized score from its raw score"""
    refreshed = await scoring.recalculate_all_scores(store)
    return {"refreshed": refreshed}


@router.get("/summary", response_model=AnalyticsSummary)
async def summary(
    store: DocumentStore = Depends(get_document_store),
    scoring: ScoringService = Depends(get_scoring_service)
):
    return await scoring.get_summary(store)
