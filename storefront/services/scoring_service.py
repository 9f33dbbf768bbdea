"""
Engagement scoring service.

Interaction events (hovers, clicks, cart activity) are logged to the
``analytics`` collection and folded into a per-product score:

    rawScore        = sum of the point value of every event applied
    normalizedScore = clamp(raw) / (clamp(raw) + MAX_SCORE_THRESHOLD) * 100

The normalized score saturates towards 100 and equals 50 when the raw score
equals the threshold, which keeps popular products comparable without a
fixed upper bound.

Tracking is best effort: it is called from UI interaction handlers, so
``track_event`` logs failures and never raises.
"""

from __future__ import annotations
import asyncio
import logging
import random
import string
import time
from typing import Any, Dict, Mapping, Optional, Set

import structlog

from storefront.core.config import settings
from storefront.core.document_store import DocumentStore
from storefront.repositories.event_repository import EventRepository
from storefront.repositories.score_repository import ScoreRepository
from storefront.schemas.analytics import (
    AnalyticsSummary,
    EventType,
    ProductId,
    ProductScore,
    empty_event_counts,
)

logger = logging.getLogger(__name__)

_SESSION_ALPHABET = string.digits + string.ascii_lowercase


def normalize_score(raw_score: float, threshold: Optional[float] = None) -> float:
    """Map a raw score onto [0, 100) with a saturating curve, rounded to 2 decimals."""
    if threshold is None:
        threshold = settings.max_score_threshold
    positive_score = max(0.0, float(raw_score))
    return round(positive_score / (positive_score + threshold) * 100, 2)


def generate_session_id() -> str:
    suffix = "".join(random.choices(_SESSION_ALPHABET, k=9))
    return f"session_{int(time.time() * 1000)}_{suffix}"


class ScoringService:
    """
    Service for tracking engagement events and maintaining product scores.

    The point table defaults to ``settings.scoring_points``; it must give a
    value for every EventType.
    """

    def __init__(
        self,
        event_repo: Optional[EventRepository] = None,
        score_repo: Optional[ScoreRepository] = None,
        points: Optional[Mapping[str, int]] = None,
        max_score_threshold: Optional[float] = None
    ):
        """
        Initialize service with repositories and scoring constants.

        Args:
            event_repo: EventRepository instance (creates new if None)
            score_repo: ScoreRepository instance (creates new if None)
            points: Point value per event type (settings if None)
            max_score_threshold: Normalization constant K (settings if None)
        """
        self.event_repo = event_repo or EventRepository()
        self.score_repo = score_repo or ScoreRepository()
        self.points: Dict[str, int] = dict(points if points is not None else settings.scoring_points)
        self.max_score_threshold = (
            max_score_threshold if max_score_threshold is not None else settings.max_score_threshold
        )

        missing = [event.value for event in EventType if event.value not in self.points]
        if missing:
            raise ValueError(f"Scoring points missing for event types: {missing}")
        if self.max_score_threshold <= 0:
            raise ValueError("max_score_threshold must be positive")

        self._session_id: Optional[str] = None
        self._background: Set[asyncio.Task] = set()

    # ── Session ──────────────────────────────────────────────────────────────

    def get_session_id(self) -> str:
        """Return the current session id, generating it on first use."""
        if self._session_id is None:
            self._session_id = generate_session_id()
        return self._session_id

    def reset_session(self) -> None:
        self._session_id = None

    # ── Scoring ──────────────────────────────────────────────────────────────

    def normalize(self, raw_score: float) -> float:
        return normalize_score(raw_score, self.max_score_threshold)

    def points_for(self, event_type: EventType | str) -> int:
        return self.points[EventType(event_type).value]

    def point_label(self, event_type: EventType | str) -> str:
        """Display label for an event's points, e.g. "+2" or "-5"."""
        return f"{self.points_for(event_type):+d}"

    def raw_score_from_counts(self, event_counts: Mapping[str, int]) -> int:
        """Weighted sum of event counts; equals rawScore for a consistent document."""
        return sum(self.points[event] * count for event, count in event_counts.items() if event in self.points)

    async def track_event(
        self,
        store: DocumentStore,
        product_id: ProductId,
        event_type: EventType | str,
        user_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Record an interaction event and fold it into the product's score.

        Never raises: failures (unknown event type, store unavailable) are
        logged and the event is dropped. The session id and product id are
        bound to the structlog context for every line logged meanwhile.

        Args:
            store: Document store
            product_id: Product the interaction happened on
            event_type: One of EventType
            user_id: Acting user, if known
            metadata: Free-form annotations (e.g. {"clickSource": "product_card"})
        """
        session_id = self.get_session_id()
        with structlog.contextvars.bound_contextvars(session_id=session_id, product_id=str(product_id)):
            try:
                event = EventType(event_type)
                points = self.points[event.value]

                await self.event_repo.append(
                    store,
                    product_id,
                    event.value,
                    session_id=session_id,
                    user_id=user_id,
                    metadata=metadata,
                )
                await self.score_repo.apply_event(store, product_id, event.value, points)
                await self.score_repo.refresh_normalized(store, product_id, self.normalize)

                logger.info("Analytics tracked: %s for product %s", event.value, product_id)
            except Exception:
                logger.exception("Error tracking %s for product %s", event_type, product_id)

    def dispatch_event(
        self,
        store: DocumentStore,
        product_id: ProductId,
        event_type: EventType | str,
        user_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> asyncio.Task:
        """
        Fire-and-forget variant of track_event.

        Schedules tracking as a background task on the running loop and
        returns immediately; the caller must not depend on its outcome.
        """
        task = asyncio.get_running_loop().create_task(
            self.track_event(store, product_id, event_type, user_id, metadata)
        )
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def drain(self) -> None:
        """Wait for background tracking tasks (used on shutdown and in tests)."""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # ── Reads ────────────────────────────────────────────────────────────────

    async def get_product_score(
        self,
        store: DocumentStore,
        product_id: ProductId
    ) -> Optional[ProductScore]:
        try:
            return await self.score_repo.get_by_product(store, product_id)
        except Exception:
            logger.exception("Error getting score for product %s", product_id)
            return None

    async def get_all_product_scores(self, store: DocumentStore) -> list[ProductScore]:
        """Every score document, unordered; empty list if the store is unavailable."""
        try:
            return await self.score_repo.get_all(store)
        except Exception:
            logger.exception("Error getting all product scores")
            return []

    async def get_ranked_product_scores(self, store: DocumentStore) -> list[ProductScore]:
        scores = await self.get_all_product_scores(store)
        return sorted(scores, key=lambda score: score.normalized_score, reverse=True)

    async def get_summary(self, store: DocumentStore) -> AnalyticsSummary:
        scores = await self.get_all_product_scores(store)
        totals = empty_event_counts()
        for score in scores:
            for event, count in score.event_counts.items():
                totals[event] = totals.get(event, 0) + count
        return AnalyticsSummary(
            tracked_products=len(scores),
            total_events=sum(totals.values()),
            event_totals=totals,
            point_labels={event.value: self.point_label(event) for event in EventType},
        )

    # ── Maintenance ──────────────────────────────────────────────────────────

    async def recalculate_all_scores(self, store: DocumentStore) -> int:
        """
        Re-derive every normalizedScore from its stored rawScore.

        Used after changing MAX_SCORE_THRESHOLD; raw scores and counts are not
        touched.

        Returns:
            Number of score documents refreshed
        """
        refreshed = 0
        try:
            for score in await self.score_repo.get_all(store):
                if await self.score_repo.refresh_normalized(store, score.product_id, self.normalize) is not None:
                    refreshed += 1
            logger.info("All scores recalculated successfully (%d products)", refreshed)
        except Exception:
            logger.exception("Error recalculating scores")
        return refreshed


# Global instance
scoring_service = ScoringService()
