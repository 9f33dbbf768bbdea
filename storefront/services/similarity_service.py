"""
Product similarity.

Catalog products are ranked against a given product by the cosine similarity
of sentence embeddings of their text renderings (name, category,
description, price tier, availability). When embeddings are disabled or the
model cannot be loaded or run, a heuristic score is used instead:

    score = 0.4 * same_category + 0.3 * price_ratio + 0.3 * shared_word_ratio

where price_ratio = min(price) / max(price) and shared_word_ratio compares the
same text renderings word by word.
"""

from __future__ import annotations
from typing import List, Optional
import asyncio
import logging

from storefront.core.config import settings
from storefront.core.document_store import DocumentStore
from storefront.schemas.product import Product, SimilarityResult, SimilarProduct
from storefront.services.embedding_service import EmbeddingService, embedding_service as default_embedding_service
from storefront.services.product_service import ProductService, product_service as default_product_service

logger = logging.getLogger(__name__)


class ProductSimilarityService:
    """Service for finding catalog products similar to a given one"""

    CATEGORY_WEIGHT = 0.4
    PRICE_WEIGHT = 0.3
    TEXT_WEIGHT = 0.3

    def __init__(
        self,
        products: Optional[ProductService] = None,
        embeddings: Optional[EmbeddingService] = None,
        use_embeddings: Optional[bool] = None
    ):
        """
        Args:
            products: ProductService instance (global one if None)
            embeddings: EmbeddingService instance (global one if None)
            use_embeddings: Rank by embeddings first (settings.embedding_enabled if None)
        """
        self.products = products or default_product_service
        self.embeddings = embeddings or default_embedding_service
        self.use_embeddings = settings.embedding_enabled if use_embeddings is None else use_embeddings

    @staticmethod
    def price_tier(price: float) -> str:
        if price < 50:
            return "budget"
        if price < 200:
            return "mid-range"
        return "premium"

    @staticmethod
    def product_text(product: Product) -> str:
        parts = [
            product.name,
            product.category,
            product.description,
            ProductSimilarityService.price_tier(product.price),
            "available" if product.in_stock else "out-of-stock",
        ]
        return " ".join(part for part in parts if part)

    @staticmethod
    def text_similarity(text1: str, text2: str) -> float:
        """Share of words (longer than 2 chars) of text1 that also occur in text2."""
        words1 = text1.lower().split()
        words2 = text2.lower().split()
        common = [word for word in words1 if len(word) > 2 and word in words2]
        total = max(len(words1), len(words2))
        return len(common) / total if total > 0 else 0.0

    @staticmethod
    def price_ratio(price1: float, price2: float) -> float:
        highest = max(price1, price2)
        if highest == 0:
            return 1.0
        return min(price1, price2) / highest

    def score(self, product: Product, candidate: Product) -> float:
        category = self.CATEGORY_WEIGHT if candidate.category == product.category else 0.0
        price = self.price_ratio(candidate.price, product.price) * self.PRICE_WEIGHT
        text = self.text_similarity(self.product_text(product), self.product_text(candidate)) * self.TEXT_WEIGHT
        return category + price + text
    def rank(self, product: Product, catalog: List[Product]) -> List[SimilarProduct]:
        """Heuristic ranking; needs no model."""
        candidates = [candidate for candidate in catalog if candidate.id != product.id]
        similarities = [
            SimilarProduct(product=candidate, score=self.score(product, candidate))
            for candidate in candidates
        ]
        similarities.sort(key=lambda item: item.score, reverse=True)
        return similarities

    def rank_by_embeddings(self, product: Product, catalog: List[Product]) -> List[SimilarProduct]:
        """
        Rank by cosine similarity of text embeddings.

        The product and all candidates are encoded in one batch. Blocking;
        raises whatever the model raises.
        """
        candidates = [candidate for candidate in catalog if candidate.id != product.id]
        if not candidates:
            return []
        texts = [self.product_text(product)] + [self.product_text(c) for c in candidates]
        target, *others = self.embeddings.generate_embeddings(texts)
        similarities = [
            SimilarProduct(product=candidate, score=self.embeddings.calculate_similarity(target, embedding))
            for candidate, embedding in zip(candidates, others)
        ]
        similarities.sort(key=lambda item: item.score, reverse=True)
        return similarities

    async def _rank_catalog(self, product: Product, catalog: List[Product]) -> List[SimilarProduct]:
        if self.use_embeddings:
            try:
                return await asyncio.to_thread(self.rank_by_embeddings, product, catalog)
            except Exception:
                logger.warning(
                    "Embedding similarity failed for product %s, falling back to heuristic scoring",
                    product.id, exc_info=True,
                )
        return self.rank(product, catalog)

    async def find_most_similar_product(
        self,
        store: DocumentStore,
        product: Product
    ) -> Optional[SimilarityResult]:
        """
        Compare a product against the rest of the catalog.

        Returns:
            The best match plus the full ranking, or None if there is nothing
            else in the catalog to compare against
        """
        catalog = await self.products.get_all_products(store)
        if not any(candidate.id != product.id for candidate in catalog):
            logger.info("No other products found for comparison with %s", product.id)
            return None

        similarities = await self._rank_catalog(product, catalog)
        return SimilarityResult(
            most_similar_product=similarities[0].product,
            similarity_score=similarities[0].score,
            all_similarities=similarities,
        )

    async def get_top_similar_products(
        self,
        store: DocumentStore,
        product: Product,
        top_n: int = 3
    ) -> List[SimilarProduct]:
        result = await self.find_most_similar_product(store, product)
        return result.all_similarities[:top_n] if result else []


# Global instance
product_similarity_service = ProductSimilarityService()
