"""
Unit tests for ProductSimilarityService and EmbeddingService.

Embedding path: cosine similarity of product text embeddings.
Heuristic path: 0.4 * same_category + 0.3 * price_ratio + 0.3 * shared_word_ratio
"""

from __future__ import annotations

from unittest.mock import MagicMock

import numpy as np
import pytest

from storefront.core.document_store import DocumentStore
from storefront.schemas.product import Product, ProductCreate
from storefront.services.embedding_service import EmbeddingService
from storefront.services.product_service import ProductService
from storefront.services.similarity_service import ProductSimilarityService


def _product(product_id: int, name: str, category: str, price: float, description: str = "") -> Product:
    return Product(id=product_id, name=name, category=category, price=price,
                   description=description, in_stock=True)


class TestHelpers:
    @pytest.mark.parametrize(
        "price,tier",
        [(10, "budget"), (49.99, "budget"), (50, "mid-range"), (199, "mid-range"), (200, "premium")],
    )
    def test_price_tier(self, price, tier):
        assert ProductSimilarityService.price_tier(price) == tier

    def test_product_text(self):
        product = _product(1, "Trail Shoes", "Footwear", 120, "For running")
        assert ProductSimilarityService.product_text(product) == (
            "Trail Shoes Footwear For running mid-range available"
        )

    def test_text_similarity_ignores_short_words(self):
        assert ProductSimilarityService.text_similarity("a an the mug", "a an the mug") == 0.5

    def test_text_similarity_empty(self):
        assert ProductSimilarityService.text_similarity("", "") == 0.0

    def test_price_ratio(self):
        assert ProductSimilarityService.price_ratio(50, 100) == 0.5
        assert ProductSimilarityService.price_ratio(0, 0) == 1.0


class TestRanking:
    def test_same_category_ranks_first(self):
        service = ProductSimilarityService()
        shoe = _product(1, "Trail Shoes", "Footwear", 120)
        catalog = [
            shoe,
            _product(2, "Kettle", "Kitchen", 120),
            _product(3, "Road Shoes", "Footwear", 100),
        ]
        ranking = service.rank(shoe, catalog)
        assert [item.product.id for item in ranking] == [3, 2]

    def test_identical_except_id_scores_near_one(self):
        service = ProductSimilarityService()
        first = _product(1, "Trail Shoes", "Footwear", 120, "running")
        second = _product(2, "Trail Shoes", "Footwear", 120, "running")
        assert service.score(first, second) == pytest.approx(1.0)


class TestStoreBacked:
    async def test_find_most_similar(self, store: DocumentStore):
        products = ProductService()
        for product in (
            ProductCreate(id=1, name="Trail Shoes", category="Footwear", price=120),
            ProductCreate(id=2, name="Kettle", category="Kitchen", price=30),
            ProductCreate(id=3, name="Road Shoes", category="Footwear", price=110),
        ):
            await products.add_product(store, product)

        service = ProductSimilarityService(products)
        target = await products.get_product(store, 1)
        result = await service.find_most_similar_product(store, target)
        assert result.most_similar_product.id == 3
        assert len(result.all_similarities) == 2

        top = await service.get_top_similar_products(store, target, top_n=1)
        assert [item.product.id for item in top] == [3]

    async def test_nothing_to_compare(self, store: DocumentStore):
        products = ProductService()
        await products.add_product(store, ProductCreate(id=1, name="Solo", category="X", price=1))
        service = ProductSimilarityService(products)
        target = await products.get_product(store, 1)
        assert await service.find_most_similar_product(store, target) is None
        assert await service.get_top_similar_products(store, target) == []


# ---------------------------------------------------------------------------
# Embedding path
# ---------------------------------------------------------------------------
class _FirstWordModel:
    """Stand-in sentence model: embeds a text by its first word."""

    VECTORS = {
        "Trail": [1.0, 0.0],
        "Kettle": [0.9, 0.1],
        "Road": [0.0, 1.0],
    }

    def encode(self, texts, convert_to_tensor=False):
        return np.array([self.VECTORS[text.split()[0]] for text in texts])


def _catalog() -> list[Product]:
    return [
        _product(1, "Trail Shoes", "Footwear", 120),
        _product(2, "Kettle", "Kitchen", 30),
        _product(3, "Road Shoes", "Footwear", 110),
    ]


def _catalog_service() -> MagicMock:
    products = MagicMock()

    async def _get_all_products(store):
        return _catalog()

    products.get_all_products = _get_all_products
    return products


class TestEmbeddingService:
    def test_cosine_similarity(self):
        service = EmbeddingService(model=_FirstWordModel())
        assert service.calculate_similarity([1, 0], [2, 0]) == pytest.approx(1.0)
        assert service.calculate_similarity([1, 0], [0, 3]) == pytest.approx(0.0)
        assert service.calculate_similarity([1, 0], [-1, 0]) == pytest.approx(-1.0)

    def test_zero_vector_has_no_similarity(self):
        service = EmbeddingService(model=_FirstWordModel())
        assert service.calculate_similarity([0, 0], [1, 1]) == 0.0

    def test_generate_embeddings_in_input_order(self):
        service = EmbeddingService(model=_FirstWordModel())
        assert service.generate_embeddings(["Road a", "Trail b"]) == [[0.0, 1.0], [1.0, 0.0]]

    def test_encode_failure_propagates(self):
        model = MagicMock()
        model.encode.side_effect = RuntimeError("out of memory")
        with pytest.raises(RuntimeError):
            EmbeddingService(model=model).generate_embeddings(["Trail"])


class TestEmbeddingRanking:
    async def test_ranks_by_embedding_similarity(self):
        service = ProductSimilarityService(
            _catalog_service(), EmbeddingService(model=_FirstWordModel()), use_embeddings=True
        )
        target = _catalog()[0]

        result = await service.find_most_similar_product(None, target)
        # The heuristic would pick Road Shoes (same category); the embeddings say Kettle
        assert [item.product.id for item in result.all_similarities] == [2, 3]
        assert result.similarity_score == pytest.approx(0.9 / np.hypot(0.9, 0.1))

    async def test_falls_back_to_heuristic_when_model_fails(self):
        model = MagicMock()
        model.encode.side_effect = OSError("model files unavailable")
        service = ProductSimilarityService(
            _catalog_service(), EmbeddingService(model=model), use_embeddings=True
        )
        target = _catalog()[0]

        result = await service.find_most_similar_product(None, target)
        assert result.most_similar_product.id == 3
        assert result.similarity_score == pytest.approx(service.score(target, _catalog()[2]))
        model.encode.assert_called_once()

    async def test_disabled_embeddings_never_touch_the_model(self):
        model = MagicMock()
        service = ProductSimilarityService(
            _catalog_service(), EmbeddingService(model=model), use_embeddings=False
        )
        top = await service.get_top_similar_products(None, _catalog()[0], top_n=1)
        assert [item.product.id for item in top] == [3]
        model.encode.assert_not_called()
