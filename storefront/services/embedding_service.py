import numpy as np
from typing import Any, List, Optional
from storefront.core.config import settings
import logging

logger = logging.getLogger(__name__)


class EmbeddingService:
    """Service for generating product text embeddings using sentence-transformers"""

    def __init__(self, model_name: Optional[str] = None, model: Any = None):
        """
        Args:
            model_name: sentence-transformers model id (settings.embedding_model if None)
            model: Already loaded model exposing ``encode``; skips loading
        """
        self.model_name = model_name or settings.embedding_model
        self.model = model

    def _load_model(self) -> Any:
        """Load the sentence transformer model on first use"""
        if self.model is None:
            try:
                from sentence_transformers import SentenceTransformer

                logger.info(f"Loading embedding model: {self.model_name}")
                self.model = SentenceTransformer(self.model_name)
                logger.info("Embedding model loaded successfully")
            except Exception as e:
                logger.error(f"Failed to load embedding model: {e}")
                raise
        return self.model

    def generate_embeddings(self, texts: List[str]) -> List[List[float]]:
        """Encode several texts in one batch

        Args:
            texts: Product text renderings

        Returns:
            One embedding per text, in input order
        """
        model = self._load_model()
        try:
            embeddings = model.encode(texts, convert_to_tensor=False)
            return [np.asarray(embedding, dtype=float).tolist() for embedding in embeddings]
        except Exception as e:
            logger.error(f"Failed to generate product embeddings: {e}")
            raise

    def calculate_similarity(self, embedding1: List[float], embedding2: List[float]) -> float:
        """Cosine similarity between two embeddings, 0.0 when either is a zero vector"""
        vec1 = np.array(embedding1)
        vec2 = np.array(embedding2)

        norm1 = np.linalg.norm(vec1)
        norm2 = np.linalg.norm(vec2)
        if norm1 == 0 or norm2 == 0:
            return 0.0

        return float(np.dot(vec1, vec2) / (norm1 * norm2))


# Global instance (the model itself loads lazily)
embedding_service = EmbeddingService()
