"""
Knowledge feature: Embedding utility functions.
Wraps the LLM provider's embedding model for use across the app.
"""

import logging

from langchain_core.embeddings import Embeddings

from app.config import get_settings
from app.core.llm_provider import create_embeddings

logger = logging.getLogger(__name__)

# Singleton embedding model (lazy init)
_embeddings_model: Embeddings | None = None


def get_embeddings_model() -> Embeddings:
    """Get or create the shared embeddings model instance."""
    global _embeddings_model
    if _embeddings_model is None:
        _embeddings_model = create_embeddings()
    return _embeddings_model


class Embedder:
    """Async embedding calls truncated to the configured dimensionality."""

    def __init__(self, model: Embeddings | None = None, dimensions: int | None = None):
        self._model = model
        self.dimensions = dimensions or get_settings().EMBEDDING_DIMENSIONS

    @property
    def model(self) -> Embeddings:
        if self._model is None:
            self._model = get_embeddings_model()
        return self._model

    async def embed_text(self, text: str) -> list[float]:
        """Generate embedding vector for a single text string.

        Args:
            text: The text to embed.

        Returns:
            A list of floats (EMBEDDING_DIMENSIONS long at most).
        """
        vector = await self.model.aembed_query(text)
        return list(vector[:self.dimensions])

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for multiple texts (batch, order-preserving)."""
        vectors = await self.model.aembed_documents(texts)
        if len(vectors) != len(texts):
            raise ValueError(
                f"Embedding backend returned {len(vectors)} vectors for {len(texts)} inputs"
            )
        logger.info(f"Embedded {len(texts)} texts")
        return [list(v[:self.dimensions]) for v in vectors]
