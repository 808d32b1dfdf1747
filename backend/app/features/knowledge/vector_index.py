"""
Knowledge feature: in-memory embedding index (alternate retrieval backend).

The catalog is embedded once per process. Concurrent first callers await the
same initialization task, and a failed initialization stays failed: every
later search raises IndexUnavailableError instead of returning nothing.
"""

import asyncio
import logging
import math
from collections.abc import Sequence

from app.core.exceptions import IndexUnavailableError, UpstreamError
from app.features.knowledge.embedding import Embedder
from app.features.knowledge.schemas import KnowledgeDocument, ScoredDocument

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """dot(a, b) / (|a| |b|), or 0.0 when either vector has zero norm."""
    length = min(len(a), len(b))
    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for i in range(length):
        dot += a[i] * b[i]
        norm_a += a[i] * a[i]
        norm_b += b[i] * b[i]
    if norm_a == 0 or norm_b == 0:
        return 0.0
    similarity = dot / (math.sqrt(norm_a) * math.sqrt(norm_b))
    return max(-1.0, min(1.0, similarity))


class VectorIndex:
    """Cosine-similarity search over lazily embedded catalog documents."""

    def __init__(self, catalog: Sequence[KnowledgeDocument], embedder: Embedder | None = None):
        self.catalog = tuple(catalog)
        self.embedder = embedder or Embedder()
        self._vectors: dict[str, list[float]] = {}
        self._init_task: asyncio.Task | None = None

    @property
    def state(self) -> str:
        if self._init_task is None or not self._init_task.done():
            return "not_initialized"
        if self._init_task.cancelled() or self._init_task.exception() is not None:
            return "failed"
        return "ready"

    async def initialize(self) -> None:
        """Embed the whole catalog once; later calls reuse the same outcome.

        Raises:
            IndexUnavailableError: If the embedding call failed (now or earlier).
        """
        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._build())
        # shield: one cancelled caller must not abort the shared build
        await asyncio.shield(self._init_task)

    async def _build(self) -> None:
        if not self.catalog:
            logger.warning("Vector index built over an empty catalog")
            return
        try:
            vectors = await self.embedder.embed_texts([doc.content for doc in self.catalog])
        except Exception as e:
            logger.error(f"Vector index initialization failed: {e}", exc_info=True)
            raise IndexUnavailableError(detail=str(e)) from e

        for doc, vector in zip(self.catalog, vectors):
            self._vectors[doc.id] = vector
        logger.info(f"Vector index ready: {len(self._vectors)} documents")

    async def search(self, query: str, top_k: int = 3) -> list[ScoredDocument]:
        """Return the top_k documents most similar to the query.

        Raises:
            IndexUnavailableError: If the index could not be built.
            UpstreamError: If embedding the query failed.
        """
        await self.initialize()
        if not self.catalog or top_k <= 0 or not query.strip():
            return []

        try:
            query_vector = await self.embedder.embed_text(query)
        except Exception as e:
            raise UpstreamError(
                message="질문을 분석하는 중 문제가 발생했습니다.",
                detail=str(e),
            ) from e

        scored = [
            ScoredDocument(
                **doc.model_dump(),
                score=cosine_similarity(query_vector, self._vectors.get(doc.id, [])),
            )
            for doc in self.catalog
        ]
        scored = sorted(scored, key=lambda item: item.score, reverse=True)
        return scored[:top_k]
