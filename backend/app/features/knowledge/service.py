"""
Knowledge feature: Service layer for evidence retrieval.

The retrieval strategy is explicit configuration (RETRIEVAL_BACKEND):
  - "keyword": weighted keyword/token scoring (pure, no network)
  - "vector":  cosine similarity over Gemini/OpenAI embeddings
The two can rank differently for the same question; there is no fallback
from one to the other.
"""

import logging
from collections.abc import Sequence

from app.config import get_settings
from app.features.knowledge.catalog import get_knowledge_catalog
from app.features.knowledge.retrieval import retrieve_relevant_documents
from app.features.knowledge.schemas import KnowledgeDocument, KnowledgeStatusResponse, ScoredDocument
from app.features.knowledge.vector_index import VectorIndex

logger = logging.getLogger(__name__)


class KnowledgeService:
    """Selects evidence for one question using the configured backend."""

    def __init__(
        self,
        catalog: Sequence[KnowledgeDocument],
        backend: str = "keyword",
        top_k: int = 3,
        keyword_weight: float = 2.0,
        summary_weight: float = 1.0,
        vector_index: VectorIndex | None = None,
    ):
        if backend not in ("keyword", "vector"):
            raise ValueError(f"Unknown retrieval backend: '{backend}'. Supported: keyword, vector")
        self.catalog = tuple(catalog)
        self.backend = backend
        self.top_k = top_k
        self.keyword_weight = keyword_weight
        self.summary_weight = summary_weight
        self._vector_index = vector_index

    @property
    def vector_index(self) -> VectorIndex:
        if self._vector_index is None:
            self._vector_index = VectorIndex(self.catalog)
        return self._vector_index

    async def retrieve(
        self,
        question: str,
        focus_hints: Sequence[str] | None = None,
        limit: int | None = None,
    ) -> list[ScoredDocument]:
        """Return ranked evidence for a question.

        Raises:
            IndexUnavailableError: vector backend only, when the index failed.
            UpstreamError: vector backend only, when the query embedding failed.
        """
        limit = self.top_k if limit is None else limit

        if self.backend == "vector":
            # focus hints only steer the keyword scorer
            results = await self.vector_index.search(question, top_k=limit)
        else:
            results = retrieve_relevant_documents(
                question,
                focus_hints,
                limit,
                catalog=self.catalog,
                keyword_weight=self.keyword_weight,
                summary_weight=self.summary_weight,
            )

        logger.info(f"Retrieved {len(results)} documents via {self.backend} backend")
        return results

    def status(self) -> KnowledgeStatusResponse:
        """Report backend and index state (for the /status endpoint)."""
        if self.backend == "keyword":
            return KnowledgeStatusResponse(
                backend=self.backend,
                document_count=len(self.catalog),
                index_state="not_applicable",
            )

        state = self.vector_index.state
        messages = {
            "not_initialized": "색인은 첫 질문 시 생성됩니다.",
            "failed": "색인 생성에 실패했습니다. 서버를 재시작해야 합니다.",
            "ready": "",
        }
        return KnowledgeStatusResponse(
            backend=self.backend,
            document_count=len(self.catalog),
            index_state=state,
            message=messages[state],
        )


# ── Singleton ─────────────────────────────────────────────

_knowledge_service: KnowledgeService | None = None


def get_knowledge_service() -> KnowledgeService:
    """Get or create the knowledge service configured from settings."""
    global _knowledge_service
    if _knowledge_service is None:
        settings = get_settings()
        _knowledge_service = KnowledgeService(
            catalog=get_knowledge_catalog(),
            backend=settings.RETRIEVAL_BACKEND,
            top_k=settings.RETRIEVAL_TOP_K,
            keyword_weight=settings.RETRIEVAL_KEYWORD_WEIGHT,
            summary_weight=settings.RETRIEVAL_SUMMARY_WEIGHT,
        )
    return _knowledge_service
