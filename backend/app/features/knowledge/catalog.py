"""
Knowledge feature: the static document catalog used for grounding.

The catalog is supplied from outside (a JSON list via KNOWLEDGE_CATALOG_PATH)
and is read once. Without a file the built-in childcare references are used.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path

from app.config import get_settings
from app.features.knowledge.schemas import KnowledgeDocument

logger = logging.getLogger(__name__)


DEFAULT_CATALOG: tuple[KnowledgeDocument, ...] = (
    KnowledgeDocument(
        id="doc-1",
        title="표준보육과정: 관찰일지 작성 지침",
        summary="관찰일지의 필수 구성 요소와 정기 기록, 가정 공유 원칙",
        content=(
            "관찰일지에는 관찰 대상 영유아, 날짜와 시간, 관찰 장면의 구체적 묘사, "
            "교사의 해석과 평가, 이후 지원 계획이 포함되어야 한다. "
            "정기적으로 기록하여 발달을 추적하고 가정과 공유한다."
        ),
        citation="표준보육과정 해설서, p.34",
        keywords=["관찰일지", "관찰 기록", "기록"],
        focus_areas=["Observation & Documentation"],
    ),
    KnowledgeDocument(
        id="doc-2",
        title="긍정적 상호작용과 놀이 지원",
        summary="놀이에 대한 민감한 반응과 또래 협력 촉진",
        content=(
            "교사는 영유아의 놀이에 민감하게 반응하고 언어적·정서적 지지를 제공해야 한다. "
            "놀이 확장을 돕고 또래 간 협력과 의사소통을 촉진하며, "
            "개별 발달 수준을 고려한 질문을 던진다."
        ),
        citation="제4차 어린이집 표준보육과정, p.12",
        keywords=["상호작용", "놀이", "또래"],
        focus_areas=["Observation & Documentation", "Interaction"],
    ),
    KnowledgeDocument(
        id="doc-3",
        title="학부모 소통과 관찰 공유",
        summary="관찰 결과의 정기 공유와 행동 지원 전략 제안",
        content=(
            "관찰 결과는 학부모와 정기적으로 공유하여 가정과의 협력을 강화한다. "
            "긍정적 사례를 중심으로 전달하되, 필요 시 행동 지원 전략을 함께 제안한다."
        ),
        citation="보육교직원 역량 강화 매뉴얼, p.58",
        keywords=["학부모", "상담", "가정 연계"],
        focus_areas=["Family Engagement"],
    ),
)


def load_catalog(path: str | Path) -> tuple[KnowledgeDocument, ...]:
    """Load a catalog from a JSON file holding a list of documents.

    Raises:
        ValueError: If two documents share an id.
    """
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    documents = tuple(KnowledgeDocument.model_validate(item) for item in raw)

    seen: set[str] = set()
    for doc in documents:
        if doc.id in seen:
            raise ValueError(f"Duplicate knowledge document id: {doc.id}")
        seen.add(doc.id)

    logger.info(f"Loaded {len(documents)} knowledge documents from {path}")
    return documents


@lru_cache
def get_knowledge_catalog() -> tuple[KnowledgeDocument, ...]:
    """Catalog configured for this process (loaded once)."""
    settings = get_settings()
    if settings.KNOWLEDGE_CATALOG_PATH:
        return load_catalog(settings.KNOWLEDGE_CATALOG_PATH)
    return DEFAULT_CATALOG
