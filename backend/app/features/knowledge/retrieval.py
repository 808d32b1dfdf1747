"""
Knowledge feature: keyword/token scoring over the document catalog.

Score of one document for a query:
  + keyword_weight  for each document keyword found in the query
  + keyword_weight  for each focus hint found in any document focus area
  + summary_weight  for each query token (len >= 2) found in the content,
    or summary_weight / 2 if it is only found in the summary
"""

import re
from collections.abc import Sequence

from app.features.knowledge.catalog import get_knowledge_catalog
from app.features.knowledge.schemas import KnowledgeDocument, ScoredDocument

KEYWORD_WEIGHT = 2.0
SUMMARY_WEIGHT = 1.0
MIN_TOKEN_LENGTH = 2

# Anything that is not a letter, a number or whitespace (underscore included).
_NON_TEXT = re.compile(r"[^\w\s]|_")


def normalize(text: str) -> str:
    """Case-fold and replace punctuation/symbols with spaces."""
    return _NON_TEXT.sub(" ", text.casefold())


def score_document(
    doc: KnowledgeDocument,
    normalized_query: str,
    query_tokens: Sequence[str],
    normalized_focus: Sequence[str],
    keyword_weight: float = KEYWORD_WEIGHT,
    summary_weight: float = SUMMARY_WEIGHT,
) -> float:
    normalized_content = normalize(doc.content)
    normalized_summary = normalize(doc.summary)
    normalized_areas = [normalize(area) for area in doc.focus_areas]
    score = 0.0

    for keyword in doc.keywords:
        normalized_keyword = normalize(keyword).strip()
        if normalized_keyword and normalized_keyword in normalized_query:
            score += keyword_weight

    for focus in normalized_focus:
        if any(focus in area for area in normalized_areas):
            score += keyword_weight

    for token in query_tokens:
        if token in normalized_content:
            score += summary_weight
        elif token in normalized_summary:
            score += summary_weight * 0.5

    return score


def retrieve_relevant_documents(
    query: str,
    focus_hints: Sequence[str] | None = None,
    limit: int = 3,
    catalog: Sequence[KnowledgeDocument] | None = None,
    keyword_weight: float = KEYWORD_WEIGHT,
    summary_weight: float = SUMMARY_WEIGHT,
) -> list[ScoredDocument]:
    """Rank catalog documents against a query and optional focus hints.

    Args:
        query: The learner's question.
        focus_hints: Module focus area, stage label, rubric names, ...
        limit: Maximum number of documents returned.
        catalog: Documents to score; defaults to the configured catalog.

    Returns:
        Documents with a positive score, best first. Ties keep catalog order.
    """
    if not query.strip() or limit <= 0:
        return []

    documents = get_knowledge_catalog() if catalog is None else catalog
    normalized_query = normalize(query)
    # dict.fromkeys: dedup while keeping first-seen order
    query_tokens = [
        token for token in dict.fromkeys(normalized_query.split())
        if len(token) >= MIN_TOKEN_LENGTH
    ]
    normalized_focus = [
        focus for focus in (normalize(hint).strip() for hint in focus_hints or [])
        if focus
    ]

    scored = []
    for doc in documents:
        score = score_document(
            doc,
            normalized_query,
            query_tokens,
            normalized_focus,
            keyword_weight=keyword_weight,
            summary_weight=summary_weight,
        )
        if score > 0:
            scored.append(ScoredDocument(**doc.model_dump(), score=score))

    # sorted() is stable, so equal scores stay in catalog order
    scored = sorted(scored, key=lambda item: item.score, reverse=True)
    return scored[:limit]
