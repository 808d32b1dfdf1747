"""
Knowledge feature: read-only catalog and retrieval preview endpoints.
"""

import logging

from fastapi import APIRouter, Depends

from app.core.exceptions import AppBaseError, app_error_to_http, status_for
from app.features.knowledge.schemas import (
    KnowledgeDocument,
    KnowledgeSearchRequest,
    KnowledgeStatusResponse,
    ScoredDocument,
)
from app.features.knowledge.service import KnowledgeService, get_knowledge_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/documents", response_model=list[KnowledgeDocument])
async def list_documents(service: KnowledgeService = Depends(get_knowledge_service)):
    """List the documents available for grounding, in catalog order."""
    return list(service.catalog)


@router.post("/search", response_model=list[ScoredDocument])
async def search_documents(
    data: KnowledgeSearchRequest,
    service: KnowledgeService = Depends(get_knowledge_service),
):
    """Preview which evidence a question would retrieve."""
    try:
        return await service.retrieve(data.query, data.focus_hints, data.limit)
    except AppBaseError as e:
        logger.error(f"Knowledge search failed: {e.message} ({e.detail})")
        raise app_error_to_http(e, status_for(e))


@router.get("/status", response_model=KnowledgeStatusResponse)
async def knowledge_status(service: KnowledgeService = Depends(get_knowledge_service)):
    """Report the configured retrieval backend and vector index state."""
    return service.status()
