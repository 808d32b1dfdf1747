"""
TeacherEasy AI Mentor - FastAPI Application Entry Point.

Feature-based modular architecture:
  Each feature in app/features/ has its own router, service, and schemas.
  chat        → streaming mentor answers + session progress
  knowledge   → evidence catalog and retrieval
  curriculum  → modules, scenarios, stages and rubrics
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings

# ── Feature Routers ──────────────────────────────────────
from app.features.chat.router import router as chat_router
from app.features.curriculum.router import router as curriculum_router
from app.features.knowledge.router import router as knowledge_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup & shutdown."""
    settings = get_settings()
    logger.info(f"{settings.APP_NAME} v{settings.APP_VERSION} starting...")
    logger.info(f"LLM Provider: {settings.LLM_PROVIDER} ({settings.LLM_MODEL})")
    logger.info(f"Retrieval backend: {settings.RETRIEVAL_BACKEND}")
    if not settings.LLM_API_KEY:
        logger.warning("LLM_API_KEY is empty; chat requests will end with an error event")
    yield
    logger.info("Shutting down...")


def create_app() -> FastAPI:
    """Application factory."""
    settings = get_settings()
    logging.basicConfig(level=logging.DEBUG if settings.DEBUG else logging.INFO)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="보육교사 연수생을 위한 근거 기반 AI 멘토",
        lifespan=lifespan,
    )

    # ── CORS ─────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Session-Id"],
    )

    # ── Register Feature Routers ─────────────────────────
    app.include_router(chat_router, prefix="/api/chat", tags=["Chat"])
    app.include_router(knowledge_router, prefix="/api/knowledge", tags=["Knowledge"])
    app.include_router(curriculum_router, prefix="/api/curriculum", tags=["Curriculum"])

    # ── Health Check ─────────────────────────────────────
    @app.get("/health", tags=["System"])
    async def health_check():
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
        }

    return app


app = create_app()
