"""
Application configuration using Pydantic Settings.
All config is loaded from environment variables / .env file.
"""

from typing import Literal

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    # ── App ──────────────────────────────────────────────
    APP_NAME: str = "teachereasy-ai-mentor"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"  # comma-separated

    # ── LLM (Provider-Agnostic) ──────────────────────────
    LLM_PROVIDER: str = "gemini"  # gemini | openai | groq
    LLM_MODEL: str = "gemini-2.0-flash"
    LLM_API_KEY: str = ""
    LLM_TEMPERATURE: float = 0.7
    LLM_MAX_OUTPUT_TOKENS: int = 1024

    # ── Embedding ────────────────────────────────────────
    EMBEDDING_PROVIDER: str = "gemini"
    EMBEDDING_MODEL: str = "text-embedding-004"
    EMBEDDING_DIMENSIONS: int = 768

    # ── Retrieval ────────────────────────────────────────
    RETRIEVAL_BACKEND: Literal["keyword", "vector"] = "keyword"
    RETRIEVAL_TOP_K: int = 3
    RETRIEVAL_KEYWORD_WEIGHT: float = 2.0
    RETRIEVAL_SUMMARY_WEIGHT: float = 1.0
    KNOWLEDGE_CATALOG_PATH: str = ""  # JSON file; empty = built-in catalog

    # ── Sessions ─────────────────────────────────────────
    SESSION_TTL_SECONDS: int = 6 * 60 * 60

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance (singleton)."""
    return Settings()
