"""
Provider-agnostic LLM factory.

Switch LLM provider by changing env vars, no code changes needed:
  LLM_PROVIDER=gemini | openai | groq
  LLM_MODEL=gemini-2.0-flash | gpt-4o-mini | llama-3.1-70b-versatile
  LLM_API_KEY=your-key
"""

from langchain_core.embeddings import Embeddings
from langchain_core.language_models import BaseChatModel

from app.config import get_settings
from app.core.exceptions import ConfigurationError


def _require_api_key() -> str:
    settings = get_settings()
    if not settings.LLM_API_KEY:
        raise ConfigurationError(detail="LLM_API_KEY is not configured")
    return settings.LLM_API_KEY


def create_llm() -> BaseChatModel:
    """Create a streaming-capable chat model based on env configuration.

    Returns:
        BaseChatModel: A LangChain-compatible chat model.

    Raises:
        ConfigurationError: If the API key is missing or the provider is unknown.
    """
    settings = get_settings()
    api_key = _require_api_key()

    match settings.LLM_PROVIDER:
        case "gemini":
            from langchain_google_genai import ChatGoogleGenerativeAI

            return ChatGoogleGenerativeAI(
                model=settings.LLM_MODEL,
                google_api_key=api_key,
                temperature=settings.LLM_TEMPERATURE,
                max_output_tokens=settings.LLM_MAX_OUTPUT_TOKENS,
            )

        case "openai":
            from langchain_openai import ChatOpenAI

            return ChatOpenAI(
                model=settings.LLM_MODEL,
                api_key=api_key,
                temperature=settings.LLM_TEMPERATURE,
                max_tokens=settings.LLM_MAX_OUTPUT_TOKENS,
            )

        case "groq":
            from langchain_groq import ChatGroq

            return ChatGroq(
                model=settings.LLM_MODEL,
                api_key=api_key,
                temperature=settings.LLM_TEMPERATURE,
                max_tokens=settings.LLM_MAX_OUTPUT_TOKENS,
            )

        case _:
            raise ConfigurationError(
                detail=(
                    f"Unknown LLM provider: '{settings.LLM_PROVIDER}'. "
                    f"Supported: gemini, openai, groq"
                )
            )


def create_embeddings() -> Embeddings:
    """Create an embedding model based on env configuration.

    Returns:
        Embeddings instance for vector generation.

    Raises:
        ConfigurationError: If the API key is missing or the provider is unknown.
    """
    settings = get_settings()
    api_key = _require_api_key()

    match settings.EMBEDDING_PROVIDER:
        case "gemini":
            from langchain_google_genai import GoogleGenerativeAIEmbeddings

            return GoogleGenerativeAIEmbeddings(
                model=f"models/{settings.EMBEDDING_MODEL}",
                google_api_key=api_key,
            )

        case "openai":
            from langchain_openai import OpenAIEmbeddings

            return OpenAIEmbeddings(
                model=settings.EMBEDDING_MODEL,
                api_key=api_key,
            )

        case _:
            raise ConfigurationError(
                detail=(
                    f"Unknown embedding provider: '{settings.EMBEDDING_PROVIDER}'. "
                    f"Supported: gemini, openai"
                )
            )
