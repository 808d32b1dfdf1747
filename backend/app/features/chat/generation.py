"""
Chat feature: Generation backend adapter.

Wraps a LangChain chat model so the orchestrator only ever sees plain text
fragments or an UpstreamError.
"""

import logging
from collections.abc import AsyncIterator

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from app.core.exceptions import UpstreamError
from app.core.llm_provider import create_llm

logger = logging.getLogger(__name__)


def _chunk_text(content) -> str:
    """Text of one streamed chunk (Gemini may send a list of content parts)."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        texts = []
        for part in content:
            if isinstance(part, str):
                texts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                texts.append(part.get("text", ""))
        return "".join(texts)
    return ""


class GenerationBackend:
    def __init__(self, llm: BaseChatModel):
        self.llm = llm

    async def stream(self, prompt: str, system_instruction: str) -> AsyncIterator[str]:
        """Yield non-empty text fragments in arrival order.

        Raises:
            UpstreamError: On any failure of the upstream model. Fragments
                already yielded stay valid; nothing is retried.
        """
        messages = [SystemMessage(content=system_instruction), HumanMessage(content=prompt)]
        try:
            async for chunk in self.llm.astream(messages):
                text = _chunk_text(chunk.content)
                if text:
                    yield text
        except UpstreamError:
            raise
        except Exception as e:
            raise UpstreamError(detail=f"{type(e).__name__}: {e}") from e


def create_generation_backend() -> GenerationBackend:
    """Build the backend from settings.

    Raises:
        ConfigurationError: If the API key is missing or the provider is unknown.
    """
    return GenerationBackend(create_llm())
