"""Unit tests for the LLM provider factory and the generation backend adapter."""

import pytest
from langchain_core.messages import AIMessageChunk, HumanMessage, SystemMessage

from app.config import Settings
from app.core import llm_provider
from app.core.exceptions import ConfigurationError, UpstreamError
from app.features.chat.generation import GenerationBackend, create_generation_backend


class FakeChatModel:
    def __init__(self, contents, fail_after: int | None = None):
        self.contents = contents
        self.fail_after = fail_after
        self.received = None

    async def astream(self, messages):
        self.received = messages
        for i, content in enumerate(self.contents):
            if i == self.fail_after:
                raise RuntimeError("503 Service Unavailable")
            yield AIMessageChunk(content=content)


def _use_settings(monkeypatch, **overrides):
    settings = Settings(_env_file=None, **overrides)
    monkeypatch.setattr(llm_provider, "get_settings", lambda: settings)


class TestProviderFactory:
    def test_missing_api_key(self, monkeypatch):
        _use_settings(monkeypatch, LLM_API_KEY="")

        with pytest.raises(ConfigurationError) as exc:
            llm_provider.create_llm()
        assert exc.value.message == "서버에 AI API 키가 설정되어 있지 않습니다."

    def test_missing_api_key_through_backend_factory(self, monkeypatch):
        _use_settings(monkeypatch, LLM_API_KEY="")
        with pytest.raises(ConfigurationError):
            create_generation_backend()

    def test_unknown_llm_provider(self, monkeypatch):
        _use_settings(monkeypatch, LLM_API_KEY="key", LLM_PROVIDER="claude")

        with pytest.raises(ConfigurationError) as exc:
            llm_provider.create_llm()
        assert "claude" in exc.value.detail

    def test_unknown_embedding_provider(self, monkeypatch):
        _use_settings(monkeypatch, LLM_API_KEY="key", EMBEDDING_PROVIDER="groq")

        with pytest.raises(ConfigurationError) as exc:
            llm_provider.create_embeddings()
        assert "groq" in exc.value.detail

    def test_openai_provider(self, monkeypatch):
        from langchain_openai import ChatOpenAI

        _use_settings(monkeypatch, LLM_API_KEY="sk-test", LLM_PROVIDER="openai", LLM_MODEL="gpt-4o-mini")

        assert isinstance(llm_provider.create_llm(), ChatOpenAI)


class TestGenerationBackend:
    @pytest.mark.asyncio
    async def test_streams_text_and_sends_system_instruction(self):
        model = FakeChatModel(["관찰", "", "일지"])
        backend = GenerationBackend(model)

        fragments = [f async for f in backend.stream("프롬프트", "역할")]

        assert fragments == ["관찰", "일지"]
        assert isinstance(model.received[0], SystemMessage)
        assert model.received[0].content == "역할"
        assert isinstance(model.received[1], HumanMessage)
        assert model.received[1].content == "프롬프트"

    @pytest.mark.asyncio
    async def test_list_content_parts(self):
        model = FakeChatModel([[{"type": "text", "text": "가"}, {"type": "thinking", "thinking": "..."}, "나"]])
        fragments = [f async for f in GenerationBackend(model).stream("p", "s")]
        assert fragments == ["가나"]

    @pytest.mark.asyncio
    async def test_upstream_failure_is_wrapped(self):
        model = FakeChatModel(["앞부분", "뒷부분"], fail_after=1)
        received = []

        with pytest.raises(UpstreamError) as exc:
            async for fragment in GenerationBackend(model).stream("p", "s"):
                received.append(fragment)

        assert received == ["앞부분"]
        assert "503" in exc.value.detail
