"""API tests for the chat, knowledge and curriculum routes via FastAPI TestClient."""

import json
import logging

import pytest
from fastapi.testclient import TestClient

from app.features.chat.orchestrator import ChatOrchestrator, get_orchestrator
from app.features.chat.progress import ProgressStore, get_progress_store
from app.features.knowledge.catalog import DEFAULT_CATALOG
from app.features.knowledge.service import KnowledgeService, get_knowledge_service
from app.main import app


class _FakeBackend:
    def __init__(self, fragments):
        self.fragments = fragments

    async def stream(self, prompt, system_instruction):
        for fragment in self.fragments:
            yield fragment


def parse_sse_events(text: str) -> list[dict]:
    """Parse an SSE response body into a list of event dicts."""
    events = []
    for frame in text.split("\n\n"):
        for line in frame.split("\n"):
            if line.startswith("data: "):
                events.append(json.loads(line[6:]))
    return events


@pytest.fixture
def progress():
    return ProgressStore()


@pytest.fixture
def client(progress):
    knowledge = KnowledgeService(DEFAULT_CATALOG)
    orchestrator = ChatOrchestrator(
        knowledge=knowledge,
        progress=progress,
        backend_factory=lambda: _FakeBackend(["관찰일지는 ", "사실 중심으로 씁니다."]),
    )
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_progress_store] = lambda: progress
    app.dependency_overrides[get_knowledge_service] = lambda: knowledge
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestChatStream:
    def test_grounded_answer_stream(self, client):
        response = client.post("/api/chat", json={"message": "관찰일지 쓰는 법 알려줘"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache, no-transform"
        assert response.text.startswith(": connected\n\n")

        events = parse_sse_events(response.text)
        assert [e["type"] for e in events] == ["chunk", "chunk", "done"]
        assert events[-1]["text"] == "관찰일지는 사실 중심으로 씁니다."
        assert events[-1]["citations"] == ["[출처1] 표준보육과정 해설서, p.34"]
        assert events[-1]["evidence"] == [
            {
                "id": "doc-1",
                "title": "표준보육과정: 관찰일지 작성 지침",
                "citation": "표준보육과정 해설서, p.34",
                "snippet": DEFAULT_CATALOG[0].content,
            }
        ]

    def test_session_id_generated_when_absent(self, client):
        response = client.post("/api/chat", json={"message": "오늘 날씨"})

        session_id = response.headers["x-session-id"]
        assert len(session_id) == 32
        events = parse_sse_events(response.text)
        assert events[-1]["session_id"] == session_id
        assert events[-1]["citations"] == []

    def test_session_id_echoed(self, client):
        response = client.post("/api/chat", json={"message": "질문", "sessionId": "my-session"})
        assert response.headers["x-session-id"] == "my-session"

    def test_empty_message_is_single_error_event(self, client):
        response = client.post("/api/chat", json={"message": "  "})

        assert response.status_code == 200
        assert parse_sse_events(response.text) == [
            {"type": "error", "message": "질문이 비어 있습니다. 질문을 입력해 주세요."}
        ]

    def test_stage_completion_and_progress_endpoint(self, client):
        body = {
            "message": "관찰일지 쓰는 법 알려줘",
            "sessionId": "s1",
            "context": {
                "module": {"id": "observation-documentation"},
                "scenario": {"id": "transition-support"},
                "stage": {"id": "diagnosis"},
            },
        }
        first = parse_sse_events(client.post("/api/chat", json=body).text)
        second = parse_sse_events(client.post("/api/chat", json=body).text)

        assert first[-1]["feedback"].startswith("진단 단계 피드백 루프 제안")
        assert "feedback" not in second[-1]

        response = client.get("/api/chat/sessions/s1/progress")
        assert response.json() == {
            "session_id": "s1",
            "scenarios": {
                "transition-support": {
                    "completed_stages": ["diagnosis"],
                    "feedback_delivered": ["diagnosis"],
                }
            },
        }

    def test_progress_of_unknown_session_is_empty(self, client):
        response = client.get("/api/chat/sessions/nobody/progress")
        assert response.json() == {"session_id": "nobody", "scenarios": {}}


class TestAnswerFeedback:
    def test_rating_is_logged(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="app.features.chat.router"):
            response = client.post("/api/chat/feedback", json={
                "question": "관찰일지 쓰는 법 알려줘",
                "answer": "관찰일지는 사실 중심으로 씁니다.",
                "rating": "negative",
                "sessionId": "s-42",
            })

        assert response.status_code == 200
        assert response.json() == {"status": "recorded"}
        logged = [r.getMessage() for r in caplog.records if r.name == "app.features.chat.router"]
        assert len(logged) == 1
        assert "rating=negative" in logged[0]
        assert "session=s-42" in logged[0]
        assert "관찰일지 쓰는 법 알려줘" in logged[0]
        assert "관찰일지는 사실 중심으로 씁니다." in logged[0]

    def test_unknown_rating_is_rejected(self, client):
        response = client.post("/api/chat/feedback", json={
            "question": "질문",
            "answer": "답변",
            "rating": "meh",
        })
        assert response.status_code == 422


class TestKnowledgeRoutes:
    def test_list_documents(self, client):
        documents = client.get("/api/knowledge/documents").json()
        assert [d["id"] for d in documents] == ["doc-1", "doc-2", "doc-3"]

    def test_search_preview(self, client):
        response = client.post("/api/knowledge/search", json={"query": "관찰일지 쓰는 법 알려줘"})
        results = response.json()
        assert results[0]["id"] == "doc-1"
        assert results[0]["score"] == 3

    def test_status(self, client):
        status = client.get("/api/knowledge/status").json()
        assert status["backend"] == "keyword"
        assert status["document_count"] == 3
        assert status["index_state"] == "not_applicable"


class TestCurriculumRoutes:
    def test_modules(self, client):
        modules = client.get("/api/curriculum/modules").json()
        assert [m["id"] for m in modules] == ["observation-documentation", "family-communication"]

    def test_unknown_module(self, client):
        assert client.get("/api/curriculum/modules/missing").status_code == 404

    def test_stages(self, client):
        assert client.get("/api/curriculum/stages").json() == [
            {"id": "diagnosis", "label": "진단"},
            {"id": "deepening", "label": "심화"},
            {"id": "coaching", "label": "코칭"},
        ]


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"
