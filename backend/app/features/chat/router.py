"""
Chat feature: Streaming chat API routes.
"""

import logging
import uuid

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from app.features.chat.orchestrator import ChatOrchestrator, get_orchestrator
from app.features.chat.progress import ProgressStore, get_progress_store
from app.features.chat.relay import SSE_HEADERS, sse_stream
from app.features.chat.schemas import (
    AnswerFeedbackRequest,
    ChatRequest,
    ScenarioProgressResponse,
    SessionProgressResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("")
async def chat(
    data: ChatRequest,
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
):
    """Ask the mentor a question; answer arrives as server-sent events."""
    session_id = data.session_id or uuid.uuid4().hex
    events = orchestrator.stream_chat(data, session_id)
    return StreamingResponse(
        sse_stream(events),
        media_type="text/event-stream; charset=utf-8",
        headers={**SSE_HEADERS, "X-Session-Id": session_id},
    )


@router.get("/sessions/{session_id}/progress", response_model=SessionProgressResponse)
async def get_session_progress(
    session_id: str,
    progress: ProgressStore = Depends(get_progress_store),
):
    """Completed stages and delivered feedback per scenario for one session."""
    snapshot = progress.snapshot(session_id)
    return SessionProgressResponse(
        session_id=session_id,
        scenarios={
            scenario_id: ScenarioProgressResponse(
                completed_stages=sorted(p.completed_stages),
                feedback_delivered=sorted(p.feedback_delivered),
            )
            for scenario_id, p in snapshot.items()
        },
    )


@router.post("/feedback")
async def record_answer_feedback(data: AnswerFeedbackRequest):
    """Log a trainee's thumbs-up / thumbs-down on one answer."""
    logger.info(
        f"Answer feedback: rating={data.rating} session={data.session_id or '-'} "
        f"question={data.question!r} answer={data.answer!r}"
    )
    return {"status": "recorded"}
