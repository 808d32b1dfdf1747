"""
Chat feature: Orchestrator.

One question in, one event stream out:

    validate → supersede in-flight stream → ChatContext → evidence
    → prompt → generation chunks → progress transition → done

Every path ends with exactly one terminal event (done or error). Within one
session at most one generation is active; a new question cancels the
previous one through its cancellation token.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable

from app.core.exceptions import AppBaseError, ConfigurationError, UpstreamError, ValidationError
from app.features.chat.feedback import build_feedback_bundle
from app.features.chat.generation import GenerationBackend, create_generation_backend
from app.features.chat.progress import ProgressStore, get_progress_store
from app.features.chat.prompts import (
    build_evidence,
    build_system_instruction,
    compose_prompt,
    format_citations,
)
from app.features.chat.schemas import ChatRequest, ChunkEvent, DoneEvent, ErrorEvent
from app.features.curriculum.context import build_chat_context
from app.features.curriculum.schemas import ChatContext
from app.features.knowledge.service import KnowledgeService, get_knowledge_service

logger = logging.getLogger(__name__)

SUPERSEDED_MESSAGE = "새 질문으로 이전 응답이 중단되었습니다."
UNEXPECTED_MESSAGE = "AI 응답을 생성하는 중 문제가 발생했습니다."

_END = object()


async def _next_fragment(fragments: AsyncIterator[str]):
    try:
        return await fragments.__anext__()
    except StopAsyncIteration:
        return _END


class ChatOrchestrator:
    def __init__(
        self,
        knowledge: KnowledgeService,
        progress: ProgressStore,
        backend_factory: Callable[[], GenerationBackend] = create_generation_backend,
    ):
        self.knowledge = knowledge
        self.progress = progress
        self.backend_factory = backend_factory
        self._active: dict[str, asyncio.Event] = {}

    def is_active(self, session_id: str) -> bool:
        return session_id in self._active

    def cancel(self, session_id: str) -> bool:
        """Cancel the in-flight generation of a session, if any."""
        token = self._active.get(session_id)
        if token is None:
            return False
        token.set()
        return True

    async def stream_chat(
        self, request: ChatRequest, session_id: str
    ) -> AsyncIterator[ChunkEvent | DoneEvent | ErrorEvent]:
        question = (request.message or "").strip()
        if not question:
            yield ErrorEvent(message=ValidationError().message)
            return

        if self.cancel(session_id):
            logger.info(f"Superseding in-flight stream for session {session_id}")
        token = asyncio.Event()
        self._active[session_id] = token

        events = self._run(question, request, session_id, token)
        try:
            async for event in events:
                yield event
        finally:
            if self._active.get(session_id) is token:
                del self._active[session_id]
            await events.aclose()

    async def _run(
        self, question: str, request: ChatRequest, session_id: str, token: asyncio.Event
    ) -> AsyncIterator[ChunkEvent | DoneEvent | ErrorEvent]:
        try:
            context = build_chat_context(request.context)
            evidence = await self.knowledge.retrieve(question, context.focus_hints)
            if token.is_set():
                yield ErrorEvent(message=SUPERSEDED_MESSAGE)
                return

            prompt = compose_prompt(
                question,
                context,
                evidence,
                self.progress.completed_stage_labels(session_id, context.scenario_id),
            )
            backend = self.backend_factory()
        except AppBaseError as e:
            logger.error(f"Chat setup failed: {e.message} ({e.detail})")
            yield ErrorEvent(message=e.message)
            return
        except Exception as e:
            logger.error(f"Chat setup error: {e}", exc_info=True)
            yield ErrorEvent(message=UNEXPECTED_MESSAGE)
            return

        fragments = backend.stream(prompt, build_system_instruction(context))
        cancelled = asyncio.ensure_future(token.wait())
        pending_read: asyncio.Future | None = None
        parts: list[str] = []

        try:
            while True:
                pending_read = asyncio.ensure_future(_next_fragment(fragments))
                await asyncio.wait({pending_read, cancelled}, return_when=asyncio.FIRST_COMPLETED)
                if token.is_set():
                    yield ErrorEvent(message=SUPERSEDED_MESSAGE)
                    return

                fragment = pending_read.result()
                pending_read = None
                if fragment is _END:
                    break
                parts.append(fragment)
                yield ChunkEvent(text=fragment)
        except UpstreamError as e:
            logger.error(f"Generation failed after {len(parts)} chunks: {e.detail}", exc_info=True)
            yield ErrorEvent(message=e.message)
            return
        except AppBaseError as e:
            logger.error(f"Generation failed: {e.message} ({e.detail})")
            yield ErrorEvent(message=e.message)
            return
        except Exception as e:
            logger.error(f"Chat stream error: {e}", exc_info=True)
            yield ErrorEvent(message=UNEXPECTED_MESSAGE)
            return
        finally:
            cancelled.cancel()
            if pending_read is not None and not pending_read.done():
                pending_read.cancel()
                await asyncio.wait({pending_read})
            await fragments.aclose()

        if token.is_set():
            yield ErrorEvent(message=SUPERSEDED_MESSAGE)
            return

        feedback = self._complete_stage(session_id, context)
        yield DoneEvent(
            text="".join(parts),
            citations=format_citations(evidence),
            evidence=build_evidence(evidence),
            feedback=feedback,
            session_id=session_id,
        )

    def _complete_stage(self, session_id: str, context: ChatContext) -> str | None:
        """Progress transition after a clean completion; returns the feedback bundle if released."""
        if not context.scenario_id or not context.stage_id:
            return None

        stage_content = context.stage_content
        release = self.progress.complete_stage(
            session_id,
            context.scenario_id,
            context.stage_id,
            has_feedback_material=bool(stage_content and stage_content.has_feedback_material),
        )
        if not release:
            return None
        return build_feedback_bundle(
            context.stage_label or context.stage_id,
            stage_content,
            context.rubric_reminders,
        )


# ── Singleton ─────────────────────────────────────────────

_orchestrator: ChatOrchestrator | None = None


def get_orchestrator() -> ChatOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = ChatOrchestrator(
            knowledge=get_knowledge_service(),
            progress=get_progress_store(),
        )
    return _orchestrator
