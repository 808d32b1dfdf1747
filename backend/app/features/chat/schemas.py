"""
Chat feature: request and stream event schemas.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from app.features.curriculum.schemas import ChatContextRequest


class ChatRequest(BaseModel):
    message: str = ""
    session_id: str | None = None
    context: ChatContextRequest | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Stream events (closed union, discriminated by "type") ─

class ChunkEvent(BaseModel):
    type: Literal["chunk"] = "chunk"
    text: str


class EvidenceItem(BaseModel):
    """One retrieved passage as shown to the client next to the answer."""
    id: str
    title: str
    citation: str
    uri: str | None = None
    snippet: str


class DoneEvent(BaseModel):
    type: Literal["done"] = "done"
    text: str
    citations: list[str] = []
    evidence: list[EvidenceItem] = []
    feedback: str | None = None  # stage feedback bundle, first completion only
    session_id: str | None = None


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    message: str


StreamEvent = Annotated[Union[ChunkEvent, DoneEvent, ErrorEvent], Field(discriminator="type")]

stream_event_adapter: TypeAdapter[StreamEvent] = TypeAdapter(StreamEvent)

TERMINAL_EVENT_TYPES = ("done", "error")


def is_terminal(event: ChunkEvent | DoneEvent | ErrorEvent) -> bool:
    return event.type in TERMINAL_EVENT_TYPES


class ScenarioProgressResponse(BaseModel):
    completed_stages: list[str]
    feedback_delivered: list[str]


class SessionProgressResponse(BaseModel):
    session_id: str
    scenarios: dict[str, ScenarioProgressResponse]


class AnswerFeedbackRequest(BaseModel):
    question: str
    answer: str
    rating: Literal["positive", "negative"]
    session_id: str | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
