from pydantic import BaseModel, ConfigDict, Field


class KnowledgeDocument(BaseModel):
    """A read-only reference passage that can ground an answer."""
    id: str
    title: str
    summary: str = ""
    content: str
    citation: str
    keywords: list[str] = []
    focus_areas: list[str] = Field(default_factory=list, alias="focusAreas")
    uri: str | None = None

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ScoredDocument(KnowledgeDocument):
    """A document paired with its score for one retrieval call."""
    score: float


class KnowledgeSearchRequest(BaseModel):
    query: str
    focus_hints: list[str] = []
    limit: int | None = None


class KnowledgeStatusResponse(BaseModel):
    backend: str
    document_count: int
    index_state: str  # not_applicable | not_initialized | ready | failed
    message: str = ""
