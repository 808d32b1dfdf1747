"""
Curriculum feature: Schemas for modules, scenarios, stages and the
per-request ChatContext.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Accepts both snake_case and camelCase keys from the client."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DifficultyLevel(_CamelModel):
    id: str
    label: str
    description: str


class EvaluationRubric(_CamelModel):
    id: str
    title: str
    description: str
    performance_indicators: list[str] = []
    applicable_stages: list[str] = []


class StageContent(_CamelModel):
    description: str
    prompts: list[str] = []
    self_assessment_checklist: list[str] = []
    follow_up_questions: list[str] = []
    rubric_focus: list[str] = []

    @property
    def has_feedback_material(self) -> bool:
        return bool(self.self_assessment_checklist or self.follow_up_questions)


class Scenario(_CamelModel):
    id: str
    title: str
    summary: str
    difficulty_levels: list[DifficultyLevel] = []
    evaluation_rubrics: list[EvaluationRubric] = []
    stages: dict[str, StageContent] = {}


class TrainingModule(_CamelModel):
    id: str
    name: str
    description: str
    focus_area: str
    scenarios: list[Scenario] = []


# ── Request-side descriptors (all optional) ─────────────

class ModuleDescriptor(_CamelModel):
    id: str | None = None
    name: str | None = None
    focus_area: str | None = None
    description: str | None = None


class ScenarioDescriptor(_CamelModel):
    id: str | None = None
    title: str | None = None
    summary: str | None = None


class StageDescriptor(_CamelModel):
    id: str
    label: str | None = None
    description: str | None = None


class DifficultyDescriptor(_CamelModel):
    id: str | None = None
    label: str | None = None
    description: str | None = None


class ChatContextRequest(_CamelModel):
    """Curriculum selection sent by the client with each question."""
    module: ModuleDescriptor | None = None
    scenario: ScenarioDescriptor | None = None
    stage: StageDescriptor | None = None
    difficulty: DifficultyDescriptor | None = None
    rubric_id: str | None = None
    rubrics: list[str] = []
    progress_summary: str | None = None


class ChatContext(BaseModel):
    """Resolved, immutable curriculum context for one request."""
    module_name: str | None = None
    module_focus_area: str | None = None
    module_description: str | None = None
    scenario_id: str | None = None
    scenario_title: str | None = None
    scenario_summary: str | None = None
    difficulty_label: str | None = None
    difficulty_description: str | None = None
    stage_id: str | None = None
    stage_label: str | None = None
    stage_description: str | None = None
    rubrics: tuple[str, ...] = ()
    rubric_reminders: tuple[str, ...] = ()  # "title: indicator, indicator"
    progress_summary: str | None = None
    stage_content: StageContent | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def focus_hints(self) -> list[str]:
        """Hints that steer keyword retrieval toward the selected curriculum."""
        hints = [self.module_focus_area or "", self.stage_label or "", *self.rubrics]
        return [hint for hint in hints if hint]
