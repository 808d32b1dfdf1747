"""
Curriculum feature: build the immutable ChatContext for one request.

Descriptors sent by the client win; anything they leave out is filled in
from the curriculum catalog when the ids are known there.
"""

from app.features.curriculum.catalog import find_scenario, get_module, stage_label
from app.features.curriculum.schemas import (
    ChatContext,
    ChatContextRequest,
    EvaluationRubric,
    Scenario,
    StageContent,
)


def select_rubrics(
    scenario: Scenario,
    stage_content: StageContent | None,
    rubric_id: str | None,
) -> list[EvaluationRubric]:
    """Rubrics that apply to the current stage.

    With no explicit selection, every rubric the stage focuses on (or all of
    the scenario's rubrics when the stage names none). An explicit rubric id
    narrows that to one rubric; an unknown id falls back to the first
    applicable rubric.
    """
    focus_ids = stage_content.rubric_focus if stage_content else []
    available = (
        [r for r in scenario.evaluation_rubrics if r.id in focus_ids]
        if focus_ids
        else list(scenario.evaluation_rubrics)
    )
    if rubric_id is None:
        return available

    explicit = next((r for r in scenario.evaluation_rubrics if r.id == rubric_id), None)
    return [explicit] if explicit else available[:1]


def build_chat_context(request: ChatContextRequest | None) -> ChatContext:
    if request is None:
        return ChatContext()

    module_desc = request.module
    module = get_module(module_desc.id) if module_desc else None
    scenario_desc = request.scenario
    scenario = (
        find_scenario(scenario_desc.id, module.id if module else None)
        if scenario_desc and scenario_desc.id
        else None
    )

    fields: dict = {"progress_summary": request.progress_summary or None}

    if module_desc:
        fields["module_name"] = module_desc.name or (module.name if module else None)
        fields["module_focus_area"] = module_desc.focus_area or (module.focus_area if module else None)
        fields["module_description"] = module_desc.description or (module.description if module else None)

    if scenario_desc:
        fields["scenario_id"] = scenario_desc.id
        fields["scenario_title"] = scenario_desc.title or (scenario.title if scenario else None)
        fields["scenario_summary"] = scenario_desc.summary or (scenario.summary if scenario else None)

    difficulty_desc = request.difficulty
    if difficulty_desc:
        level = None
        if scenario and difficulty_desc.id:
            level = next((d for d in scenario.difficulty_levels if d.id == difficulty_desc.id), None)
        fields["difficulty_label"] = difficulty_desc.label or (level.label if level else None)
        fields["difficulty_description"] = difficulty_desc.description or (level.description if level else None)

    stage_content = None
    stage_desc = request.stage
    if stage_desc:
        stage_content = scenario.stages.get(stage_desc.id) if scenario else None
        fields["stage_id"] = stage_desc.id
        fields["stage_label"] = stage_desc.label or stage_label(stage_desc.id)
        fields["stage_description"] = stage_desc.description or (
            stage_content.description if stage_content else None
        )
        fields["stage_content"] = stage_content

    if scenario:
        rubrics = select_rubrics(scenario, stage_content, request.rubric_id)
        fields["rubrics"] = tuple(r.title for r in rubrics)
        fields["rubric_reminders"] = tuple(
            f"{r.title}: {', '.join(r.performance_indicators)}" for r in rubrics
        )
    if request.rubrics:
        fields["rubrics"] = tuple(request.rubrics)

    return ChatContext(**fields)
