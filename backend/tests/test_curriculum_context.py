"""Unit tests for ChatContext resolution from client selectors."""

from app.features.curriculum.catalog import find_scenario, get_module, ordered_stage_labels
from app.features.curriculum.context import build_chat_context, select_rubrics
from app.features.curriculum.schemas import ChatContextRequest


def test_no_context_builds_empty_context():
    context = build_chat_context(None)
    assert context.focus_hints == []
    assert context.stage_content is None


def test_ids_are_resolved_from_catalog():
    request = ChatContextRequest.model_validate({
        "module": {"id": "observation-documentation"},
        "scenario": {"id": "transition-support"},
        "stage": {"id": "diagnosis"},
        "difficulty": {"id": "basic"},
    })

    context = build_chat_context(request)

    assert context.module_name == "관찰 및 기록 역량 강화"
    assert context.module_focus_area == "Observation & Documentation"
    assert context.scenario_title == "전이 활동이 어려운 유아 지원"
    assert context.stage_label == "진단"
    assert context.difficulty_label == "기초"
    assert context.rubrics == ("관찰 기록의 명확성",)
    assert context.rubric_reminders[0].startswith("관찰 기록의 명확성: ")
    assert context.stage_content is not None
    assert context.stage_content.has_feedback_material


def test_client_descriptors_win_over_catalog():
    request = ChatContextRequest.model_validate({
        "module": {"id": "observation-documentation", "name": "맞춤 모듈", "focusArea": "Custom"},
        "scenario": {"id": "transition-support", "title": "맞춤 시나리오"},
        "stage": {"id": "deepening", "label": "심화 단계", "description": "맞춤 목표"},
        "rubrics": ["내 루브릭"],
        "progressSummary": "진단 완료",
    })

    context = build_chat_context(request)

    assert context.module_name == "맞춤 모듈"
    assert context.module_focus_area == "Custom"
    assert context.scenario_title == "맞춤 시나리오"
    assert context.stage_label == "심화 단계"
    assert context.stage_description == "맞춤 목표"
    assert context.rubrics == ("내 루브릭",)
    assert [r.split(": ")[0] for r in context.rubric_reminders] == ["관찰 기록의 명확성", "전략의 적합성"]
    assert context.progress_summary == "진단 완료"
    assert context.focus_hints == ["Custom", "심화 단계", "내 루브릭"]


def test_client_rubrics_keep_catalog_reminders_for_feedback():
    request = ChatContextRequest.model_validate({
        "scenario": {"id": "transition-support"},
        "stage": {"id": "coaching"},
        "rubricId": "reflection",
        "rubrics": ["성찰 루브릭"],
    })

    context = build_chat_context(request)

    assert context.rubrics == ("성찰 루브릭",)
    assert len(context.rubric_reminders) == 1
    assert context.rubric_reminders[0].startswith("성찰과 코칭 계획: ")


def test_unknown_scenario_keeps_client_values_only():
    request = ChatContextRequest.model_validate({
        "scenario": {"id": "unknown", "title": "외부 시나리오"},
        "stage": {"id": "coaching"},
    })

    context = build_chat_context(request)

    assert context.scenario_id == "unknown"
    assert context.scenario_title == "외부 시나리오"
    assert context.stage_label == "코칭"
    assert context.stage_content is None
    assert context.rubrics == ()


class TestSelectRubrics:
    def setup_method(self):
        self.scenario = find_scenario("transition-support")

    def test_stage_focus_filters_rubrics(self):
        rubrics = select_rubrics(self.scenario, self.scenario.stages["deepening"], None)
        assert [r.id for r in rubrics] == ["clarity", "strategy-fit"]

    def test_explicit_rubric(self):
        rubrics = select_rubrics(self.scenario, self.scenario.stages["diagnosis"], "reflection")
        assert [r.id for r in rubrics] == ["reflection"]

    def test_unknown_rubric_falls_back_to_first_applicable(self):
        rubrics = select_rubrics(self.scenario, self.scenario.stages["coaching"], "missing")
        assert [r.id for r in rubrics] == ["strategy-fit"]

    def test_no_stage_content_uses_all_rubrics(self):
        rubrics = select_rubrics(self.scenario, None, None)
        assert len(rubrics) == 3


def test_catalog_lookups():
    assert get_module("family-communication").focus_area == "Family Engagement"
    assert get_module("missing") is None
    assert find_scenario("family-partnership", "observation-documentation") is None
    assert ordered_stage_labels({"coaching", "diagnosis"}) == ["진단", "코칭"]
