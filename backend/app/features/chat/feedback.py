"""
Chat feature: Stage feedback bundle.

Sent once per (session, scenario, stage), attached to the first clean
`done` event of a stage that has checklist or follow-up material.
"""

from app.features.curriculum.schemas import StageContent


def _numbered(items: list[str]) -> str:
    return "\n".join(f"{i}. {item}" for i, item in enumerate(items, start=1))


def build_feedback_bundle(
    stage_label: str,
    stage_content: StageContent | None,
    rubric_reminders: list[str] | tuple[str, ...] = (),
) -> str | None:
    """Render the feedback loop message for a completed stage.

    Args:
        stage_label: Display label of the stage, e.g. "진단".
        stage_content: Checklist and follow-up questions of the stage.
        rubric_reminders: "title: indicator, indicator" lines.

    Returns:
        The message text, or None when there is nothing to send.
    """
    sections: list[str] = []
    if stage_content and stage_content.self_assessment_checklist:
        sections.append(f"자가 평가 체크리스트\n{_numbered(stage_content.self_assessment_checklist)}")
    if stage_content and stage_content.follow_up_questions:
        sections.append(f"후속 질문 제안\n{_numbered(stage_content.follow_up_questions)}")
    if rubric_reminders:
        sections.append("평가 기준 리마인드\n" + "\n".join(f"- {line}" for line in rubric_reminders))

    if not sections:
        return None
    return f"{stage_label} 단계 피드백 루프 제안\n\n" + "\n\n".join(sections)
