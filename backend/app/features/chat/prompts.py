"""
Chat feature: Mentor role instruction and prompt composition.
"""

from app.features.chat.schemas import EvidenceItem
from app.features.curriculum.schemas import ChatContext
from app.features.knowledge.schemas import KnowledgeDocument

ROLE_INSTRUCTION_LINES = (
    "당신은 대한민국 상위 0.1% 보육교사 연수생을 지원하는 AI 멘토입니다.",
    "모든 답변은 한국어로 하며, 과학적 근거와 보육 정책을 기반으로 한 실행 가능한 전략을 제시하세요.",
    "응답에는 제시된 근거 자료를 인용하여 [출처1], [출처2]와 같은 형식으로 명시하고, 근거가 없으면 신중하게 응답을 보류하세요.",
    "질문이 보육 및 영유아 교육과 무관하면 정중하게 답변을 거절하세요.",
)

CONTEXT_HEADER = "훈련 컨텍스트:"
EVIDENCE_HEADER = "근거 자료:"
NO_EVIDENCE_NOTICE = "관련 근거 자료를 찾지 못했습니다. 전문 지식과 윤리 기준에 따라 신중하게 답변하세요."
NO_PROGRESS = "없음"
SNIPPET_MAX_CHARS = 220


def build_context_lines(context: ChatContext) -> list[str]:
    """One line per present context field; absent fields omit their line."""
    lines: list[str] = []
    if context.module_name:
        lines.append(f"모듈: {context.module_name} ({context.module_focus_area or '초점 미지정'})")
        if context.module_description:
            lines.append(f"모듈 설명: {context.module_description}")
    if context.scenario_title:
        lines.append(f"시나리오: {context.scenario_title}")
        if context.scenario_summary:
            lines.append(f"시나리오 개요: {context.scenario_summary}")
    if context.difficulty_label:
        suffix = f" - {context.difficulty_description}" if context.difficulty_description else ""
        lines.append(f"난이도: {context.difficulty_label}{suffix}")
    if context.stage_label:
        suffix = f" - {context.stage_description}" if context.stage_description else ""
        lines.append(f"학습 단계: {context.stage_label}{suffix}")
    if context.rubrics:
        lines.append(f"평가 루브릭 강조: {', '.join(context.rubrics)}")
    if context.progress_summary:
        lines.append(f"학습 진행 요약: {context.progress_summary}")
    return lines


def render_evidence(evidence: list[KnowledgeDocument]) -> str:
    if not evidence:
        return NO_EVIDENCE_NOTICE
    return "\n\n".join(
        f"출처 {i}: {doc.title}\n요약: {doc.summary}\n핵심 내용: {doc.content}"
        for i, doc in enumerate(evidence, start=1)
    )


def render_progress_line(completed_stage_labels: list[str]) -> str:
    return f"완료된 단계: {', '.join(completed_stage_labels) or NO_PROGRESS}"


def format_citations(evidence: list[KnowledgeDocument]) -> list[str]:
    """Citation strings in retrieval rank order."""
    return [f"[출처{i}] {doc.citation}" for i, doc in enumerate(evidence, start=1)]


def build_evidence(evidence: list[KnowledgeDocument]) -> list[EvidenceItem]:
    """Client-facing evidence items; long passages are cut to a snippet."""
    return [
        EvidenceItem(
            id=doc.id,
            title=doc.title,
            citation=doc.citation,
            uri=doc.uri,
            snippet=(
                doc.content
                if len(doc.content) <= SNIPPET_MAX_CHARS
                else doc.content[: SNIPPET_MAX_CHARS - 3] + "..."
            ),
        )
        for doc in evidence
    ]


def compose_prompt(
    question: str,
    context: ChatContext,
    evidence: list[KnowledgeDocument],
    completed_stage_labels: list[str] | None = None,
) -> str:
    """Assemble the user-turn prompt.

    Segments are separated by a blank line, always in this order:
    context block (only when any field is present), evidence block,
    progress line, question line.
    """
    segments: list[str] = []
    context_lines = build_context_lines(context)
    if context_lines:
        segments.append("\n".join([CONTEXT_HEADER, *context_lines]))
    segments.append(f"{EVIDENCE_HEADER}\n{render_evidence(evidence)}")
    segments.append(render_progress_line(completed_stage_labels or []))
    segments.append(f"사용자 질문: {question}")
    return "\n\n".join(segments)


def build_system_instruction(context: ChatContext) -> str:
    parts = list(ROLE_INSTRUCTION_LINES)
    if context.stage_description:
        parts.append(f"현재 학습 단계의 목표: {context.stage_description}")
    if context.rubrics:
        parts.append(f"평가 루브릭 관점: {', '.join(context.rubrics)}")
    return "\n".join(parts)
