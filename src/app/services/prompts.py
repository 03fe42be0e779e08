"""
Prompt Builder: 요청 데이터 → 역할 태그 메시지 시퀀스.

규칙:
- 순수 함수: 상태 없음, 같은 입력 → 같은 출력
- 사용자 입력은 원문 그대로 삽입 (요약/절단/trim 금지)
- 템플릿은 이름 붙은 값으로 분리 (문구 변경 시 version 올림)
"""

from dataclasses import dataclass

from src.domain.schemas import (
    CompletionMessage,
    CorrectionRequest,
    ExplanationRequest,
    MessageRole,
    MessageSequence,
)


@dataclass(frozen=True)
class PromptTemplate:
    """
    system + user 2단 프롬프트 템플릿.

    user는 str.format 템플릿. 치환 값 안의 중괄호는 다시 해석되지 않음.
    """
    template_id: str
    version: str
    system: str
    user: str

    def render(self, **variables: str) -> MessageSequence:
        return (
            CompletionMessage(role=MessageRole.SYSTEM, content=self.system),
            CompletionMessage(role=MessageRole.USER, content=self.user.format(**variables)),
        )


# =============================================================================
# Templates
# =============================================================================

CORRECTION_TEMPLATE = PromptTemplate(
    template_id="correct_text",
    version="1.0.0",
    system=(
        "You are a professional writing assistant. Correct grammar, spelling, "
        "punctuation, and improve sentence structure. Provide the corrected version "
        "followed by a brief explanation of the changes made. Format your response as:"
        "\n\nCorrected Text:\n[corrected version]"
        "\n\nChanges Made:\n- [list of corrections and improvements]"
    ),
    user="Please correct the following text:\n\n{text}",
)

EXPLANATION_TEMPLATE = PromptTemplate(
    template_id="explain_code",
    version="1.0.0",
    system=(
        "You are an expert software engineer who explains code to other developers. "
        "Explain what the given code does: its overall purpose, how the key parts work, "
        "and anything notable such as edge cases or potential bugs. Be concise and "
        "clear. Use short paragraphs or bullet points, **bold** for key concepts and "
        "`inline code` for identifiers. Keep the explanation under 300 words."
    ),
    user="Explain the following code:\n\n```{language}\n{code}\n```",
)


# =============================================================================
# Builders
# =============================================================================


def build_correction_messages(request: CorrectionRequest) -> MessageSequence:
    """
    텍스트 교정 프롬프트.

    Returns:
        (system, user) - system은 "Corrected Text:" / "Changes Made:" 형식 강제
    """
    return CORRECTION_TEMPLATE.render(text=request.text)


def build_explanation_messages(request: ExplanationRequest) -> MessageSequence:
    """
    코드 설명 프롬프트.

    코드는 언어 태그가 붙은 펜스 블록 안에 원문 그대로. 언어가 없으면 빈 태그.
    """
    return EXPLANATION_TEMPLATE.render(
        language=request.language or "",
        code=request.code,
    )
