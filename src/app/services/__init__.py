"""
Application Services.

역할:
- prompts: 요청 → 메시지 시퀀스 (순수 함수)
- completion: 메시지 시퀀스 → 텍스트 (Provider 호출 + 결과 판정)
"""

from .completion import CompletionService
from .prompts import (
    CORRECTION_TEMPLATE,
    EXPLANATION_TEMPLATE,
    PromptTemplate,
    build_correction_messages,
    build_explanation_messages,
)

__all__ = [
    "CompletionService",
    "PromptTemplate",
    "CORRECTION_TEMPLATE",
    "EXPLANATION_TEMPLATE",
    "build_correction_messages",
    "build_explanation_messages",
]
