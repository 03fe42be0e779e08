"""
Data schemas for the request pipeline.

규칙:
- 영속 엔티티 없음: 모든 값은 요청 1회 처리 후 폐기
- 요청 본문 → dataclass 변환 시점에 검증 (실패 시 RequestValidationFailed)
- 메시지 시퀀스는 생성 후 불변 (frozen + tuple)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .constants import UNKNOWN_LANGUAGE
from .errors import ErrorMessages, RequestValidationFailed


def _is_present(value: Any) -> bool:
    """문자열이고 비어있지 않은지."""
    return isinstance(value, str) and value != ""


# =============================================================================
# Request Schemas
# =============================================================================

@dataclass(frozen=True)
class CorrectionRequest:
    """POST /api/correct-text 본문."""
    text: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "CorrectionRequest":
        """
        파싱된 JSON 본문에서 생성.

        Raises:
            RequestValidationFailed: text 누락/빈 문자열/문자열 아님
        """
        text = payload.get("text")
        if not _is_present(text):
            raise RequestValidationFailed(ErrorMessages.TEXT_REQUIRED, field="text")
        return cls(text=text)


@dataclass(frozen=True)
class ExplanationRequest:
    """
    POST /api/explain-code 본문.

    language는 검증 단계에서 필수지만, 응답 라벨은 값이 없으면 "unknown".
    프롬프트 펜스 태그와 응답 라벨 모두 소문자로 통일.
    """
    code: str
    language: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ExplanationRequest":
        """
        파싱된 JSON 본문에서 생성.

        Raises:
            RequestValidationFailed: code 또는 language 누락
        """
        code = payload.get("code")
        language = payload.get("language")
        if not _is_present(code) or not _is_present(language):
            raise RequestValidationFailed(
                ErrorMessages.CODE_AND_LANGUAGE_REQUIRED,
                field="code" if not _is_present(code) else "language",
            )
        return cls(code=code, language=language.lower())

    @property
    def display_language(self) -> str:
        """응답에 에코할 언어 라벨."""
        return self.language or UNKNOWN_LANGUAGE


# =============================================================================
# Completion Schemas
# =============================================================================

class MessageRole(str, Enum):
    """Completion API 메시지 역할."""
    SYSTEM = "system"
    USER = "user"


@dataclass(frozen=True)
class CompletionMessage:
    """역할 태그가 붙은 프롬프트 블록."""
    role: MessageRole
    content: str

    def to_dict(self) -> dict[str, str]:
        """벤더 SDK 전달용."""
        return {"role": self.role.value, "content": self.content}


# 순서 있는 불변 시퀀스
MessageSequence = tuple[CompletionMessage, ...]
