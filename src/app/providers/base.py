"""
AI Provider 추상 인터페이스.

규칙:
- Provider 추상화로 벤더 교체 가능 (모델명은 config만 SSOT)
- model_requested + model_used 기록
- 재시도 없음: 벤더 SDK 자동 재시도도 끈다 (fail-fast, 사용자 동기 요청)
"""

import hashlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from src.domain.schemas import MessageSequence

# =============================================================================
# Call Parameters
# =============================================================================


@dataclass(frozen=True)
class LLMCallParams:
    """
    LLM 호출 파라미터.

    temperature 0.3: 창의적 변주보다 일관된 표현 쪽으로.
    """
    model: str
    max_tokens: int
    temperature: float


def compute_hash(content: str) -> str:
    """SHA-256 해시 계산 (로그용 프롬프트 지문)."""
    # 짝 없는 서로게이트도 해시 가능해야 함 (입력 원문 그대로)
    data = content.encode("utf-8", errors="surrogatepass")
    return f"sha256:{hashlib.sha256(data).hexdigest()[:16]}"


def hash_messages(messages: MessageSequence) -> str:
    """메시지 시퀀스 전체 해시. 원문 대신 로그에 남긴다."""
    joined = "\n".join(f"{m.role.value}:{m.content}" for m in messages)
    return compute_hash(joined)


# =============================================================================
# Result Data Classes
# =============================================================================


@dataclass
class CompletionResult:
    """
    Completion 결과.

    text가 None/빈 문자열이면 "벤더가 내용 없이 응답"한 별도 실패 상태.
    이 판정은 CompletionService에서 한다.
    """
    text: str | None = None

    # 모델 추적
    model_requested: str | None = None
    model_used: str | None = None

    provider: str | None = None
    request_id: str | None = None
    finish_reason: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.text


# =============================================================================
# Provider Exceptions
# =============================================================================


class ProviderError(Exception):
    """Provider 관련 에러."""

    def __init__(self, code: str, message: str, **context: Any) -> None:
        self.code = code
        self.message = message
        self.context = context
        super().__init__(f"[{code}] {message}")


class CompletionError(ProviderError):
    """Completion 호출 실패."""
    pass


# =============================================================================
# Abstract Provider
# =============================================================================


class LLMProvider(ABC):
    """
    LLM Provider 추상 인터페이스.

    역할: 메시지 시퀀스 → 생성 텍스트 (원격 함수로 취급)
    """

    name: str = "unknown"

    def __init__(self, params: LLMCallParams):
        self.params = params

    @property
    def model(self) -> str:
        return self.params.model

    @abstractmethod
    async def complete(self, messages: MessageSequence) -> CompletionResult:
        """
        메시지 시퀀스로 completion 호출.

        Args:
            messages: system/user 메시지 (순서 유지)

        Returns:
            CompletionResult (첫 번째 choice 기준)

        Raises:
            Exception: 벤더/네트워크 예외는 변환 없이 그대로 전파
        """
        ...

    async def aclose(self) -> None:
        """SDK 클라이언트 정리 (있으면)."""
        return None
