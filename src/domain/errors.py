"""
Error definitions for the request pipeline.

규칙:
- 조용한 실패 금지 → 핸들러 단계 실패는 모두 ApiError로 명시
- 핸들러에서 잡아서 구조화된 JSON으로 변환 (처리되지 않은 예외 없음)
- 재시도 없음: 모든 요청은 single-shot
"""

from typing import Any


class ApiError(Exception):
    """
    HTTP 응답으로 변환되는 파이프라인 에러.

    Usage:
        raise RequestValidationFailed(ErrorMessages.TEXT_REQUIRED, field="text")
    """

    status_code: int = 500

    def __init__(self, error: str, details: str | None = None, **context: Any) -> None:
        self.error = error
        self.details = details
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"[{self.status_code}] {self.error}" + (f" ({ctx_str})" if ctx_str else "")

    def to_dict(self) -> dict[str, Any]:
        """응답 본문용. details는 있을 때만 포함."""
        body: dict[str, Any] = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


class RequestValidationFailed(ApiError):
    """필수 필드 누락/빈 값. 사용자가 고칠 수 있는 에러."""

    status_code = 400


class EmptyCompletionError(ApiError):
    """벤더 호출은 성공했지만 사용 가능한 내용이 없음."""

    status_code = 500


class UpstreamError(ApiError):
    """
    벤더/네트워크 예외.

    details에 벤더 메시지를 그대로 담는다 (진단용).
    """

    status_code = 500

    def __init__(self, details: str, **context: Any) -> None:
        super().__init__(ErrorMessages.INTERNAL_SERVER_ERROR, details=details, **context)


# =============================================================================
# Error Messages (API 계약 - 문구 변경 금지)
# =============================================================================

class ErrorMessages:
    """응답 본문의 error 문자열. 클라이언트가 그대로 표시함."""

    # === Validation (400) ===
    TEXT_REQUIRED = "Text is required."
    CODE_AND_LANGUAGE_REQUIRED = "Code and Language are required fields."
    INVALID_JSON = "Invalid JSON body."

    # === Upstream (500) ===
    CORRECTION_EMPTY = "Failed to generate correction."
    EXPLANATION_EMPTY = "Failed to generate explanation."
    INTERNAL_SERVER_ERROR = "Internal Server Error"

    # === Edge (middleware) ===
    ORIGIN_NOT_ALLOWED = "Origin not allowed."
    TOO_MANY_REQUESTS = "Too many requests"
    PAYLOAD_TOO_LARGE = "Payload Too Large"
