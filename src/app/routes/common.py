"""
Route 공통 헬퍼: 본문 파싱, 서비스 조립, 에러 응답 변환.
"""

import json
import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from src.app.services.completion import CompletionService
from src.domain.errors import ApiError, ErrorMessages, RequestValidationFailed

logger = logging.getLogger(__name__)


async def read_json_object(request: Request) -> dict[str, Any]:
    """
    요청 본문을 JSON 객체로 파싱.

    - 본문 없음 / JSON이 아닌 content-type → 빈 객체 (필드 누락 400으로 이어짐)
    - JSON이지만 객체가 아님 → 빈 객체
    - 깨진 JSON, 과도한 중첩, 너무 긴 정수 → RequestValidationFailed (400)
    """
    body = await request.body()
    content_type = request.headers.get("content-type", "")
    if not body or "json" not in content_type.lower():
        return {}

    try:
        payload = json.loads(body)
    except (ValueError, RecursionError) as e:
        # JSONDecodeError, UnicodeDecodeError, 정수 자릿수 상한 초과 모두 ValueError
        raise RequestValidationFailed(ErrorMessages.INVALID_JSON, cause=str(e)) from e

    return payload if isinstance(payload, dict) else {}


def get_completion_service(request: Request) -> CompletionService:
    """
    CompletionService 조립.

    Provider는 첫 사용 시 생성해서 app.state에 캐시 (SDK 클라이언트 재사용).
    테스트에서는 app.state.llm_provider에 가짜 Provider를 미리 넣는다.
    """
    config: dict[str, Any] = request.app.state.config
    provider = getattr(request.app.state, "llm_provider", None)

    service = CompletionService(config, provider=provider)
    if provider is None:
        request.app.state.llm_provider = service.provider
    return service


def error_response(error: ApiError, endpoint: str) -> JSONResponse:
    """
    ApiError → JSON 응답.

    5xx는 traceback과 함께 error 로그 (except 블록 안에서 호출할 것).
    """
    if error.status_code >= 500:
        logger.error(f"Error in {endpoint}: {error}", exc_info=True)
    else:
        logger.info(f"Rejected request to {endpoint}: {error}")
    return JSONResponse(error.to_dict(), status_code=error.status_code)
