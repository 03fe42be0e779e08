"""
Text Correction Routes.

- POST /api/correct-text → {"correction": str}

상태 흐름: Validate → Build prompt → Complete → Respond
(각 실패 단계는 JSON 에러로 종료)
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from src.app.routes.common import error_response, get_completion_service, read_json_object
from src.app.services.prompts import build_correction_messages
from src.domain.errors import (
    ApiError,
    ErrorMessages,
    RequestValidationFailed,
    UpstreamError,
)
from src.domain.schemas import CorrectionRequest

ENDPOINT = "/api/correct-text"

api_router = APIRouter()


@api_router.post("/correct-text")
async def correct_text(request: Request) -> JSONResponse:
    """
    텍스트 문법/맞춤법 교정.

    Returns:
        200 {"correction"} | 400 {"error"} | 500 {"error"[, "details"]}
    """
    # 1) Validate - 실패 시 벤더 호출 없음
    try:
        payload = await read_json_object(request)
        correction_request = CorrectionRequest.from_payload(payload)
    except RequestValidationFailed as e:
        return error_response(e, ENDPOINT)

    # 2) Build prompt
    messages = build_correction_messages(correction_request)

    # 3) Complete
    try:
        service = get_completion_service(request)
        correction = await service.complete(
            messages, empty_message=ErrorMessages.CORRECTION_EMPTY
        )
    except ApiError as e:
        return error_response(e, ENDPOINT)
    except Exception as e:
        return error_response(UpstreamError(str(e)), ENDPOINT)

    # 4) Respond
    return JSONResponse({"correction": correction})
