"""
Code Explanation Routes.

- POST /api/explain-code → {"explanation": str, "language": str}

language는 검증에서 필수. 응답 라벨은 소문자, 값이 없으면 "unknown".
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from src.app.routes.common import error_response, get_completion_service, read_json_object
from src.app.services.prompts import build_explanation_messages
from src.domain.errors import (
    ApiError,
    ErrorMessages,
    RequestValidationFailed,
    UpstreamError,
)
from src.domain.schemas import ExplanationRequest

ENDPOINT = "/api/explain-code"

api_router = APIRouter()


@api_router.post("/explain-code")
async def explain_code(request: Request) -> JSONResponse:
    """
    코드 설명.

    Returns:
        200 {"explanation", "language"} | 400 {"error"} | 500 {"error"[, "details"]}
    """
    try:
        payload = await read_json_object(request)
        explanation_request = ExplanationRequest.from_payload(payload)
    except RequestValidationFailed as e:
        return error_response(e, ENDPOINT)

    messages = build_explanation_messages(explanation_request)

    try:
        service = get_completion_service(request)
        explanation = await service.complete(
            messages, empty_message=ErrorMessages.EXPLANATION_EMPTY
        )
    except ApiError as e:
        return error_response(e, ENDPOINT)
    except Exception as e:
        return error_response(UpstreamError(str(e)), ENDPOINT)

    return JSONResponse(
        {
            "explanation": explanation,
            "language": explanation_request.display_language,
        }
    )
