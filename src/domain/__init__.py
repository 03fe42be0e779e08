"""Domain layer: errors, schemas, constants."""

from .errors import (
    ApiError,
    EmptyCompletionError,
    ErrorMessages,
    RequestValidationFailed,
    UpstreamError,
)
from .schemas import (
    CompletionMessage,
    CorrectionRequest,
    ExplanationRequest,
    MessageRole,
    MessageSequence,
)

__all__ = [
    "ApiError",
    "RequestValidationFailed",
    "EmptyCompletionError",
    "UpstreamError",
    "ErrorMessages",
    "CorrectionRequest",
    "ExplanationRequest",
    "CompletionMessage",
    "MessageRole",
    "MessageSequence",
]
