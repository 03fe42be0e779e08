"""
AI Provider Abstraction.

벤더 교체 가능하게 설계.
모델명/엔드포인트는 config만 SSOT.
"""

from typing import Any

from src.domain.constants import (
    DEFAULT_LLM_BASE_URL,
    DEFAULT_LLM_MODEL,
    DEFAULT_LLM_PROVIDER,
    DEFAULT_MAX_TOKENS,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_TEMPERATURE,
    LLM_API_KEY_ENV,
)

from .anthropic import ClaudeProvider
from .base import (
    CompletionError,
    CompletionResult,
    LLMCallParams,
    LLMProvider,
    ProviderError,
)
from .openai_compat import OpenAICompatibleProvider

__all__ = [
    "LLMProvider",
    "LLMCallParams",
    "CompletionResult",
    "ProviderError",
    "CompletionError",
    "OpenAICompatibleProvider",
    "ClaudeProvider",
    "create_provider",
]


def create_provider(config: dict[str, Any]) -> LLMProvider:
    """
    config(ai 섹션) 기반 Provider 생성.

    Raises:
        CompletionError: 알 수 없는 provider 또는 API 키 누락
    """
    ai_config = config.get("ai", {})
    llm_config = ai_config.get("llm", {})

    params = LLMCallParams(
        model=llm_config.get("model", DEFAULT_LLM_MODEL),
        max_tokens=int(llm_config.get("max_tokens", DEFAULT_MAX_TOKENS)),
        temperature=float(llm_config.get("temperature", DEFAULT_TEMPERATURE)),
    )
    timeout = float(ai_config.get("request_timeout", DEFAULT_REQUEST_TIMEOUT))
    provider_name = llm_config.get("provider", DEFAULT_LLM_PROVIDER)

    if provider_name == "openai":
        return OpenAICompatibleProvider(
            params,
            base_url=llm_config.get("base_url", DEFAULT_LLM_BASE_URL),
            timeout=timeout,
            api_key_env=llm_config.get("api_key_env", LLM_API_KEY_ENV),
        )
    if provider_name == "anthropic":
        return ClaudeProvider(params, timeout=timeout)

    raise CompletionError(
        "UNKNOWN_PROVIDER",
        f"Unknown LLM provider: {provider_name!r}",
        provider=provider_name,
    )
