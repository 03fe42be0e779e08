"""
OpenAI 호환 Provider (기본: Nebius Token Factory).

- openai SDK의 AsyncOpenAI를 base_url만 바꿔서 사용
- max_retries=0: 재시도 없음
- timeout은 config(ai.request_timeout)에서 주입
"""

import logging
import os
from typing import Any

from src.domain.constants import (
    DEFAULT_LLM_BASE_URL,
    DEFAULT_REQUEST_TIMEOUT,
    LLM_API_KEY_ENV,
)
from src.domain.schemas import MessageSequence

from .base import CompletionError, CompletionResult, LLMCallParams, LLMProvider

logger = logging.getLogger(__name__)


class OpenAICompatibleProvider(LLMProvider):
    """
    OpenAI Chat Completions 호환 엔드포인트 Provider.

    Usage:
        provider = OpenAICompatibleProvider(
            LLMCallParams(model="openai/gpt-oss-120b", max_tokens=2000, temperature=0.3)
        )
        result = await provider.complete(messages)
    """

    name = "openai"

    def __init__(
        self,
        params: LLMCallParams,
        api_key: str | None = None,
        base_url: str = DEFAULT_LLM_BASE_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        api_key_env: str = LLM_API_KEY_ENV,
    ):
        """
        Args:
            params: 모델/토큰/온도 (config에서 주입)
            api_key: API 키 (없으면 api_key_env 환경변수)
            base_url: OpenAI 호환 엔드포인트
            timeout: 요청 타임아웃(초)
            api_key_env: API 키 환경변수 이름

        Raises:
            CompletionError: API 키가 없을 때 (fail-fast)
        """
        super().__init__(params)
        self.api_key = api_key or os.environ.get(api_key_env)

        # Fail-fast: 키가 없으면 즉시 에러 (벤더 401보다 명확)
        if not self.api_key:
            raise CompletionError(
                "LLM_API_KEY_MISSING",
                f"LLM API key is missing. Set the {api_key_env} environment variable.",
            )

        self.base_url = base_url
        self.timeout = timeout
        self._client: Any = None

    def _get_client(self) -> Any:
        """AsyncOpenAI 클라이언트 (lazy init)."""
        if self._client is None:
            try:
                import openai

                self._client = openai.AsyncOpenAI(
                    api_key=self.api_key,
                    base_url=self.base_url,
                    timeout=self.timeout,
                    max_retries=0,
                )
            except ImportError as e:
                raise CompletionError(
                    "OPENAI_NOT_INSTALLED",
                    "openai package not installed. Run: pip install openai",
                ) from e
        return self._client

    async def complete(self, messages: MessageSequence) -> CompletionResult:
        """Chat Completions 호출. 첫 번째 choice의 content를 반환."""
        client = self._get_client()
        response = await client.chat.completions.create(
            model=self.params.model,
            messages=[m.to_dict() for m in messages],
            max_tokens=self.params.max_tokens,
            temperature=self.params.temperature,
        )

        text: str | None = None
        finish_reason: str | None = None
        choices = getattr(response, "choices", None) or []
        if choices:
            first = choices[0]
            message = getattr(first, "message", None)
            text = getattr(message, "content", None) if message is not None else None
            finish_reason = getattr(first, "finish_reason", None)

        return CompletionResult(
            text=text,
            model_requested=self.params.model,
            model_used=getattr(response, "model", None) or self.params.model,
            provider=self.name,
            request_id=getattr(response, "id", None),
            finish_reason=finish_reason,
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
