"""
Anthropic (Claude) Provider.

ai.llm.provider: anthropic 일 때 사용.
- system 메시지는 Messages API의 system 파라미터로 분리
- max_retries=0: 재시도 없음
"""

import logging
import os
from typing import Any

from src.domain.constants import DEFAULT_REQUEST_TIMEOUT
from src.domain.schemas import MessageRole, MessageSequence

from .base import CompletionError, CompletionResult, LLMCallParams, LLMProvider

logger = logging.getLogger(__name__)


class ClaudeProvider(LLMProvider):
    """
    Claude API Provider.

    Usage:
        provider = ClaudeProvider(
            LLMCallParams(model="claude-sonnet-4-20250514", max_tokens=2000, temperature=0.3)
        )
        result = await provider.complete(messages)
    """

    name = "anthropic"

    def __init__(
        self,
        params: LLMCallParams,
        api_key: str | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        """
        Args:
            params: 모델/토큰/온도 (config에서 주입)
            api_key: API 키 (환경변수 MY_ANTHROPIC_KEY 또는 ANTHROPIC_API_KEY 사용 가능)
            timeout: 요청 타임아웃(초)

        Raises:
            CompletionError: API 키가 없을 때 (fail-fast)
        """
        super().__init__(params)
        # API 키 결정: 인자 > MY_ANTHROPIC_KEY > ANTHROPIC_API_KEY
        self.api_key = (
            api_key
            or os.environ.get("MY_ANTHROPIC_KEY")
            or os.environ.get("ANTHROPIC_API_KEY")
        )

        if not self.api_key:
            raise CompletionError(
                "ANTHROPIC_KEY_MISSING",
                "Anthropic API key is missing. "
                "Set MY_ANTHROPIC_KEY or ANTHROPIC_API_KEY.",
            )

        self.timeout = timeout
        self._client: Any = None

    def _get_client(self) -> Any:
        """Anthropic 클라이언트 (lazy init)."""
        if self._client is None:
            try:
                import anthropic

                self._client = anthropic.AsyncAnthropic(
                    api_key=self.api_key,
                    timeout=self.timeout,
                    max_retries=0,
                )
            except ImportError as e:
                raise CompletionError(
                    "ANTHROPIC_NOT_INSTALLED",
                    "anthropic package not installed. Run: pip install anthropic",
                ) from e
        return self._client

    @staticmethod
    def _split_system(messages: MessageSequence) -> tuple[str | None, list[dict[str, str]]]:
        """system 메시지를 분리 (Messages API는 system을 별도 인자로 받음)."""
        system_parts = [m.content for m in messages if m.role == MessageRole.SYSTEM]
        chat = [m.to_dict() for m in messages if m.role != MessageRole.SYSTEM]
        system = "\n\n".join(system_parts) if system_parts else None
        return system, chat

    async def complete(self, messages: MessageSequence) -> CompletionResult:
        """Messages API 호출. text 블록을 이어붙여 반환."""
        system, chat = self._split_system(messages)

        api_kwargs: dict[str, Any] = {
            "model": self.params.model,
            "max_tokens": self.params.max_tokens,
            "temperature": self.params.temperature,
            "messages": chat,
        }
        if system is not None:
            api_kwargs["system"] = system

        client = self._get_client()
        response = await client.messages.create(**api_kwargs)

        blocks = getattr(response, "content", None) or []
        texts = [
            block.text
            for block in blocks
            if getattr(block, "type", "text") == "text" and getattr(block, "text", None)
        ]

        return CompletionResult(
            text="".join(texts) or None,
            model_requested=self.params.model,
            model_used=getattr(response, "model", None) or self.params.model,
            provider=self.name,
            request_id=getattr(response, "id", None),
            finish_reason=getattr(response, "stop_reason", None),
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
