"""
Completion Service: 메시지 시퀀스 → 텍스트.

- Provider 호출 결과에서 첫 choice 텍스트만 꺼냄
- 내용 없음 → EmptyCompletionError (500, 별도 메시지)
- 벤더/네트워크 예외 → UpstreamError (500, 벤더 메시지 포함)
- 재시도 없음, 부분 복구 없음
"""

import logging
from typing import Any

from src.app.providers import LLMProvider, create_provider
from src.app.providers.base import hash_messages
from src.domain.errors import EmptyCompletionError, UpstreamError
from src.domain.schemas import MessageSequence

logger = logging.getLogger(__name__)


class CompletionService:
    """
    Completion 서비스.

    Usage:
        service = CompletionService(config)
        text = await service.complete(messages, empty_message="Failed to ...")
    """

    def __init__(
        self,
        config: dict[str, Any],
        provider: LLMProvider | None = None,
    ):
        """
        Args:
            config: 설정 (ai.llm 포함)
            provider: LLM Provider (None이면 config 기반 생성)

        Raises:
            UpstreamError: Provider 생성 실패 (API 키 누락 등)
        """
        self.config = config

        if provider is not None:
            self.provider = provider
        else:
            try:
                self.provider = create_provider(config)
            except Exception as e:
                raise UpstreamError(str(e), stage="provider_init") from e

    async def complete(self, messages: MessageSequence, empty_message: str) -> str:
        """
        Completion 호출.

        Args:
            messages: 프롬프트 메시지 시퀀스
            empty_message: 내용 없음일 때 응답 error 문구 (엔드포인트별)

        Returns:
            생성 텍스트 (비어있지 않음)

        Raises:
            UpstreamError: 벤더/네트워크 예외
            EmptyCompletionError: 벤더가 내용 없이 응답
        """
        prompt_hash = hash_messages(messages)

        try:
            result = await self.provider.complete(messages)
        except Exception as e:
            raise UpstreamError(
                str(e),
                provider=self.provider.name,
                model=self.provider.model,
                prompt_hash=prompt_hash,
            ) from e

        if result.is_empty:
            logger.warning(
                f"Empty completion from {result.provider} "
                f"(model={result.model_used}, finish_reason={result.finish_reason}, "
                f"prompt_hash={prompt_hash})"
            )
            raise EmptyCompletionError(empty_message, prompt_hash=prompt_hash)

        logger.info(
            f"Completion ok: provider={result.provider} model={result.model_used} "
            f"request_id={result.request_id} chars={len(result.text or '')}"
        )
        return result.text or ""
