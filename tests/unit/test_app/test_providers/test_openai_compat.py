"""
test_openai_compat.py - OpenAI 호환 Provider 테스트

Mock 주의사항:
- MagicMock은 접근되지 않은 속성에 자동으로 새 MagicMock을 반환
- response.model, response.id, choices[0].message.content를 명시적으로 설정
- make_chat_response() factory 사용
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.app.providers.base import CompletionError, LLMCallParams
from src.app.providers.openai_compat import OpenAICompatibleProvider
from src.domain.schemas import CompletionMessage, MessageRole

# =============================================================================
# Mock Factories
# =============================================================================


def make_chat_response(
    content: str | None,
    model: str = "openai/gpt-oss-120b",
    request_id: str = "chatcmpl-test",
    finish_reason: str = "stop",
) -> MagicMock:
    """Chat Completions 응답 mock 생성."""
    choice = MagicMock()
    choice.message.content = content
    choice.finish_reason = finish_reason

    response = MagicMock()
    response.choices = [choice]
    response.model = model  # 명시적 설정 필수!
    response.id = request_id  # 명시적 설정 필수!
    return response


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def params() -> LLMCallParams:
    return LLMCallParams(model="openai/gpt-oss-120b", max_tokens=2000, temperature=0.3)


@pytest.fixture
def provider(params) -> OpenAICompatibleProvider:
    return OpenAICompatibleProvider(params, api_key="test-api-key", timeout=5)


@pytest.fixture
def messages():
    return (
        CompletionMessage(MessageRole.SYSTEM, "system prompt"),
        CompletionMessage(MessageRole.USER, "user prompt"),
    )


def _install_client(provider: OpenAICompatibleProvider, response=None, side_effect=None):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=response, side_effect=side_effect)
    client.close = AsyncMock()
    provider._client = client
    return client


# =============================================================================
# 초기화 테스트
# =============================================================================


class TestInit:
    """OpenAICompatibleProvider 초기화 테스트."""

    def test_uses_env_api_key(self, params, monkeypatch):
        monkeypatch.setenv("NEBIUS_API_KEY", "env-key")

        provider = OpenAICompatibleProvider(params)

        assert provider.api_key == "env-key"

    def test_missing_key_raises(self, params, monkeypatch):
        monkeypatch.delenv("NEBIUS_API_KEY", raising=False)

        with pytest.raises(CompletionError) as exc_info:
            OpenAICompatibleProvider(params)

        assert exc_info.value.code == "LLM_API_KEY_MISSING"
        assert "NEBIUS_API_KEY" in exc_info.value.message

    def test_client_lazy_init(self, provider):
        """클라이언트는 lazy init."""
        assert provider._client is None

    def test_client_built_without_retries(self, provider):
        """SDK 자동 재시도 끔 + timeout 전달."""
        with patch("openai.AsyncOpenAI") as mock_cls:
            provider._get_client()

        mock_cls.assert_called_once_with(
            api_key="test-api-key",
            base_url="https://api.tokenfactory.nebius.com/v1/",
            timeout=5,
            max_retries=0,
        )


# =============================================================================
# complete 테스트
# =============================================================================


class TestComplete:
    """complete 메서드 테스트."""

    @pytest.mark.asyncio
    async def test_sends_fixed_parameters(self, provider, messages):
        """모델/토큰/온도 + 메시지 순서 그대로 전달."""
        client = _install_client(provider, make_chat_response("answer"))

        await provider.complete(messages)

        client.chat.completions.create.assert_awaited_once_with(
            model="openai/gpt-oss-120b",
            messages=[
                {"role": "system", "content": "system prompt"},
                {"role": "user", "content": "user prompt"},
            ],
            max_tokens=2000,
            temperature=0.3,
        )

    @pytest.mark.asyncio
    async def test_returns_first_choice(self, provider, messages):
        _install_client(provider, make_chat_response("answer", model="served-model"))

        result = await provider.complete(messages)

        assert result.text == "answer"
        assert result.model_requested == "openai/gpt-oss-120b"
        assert result.model_used == "served-model"
        assert result.request_id == "chatcmpl-test"
        assert result.finish_reason == "stop"
        assert result.provider == "openai"

    @pytest.mark.asyncio
    async def test_no_choices_is_empty(self, provider, messages):
        response = make_chat_response("x")
        response.choices = []
        _install_client(provider, response)

        result = await provider.complete(messages)

        assert result.is_empty is True

    @pytest.mark.asyncio
    async def test_null_content_is_empty(self, provider, messages):
        _install_client(provider, make_chat_response(None, finish_reason="length"))

        result = await provider.complete(messages)

        assert result.is_empty is True
        assert result.finish_reason == "length"

    @pytest.mark.asyncio
    async def test_vendor_exception_propagates(self, provider, messages):
        """벤더 예외는 변환 없이 전파 (서비스 계층에서 변환)."""
        _install_client(provider, side_effect=RuntimeError("quota exceeded"))

        with pytest.raises(RuntimeError, match="quota exceeded"):
            await provider.complete(messages)

    @pytest.mark.asyncio
    async def test_aclose(self, provider):
        client = _install_client(provider)

        await provider.aclose()

        client.close.assert_awaited_once()
        assert provider._client is None
