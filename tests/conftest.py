"""
Pytest fixtures for the assistant API tests.

테스트 구성:
- 정상 케이스, 필수 필드 누락 케이스, 벤더 실패 케이스 분리
- 벤더 호출은 항상 가짜 Provider로 대체 (네트워크 없음)
"""

import threading
import time
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import uvicorn
import yaml
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.app.main import create_app
from src.app.providers.base import CompletionResult, LLMProvider
from src.core.rate_limit import FixedWindowStore

FRONTEND_ORIGIN = "http://localhost:3000"

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def project_root() -> Path:
    """프로젝트 루트 경로."""
    return Path(__file__).parent.parent


@pytest.fixture
def default_config_path(project_root: Path) -> Path:
    """default.yaml 경로."""
    return project_root / "default.yaml"


@pytest.fixture
def default_config(default_config_path: Path) -> dict:
    """기본 설정 로드."""
    with open(default_config_path, encoding="utf-8") as f:
        return yaml.safe_load(f)


# =============================================================================
# Config Fixtures
# =============================================================================


@pytest.fixture
def test_config() -> dict:
    """테스트용 설정 (본문 상한은 작게)."""
    return {
        "cors": {"allowed_origin": FRONTEND_ORIGIN},
        "rate_limit": {"window_seconds": 900, "max_requests": 100},
        "limits": {"max_body_bytes": 1024},
        "ai": {
            "request_timeout": 5,
            "llm": {
                "provider": "openai",
                "model": "test-model",
                "max_tokens": 2000,
                "temperature": 0.3,
            },
        },
        "logging": {"level": "INFO"},
    }


# =============================================================================
# Provider Fixtures
# =============================================================================


def make_fake_provider(
    text: str | None = "ok",
    side_effect: BaseException | None = None,
) -> MagicMock:
    """
    가짜 LLM Provider 생성.

    Args:
        text: complete()가 돌려줄 텍스트 (None이면 빈 응답)
        side_effect: complete() 호출 시 던질 예외
    """
    provider = MagicMock(spec=LLMProvider)
    provider.name = "fake"
    provider.model = "test-model"
    provider.complete = AsyncMock(
        return_value=CompletionResult(
            text=text,
            model_requested="test-model",
            model_used="test-model",
            provider="fake",
            request_id="cmpl-test",
            finish_reason="stop",
        ),
        side_effect=side_effect,
    )
    provider.aclose = AsyncMock()
    return provider


@pytest.fixture
def fake_provider() -> MagicMock:
    """기본 가짜 Provider (텍스트 "ok")."""
    return make_fake_provider()


@pytest.fixture
def provider_factory() -> Callable[..., MagicMock]:
    """가짜 Provider factory (응답 텍스트/예외 지정)."""
    return make_fake_provider


# =============================================================================
# App Fixtures
# =============================================================================


@pytest.fixture
def rate_limit_store() -> FixedWindowStore:
    """테스트마다 새 카운터 저장소."""
    return FixedWindowStore(window_seconds=900, max_requests=100)


@pytest.fixture
def app_factory(
    test_config: dict,
    rate_limit_store: FixedWindowStore,
) -> Callable[..., FastAPI]:
    """설정/Provider를 바꿔 앱을 만드는 factory."""

    def factory(
        provider: Any = None,
        config: dict | None = None,
        store: FixedWindowStore | None = None,
    ) -> FastAPI:
        return create_app(
            config=config or test_config,
            rate_limit_store=store or rate_limit_store,
            provider=provider,
        )

    return factory


@pytest.fixture
def app(app_factory: Callable[..., FastAPI], fake_provider: MagicMock) -> FastAPI:
    """가짜 Provider가 주입된 앱."""
    return app_factory(provider=fake_provider)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """FastAPI TestClient."""
    with TestClient(app) as client:
        yield client


# =============================================================================
# Browser Test Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def live_server() -> Generator[str, None, None]:
    """
    FastAPI 앱을 백그라운드에서 실행하는 fixture.

    API 응답은 각 브라우저 테스트에서 page.route로 대체한다.

    Returns:
        서버 URL (예: "http://127.0.0.1:8765")
    """
    app = create_app(
        config={
            "rate_limit": {"max_requests": 10000},
            "logging": {"level": "WARNING"},
        },
        provider=make_fake_provider(),
    )

    # 테스트용 포트
    port = 8765
    host = "127.0.0.1"

    # 별도 스레드에서 서버 실행
    config = uvicorn.Config(app, host=host, port=port, log_level="error")
    server = uvicorn.Server(config)

    def run_server() -> None:
        import asyncio
        asyncio.run(server.serve())

    thread = threading.Thread(target=run_server, daemon=True)
    thread.start()

    # 서버가 준비될 때까지 대기
    base_url = f"http://{host}:{port}"
    max_attempts = 30
    for _ in range(max_attempts):
        try:
            response = httpx.get(f"{base_url}/health", timeout=1.0)
            if response.status_code == 200:
                break
        except httpx.HTTPError:
            time.sleep(0.1)
    else:
        raise RuntimeError("Failed to start test server")

    yield base_url

    # 서버 종료
    server.should_exit = True
