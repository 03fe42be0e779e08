"""
FastAPI 애플리케이션 진입점.

실행:
- 개발: uv run uvicorn src.app.main:app --reload
- 프로덕션: uv run python -m src.app.main (server.host / PORT 사용)
"""

import logging
import os
from collections.abc import AsyncGenerator, Mapping
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from src.app.middleware import create_rate_limit_store, install_edge_middleware
from src.app.providers import LLMProvider

# Routes
from src.app.routes import correct, explain, pages
from src.core.logging import configure_logging
from src.core.rate_limit import FixedWindowStore
from src.domain.constants import DEFAULT_HOST, DEFAULT_PORT

logger = logging.getLogger(__name__)

# =============================================================================
# Configuration
# =============================================================================


def load_config(config_path: Path | None = None) -> dict:
    """설정 파일 로드."""
    if config_path is None:
        # 프로젝트 루트의 default.yaml
        config_path = Path(__file__).parent.parent.parent / "default.yaml"

    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data: dict[Any, Any] = yaml.safe_load(f) or {}
        return data


def apply_env_overrides(
    config: dict[str, Any],
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """
    환경변수로 설정 덮어쓰기 (환경변수 > YAML).

    - FRONTEND_URL → cors.allowed_origin
    - PORT → server.port
    - LOG_LEVEL → logging.level

    API 키(NEBIUS_API_KEY 등)는 config에 넣지 않고 Provider가 직접 읽는다.
    """
    env = os.environ if environ is None else environ

    if env.get("FRONTEND_URL"):
        config.setdefault("cors", {})["allowed_origin"] = env["FRONTEND_URL"]
    if env.get("PORT"):
        config.setdefault("server", {})["port"] = int(env["PORT"])
    if env.get("LOG_LEVEL"):
        config.setdefault("logging", {})["level"] = env["LOG_LEVEL"]
    return config


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    애플리케이션 생명주기 관리.

    시작 시: 설정 요약 로그
    종료 시: LLM SDK 클라이언트 정리
    """
    # Startup
    llm_config = app.state.config.get("ai", {}).get("llm", {})
    logger.info(
        f"Assistant API starting: provider={llm_config.get('provider', 'openai')} "
        f"model={llm_config.get('model', '-')}"
    )

    yield

    # Shutdown
    provider: LLMProvider | None = getattr(app.state, "llm_provider", None)
    if provider is not None:
        await provider.aclose()


# =============================================================================
# App Factory
# =============================================================================


def create_app(
    config: dict[str, Any] | None = None,
    rate_limit_store: FixedWindowStore | None = None,
    provider: LLMProvider | None = None,
) -> FastAPI:
    """
    앱 생성.

    Args:
        config: 설정 (None이면 .env + default.yaml + 환경변수)
        rate_limit_store: rate limit 카운터 저장소 (None이면 config 기반 생성)
        provider: LLM Provider (None이면 첫 요청 시 config 기반 생성)
    """
    if config is None:
        load_dotenv()
        config = apply_env_overrides(load_config())

    configure_logging(config)

    app = FastAPI(
        title="AI Assistant API",
        description="텍스트 교정 + 코드 설명 (LLM 중계)",
        version="0.1.0",
        lifespan=lifespan,
    )

    store = rate_limit_store or create_rate_limit_store(config)
    app.state.config = config
    app.state.rate_limit_store = store
    if provider is not None:
        app.state.llm_provider = provider

    # Static files (CSS, JS)
    static_dir = Path(__file__).parent / "static"
    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=static_dir), name="static")

    # 페이지 라우트 (HTML)
    app.include_router(pages.router, prefix="", tags=["Pages"])

    # API 라우트
    app.include_router(correct.api_router, prefix="/api", tags=["Correction API"])
    app.include_router(explain.api_router, prefix="/api", tags=["Explanation API"])

    @app.get("/health")
    async def health() -> dict[str, str]:
        """헬스 체크."""
        return {"status": "ok"}

    install_edge_middleware(app, config, store)
    return app


# =============================================================================
# App Instance
# =============================================================================

app = create_app()


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    server_config = app.state.config.get("server", {})
    uvicorn.run(
        app,
        host=server_config.get("host", DEFAULT_HOST),
        port=int(server_config.get("port", DEFAULT_PORT)),
        server_header=False,
    )
