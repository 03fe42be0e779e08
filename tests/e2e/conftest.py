"""
E2E 테스트용 Playwright 설정.

설정 항목:
- 뷰포트: 1280x720
- clipboard 권한 (복사 버튼 검증용)
- 실패 시 디버깅 정보 저장: 스크린샷 + 콘솔 로그 (API 키 마스킹)

브라우저 테스트는 browser 마커로 분리되어 기본 실행에서 제외된다.
실행: pytest -m browser
"""

import re
from collections.abc import Generator
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

# Playwright는 선택적 의존성 (e2e extra) - 설치되어 있을 때만 fixture 등록
try:
    from playwright.sync_api import Page  # noqa: F401

    PLAYWRIGHT_AVAILABLE = True
except ImportError:
    PLAYWRIGHT_AVAILABLE = False

if TYPE_CHECKING:
    from playwright.sync_api import BrowserContext, Page

# =============================================================================
# 상수
# =============================================================================

ARTIFACTS_DIR = Path(__file__).parent / "artifacts"

# 마스킹할 패턴 (API 키, Bearer 토큰)
SENSITIVE_PATTERNS = [
    (r"(sk-[a-zA-Z0-9]{20,})", r"[MASKED_API_KEY]"),
    (r"(NEBIUS_API_KEY\s*[:=]\s*)(\S+)", r"\1[MASKED]"),
    (r"(Bearer\s+)([a-zA-Z0-9._-]{20,})", r"\1[MASKED_TOKEN]"),
]


def mask_sensitive_data(content: str) -> str:
    """민감 정보를 마스킹한 문자열 반환."""
    masked = content
    for pattern, replacement in SENSITIVE_PATTERNS:
        masked = re.sub(pattern, replacement, masked, flags=re.IGNORECASE)
    return masked


# =============================================================================
# Playwright 기본 설정
# =============================================================================

if PLAYWRIGHT_AVAILABLE:

    @pytest.fixture(scope="session")
    def browser_context_args(browser_context_args: dict) -> dict:
        """브라우저 컨텍스트 설정."""
        return {
            **browser_context_args,
            "viewport": {"width": 1280, "height": 720},
            "permissions": ["clipboard-read", "clipboard-write"],
        }

    @pytest.fixture
    def page(context: "BrowserContext") -> "Generator[Page, None, None]":
        """페이지 fixture with 타임아웃 + 콘솔 로그 수집."""
        page = context.new_page()
        page.set_default_timeout(10000)

        console_logs: list[str] = []
        page.on("console", lambda msg: console_logs.append(f"[{msg.type}] {msg.text}"))
        page.on("pageerror", lambda err: console_logs.append(f"[PAGE_ERROR] {err}"))
        page._console_logs = console_logs  # type: ignore[attr-defined]

        yield page

        page.close()


# =============================================================================
# 실패 시 디버깅 정보 저장
# =============================================================================


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """브라우저 테스트 실패 시 스크린샷 + 콘솔 로그 저장."""
    outcome = yield
    rep = outcome.get_result()

    if rep.when != "call" or not rep.failed:
        return
    page = item.funcargs.get("page")
    if page is None:
        return

    ARTIFACTS_DIR.mkdir(exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    base_name = f"{item.name.split('[')[0]}_{timestamp}"

    screenshot_path = ARTIFACTS_DIR / f"{base_name}.png"
    try:
        page.screenshot(path=str(screenshot_path), full_page=True)
        print(f"\n📸 Screenshot: {screenshot_path}")
    except Exception as e:
        print(f"\n⚠️ Screenshot failed: {e}")

    console_logs = getattr(page, "_console_logs", [])
    if console_logs:
        log_path = ARTIFACTS_DIR / f"{base_name}.log"
        log_path.write_text(mask_sensitive_data("\n".join(console_logs)), encoding="utf-8")
        print(f"📋 Console log: {log_path}")
