#!/usr/bin/env python
"""
LLM 연결 확인 스크립트.

default.yaml + .env 설정 그대로 Provider를 조립해서
교정/설명 프롬프트를 한 번씩 보내 본다.

실행:
    uv run python scripts/check_llm_connection.py
"""

import asyncio
import sys
from pathlib import Path

# 프로젝트 루트를 path에 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

# .env 파일 로드
from dotenv import load_dotenv
load_dotenv()

from src.app.main import apply_env_overrides, load_config  # noqa: E402
from src.app.services import (  # noqa: E402
    CompletionService,
    build_correction_messages,
    build_explanation_messages,
)
from src.domain import ApiError, CorrectionRequest, ErrorMessages, ExplanationRequest  # noqa: E402


async def check_correction(service: CompletionService) -> bool:
    """텍스트 교정 요청."""
    print("\n" + "=" * 60)
    print("🧪 POST /api/correct-text 프롬프트")
    print("=" * 60)

    messages = build_correction_messages(
        CorrectionRequest(text="He go to school yesterday.")
    )
    try:
        text = await service.complete(messages, empty_message=ErrorMessages.CORRECTION_EMPTY)
    except ApiError as e:
        print(f"❌ {e.error}: {e.details or '-'}")
        return False

    print(f"📥 응답:\n{text}")
    if "Corrected Text:" not in text:
        print("⚠️ 'Corrected Text:' 형식이 아님")
    return True


async def check_explanation(service: CompletionService) -> bool:
    """코드 설명 요청."""
    print("\n" + "=" * 60)
    print("🧪 POST /api/explain-code 프롬프트")
    print("=" * 60)

    messages = build_explanation_messages(
        ExplanationRequest(code="def add(a, b):\n    return a + b", language="python")
    )
    try:
        text = await service.complete(messages, empty_message=ErrorMessages.EXPLANATION_EMPTY)
    except ApiError as e:
        print(f"❌ {e.error}: {e.details or '-'}")
        return False

    print(f"📥 응답:\n{text}")
    return True


async def main() -> int:
    """연결 확인 실행."""
    config = apply_env_overrides(load_config())
    llm_config = config.get("ai", {}).get("llm", {})
    print("🚀 LLM 연결 확인 시작")
    print(f"   provider={llm_config.get('provider')} model={llm_config.get('model')}")

    try:
        service = CompletionService(config)
    except ApiError as e:
        print(f"❌ Provider 생성 실패: {e.details}")
        print("   .env 파일의 API 키를 확인하세요.")
        return 1

    results = {
        "correction": await check_correction(service),
        "explanation": await check_explanation(service),
    }
    await service.provider.aclose()

    # 결과 요약
    print("\n" + "=" * 60)
    print("📊 결과 요약")
    print("=" * 60)
    for name, passed in results.items():
        status = "✅ PASS" if passed else "❌ FAIL"
        print(f"  {name}: {status}")

    return 0 if all(results.values()) else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
