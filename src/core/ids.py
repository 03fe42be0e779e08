"""
ID 생성: request_id

규칙:
- 요청마다 새 ID 발급 (로그 상관관계용, 저장 안 함)
- 외부에서 들어온 ID는 형식이 안전할 때만 재사용
"""

import re
import uuid
from datetime import UTC, datetime

# 헤더 인젝션/로그 오염 방지: 영숫자, -, _ 만 허용 (최대 64자)
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def generate_request_id() -> str:
    """
    Request ID 생성.

    고유성 보장: UUID v4
    포맷: REQ-{timestamp}-{uuid[:8]}

    Returns:
        request_id 문자열
    """
    now = datetime.now(UTC)
    timestamp = now.strftime("%Y%m%d%H%M%S")
    unique = uuid.uuid4().hex[:8]

    return f"REQ-{timestamp}-{unique}"


def resolve_request_id(incoming: str | None) -> str:
    """
    인바운드 헤더 값이 안전하면 재사용, 아니면 새로 발급.

    Args:
        incoming: X-Request-ID 헤더 값 (없으면 None)
    """
    if incoming and _SAFE_REQUEST_ID.match(incoming):
        return incoming
    return generate_request_id()
