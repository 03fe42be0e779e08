"""
Core layer: 요청 간 공유되는 유일한 상태와 운영 유틸.

역할:
- rate limit 카운터 저장소 (원자적 hit)
- request_id 발급, 로깅 설정
"""

from .ids import generate_request_id, resolve_request_id
from .logging import (
    AccessLogRecord,
    RequestIdFilter,
    configure_logging,
    log_access,
    request_id_var,
)
from .rate_limit import FixedWindowStore, RateLimitDecision

__all__ = [
    # rate_limit
    "FixedWindowStore",
    "RateLimitDecision",
    # ids
    "generate_request_id",
    "resolve_request_id",
    # logging
    "configure_logging",
    "log_access",
    "AccessLogRecord",
    "RequestIdFilter",
    "request_id_var",
]
