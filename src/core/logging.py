"""
Logging: 프로세스 로깅 설정 + 요청 단위 access 로그.

규칙:
- 모듈마다 logging.getLogger(__name__) 사용
- 요청 로그 필수 컨텍스트: request_id, method, path, status, duration_ms, client
- 파일 저장 없음 (stdout 스트림만)
"""

import logging
import sys
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

ACCESS_LOGGER_NAME = "src.access"

DEFAULT_LOG_FORMAT = (
    "%(asctime)s %(levelname)s [%(name)s] [%(request_id)s] %(message)s"
)

# 현재 요청의 request_id (RequestContextMiddleware가 설정)
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

_HANDLER_MARKER = "_assistant_handler"


# =============================================================================
# Logging Setup
# =============================================================================


class RequestIdFilter(logging.Filter):
    """로그 레코드에 현재 request_id 주입."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


def configure_logging(config: dict[str, Any] | None = None) -> logging.Logger:
    """
    루트 로거에 스트림 핸들러 1개 설치.

    여러 번 호출해도 핸들러가 중복되지 않음 (create_app 재호출 대비).

    Args:
        config: 전체 설정 (logging.level, logging.format 사용)

    Returns:
        설정된 루트 로거
    """
    log_config = (config or {}).get("logging", {})
    level_name = str(log_config.get("level", "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)

    handler = next(
        (h for h in root.handlers if getattr(h, _HANDLER_MARKER, False)),
        None,
    )
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler.addFilter(RequestIdFilter())
        setattr(handler, _HANDLER_MARKER, True)
        root.addHandler(handler)

    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(log_config.get("format", DEFAULT_LOG_FORMAT))
    )
    return root


# =============================================================================
# Access Log
# =============================================================================


@dataclass
class AccessLogRecord:
    """요청 1건의 access 로그 항목."""
    request_id: str
    method: str
    path: str
    status: int
    duration_ms: float
    client: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "request_id": self.request_id,
            "method": self.method,
            "path": self.path,
            "status": self.status,
            "duration_ms": round(self.duration_ms, 1),
            "client": self.client,
        }

    def format(self) -> str:
        return (
            f"{self.method} {self.path} -> {self.status} "
            f"({self.duration_ms:.1f}ms) client={self.client or '-'} "
            f"request_id={self.request_id}"
        )


def log_access(record: AccessLogRecord) -> None:
    """
    access 로그 1줄 기록.

    5xx는 error, 4xx는 warning, 나머지는 info 레벨.
    """
    logger = logging.getLogger(ACCESS_LOGGER_NAME)
    if record.status >= 500:
        level = logging.ERROR
    elif record.status >= 400:
        level = logging.WARNING
    else:
        level = logging.INFO
    logger.log(level, record.format(), extra={"access": record.to_dict()})
