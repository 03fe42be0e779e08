"""
Edge Middleware Chain: 핸들러 전 공통 요청 게이트.

순서 (바깥 → 안):
0. RequestContextMiddleware - request_id 발급 + access 로그
1. SecurityHeadersMiddleware - 보안 헤더 주입 (content negotiation 없음)
2. OriginGuardMiddleware + CORSMiddleware - 허용 origin 외 cross-origin 요청 거절
3. RateLimitMiddleware - IP별 고정 창 제한 (429)
4. BodySizeLimitMiddleware - 본문 10 MiB 상한 (413)

전부 순수 ASGI 미들웨어. BaseHTTPMiddleware는 본문 스트림을 감쌀 수 없어 사용 안 함.
"""

import logging
import time
from collections.abc import Iterable
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from src.core.ids import resolve_request_id
from src.core.logging import AccessLogRecord, log_access, request_id_var
from src.core.rate_limit import FixedWindowStore, RateLimitDecision
from src.domain.constants import (
    DEFAULT_FRONTEND_URL,
    MAX_BODY_BYTES,
    RATE_LIMIT_MAX_REQUESTS,
    RATE_LIMIT_WINDOW_SECONDS,
    REQUEST_ID_HEADER,
)
from src.domain.errors import ErrorMessages

logger = logging.getLogger(__name__)

# helmet 기본값에 맞춘 보안 헤더
DEFAULT_CONTENT_SECURITY_POLICY = (
    "default-src 'self';"
    "base-uri 'self';"
    "font-src 'self' https: data:;"
    "form-action 'self';"
    "frame-ancestors 'self';"
    "img-src 'self' data:;"
    "object-src 'none';"
    "script-src 'self';"
    "script-src-attr 'none';"
    "style-src 'self' https: 'unsafe-inline'"
)

RATE_LIMIT_HEADERS = (
    "RateLimit-Policy",
    "RateLimit-Limit",
    "RateLimit-Remaining",
    "RateLimit-Reset",
)


def build_security_headers(security_config: dict[str, Any] | None = None) -> dict[str, str]:
    """
    보안 헤더 목록 생성.

    Args:
        security_config: config["security"] (content_security_policy, hsts_max_age)
    """
    cfg = security_config or {}
    csp = cfg.get("content_security_policy", DEFAULT_CONTENT_SECURITY_POLICY)
    hsts_max_age = int(cfg.get("hsts_max_age", 31536000))

    headers = {
        "Cross-Origin-Opener-Policy": "same-origin",
        "Cross-Origin-Resource-Policy": "same-origin",
        "Origin-Agent-Cluster": "?1",
        "Referrer-Policy": "no-referrer",
        "Strict-Transport-Security": f"max-age={hsts_max_age}; includeSubDomains",
        "X-Content-Type-Options": "nosniff",
        "X-DNS-Prefetch-Control": "off",
        "X-Download-Options": "noopen",
        "X-Frame-Options": "SAMEORIGIN",
        "X-Permitted-Cross-Domain-Policies": "none",
        "X-XSS-Protection": "0",
    }
    if csp:
        headers["Content-Security-Policy"] = csp
    return headers


def _is_http(scope: Scope) -> bool:
    return scope["type"] == "http"


# =============================================================================
# 0. Request Context (request_id + access log)
# =============================================================================


class RequestContextMiddleware:
    """
    요청마다 request_id를 정하고 응답 헤더/로그에 붙인다.

    엣지 게이트에서 거절된 요청(403/413/429)도 access 로그에 남도록 가장 바깥에 둔다.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if not _is_http(scope):
            await self.app(scope, receive, send)
            return

        request_id = resolve_request_id(Headers(scope=scope).get(REQUEST_ID_HEADER))
        scope.setdefault("state", {})["request_id"] = request_id
        token = request_id_var.set(request_id)

        started = time.perf_counter()
        status_holder: dict[str, int] = {"status": 500}

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                status_holder["status"] = message["status"]
                MutableHeaders(scope=message)[REQUEST_ID_HEADER] = request_id
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            client = scope.get("client")
            log_access(
                AccessLogRecord(
                    request_id=request_id,
                    method=scope["method"],
                    path=scope["path"],
                    status=status_holder["status"],
                    duration_ms=(time.perf_counter() - started) * 1000,
                    client=client[0] if client else None,
                )
            )
            request_id_var.reset(token)


# =============================================================================
# 1. Security Headers
# =============================================================================


class SecurityHeadersMiddleware:
    """모든 응답에 보안 헤더 추가. 핸들러가 이미 설정한 값은 덮어쓰지 않음."""

    def __init__(self, app: ASGIApp, headers: dict[str, str]) -> None:
        self.app = app
        self.headers = headers

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if not _is_http(scope):
            await self.app(scope, receive, send)
            return

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                response_headers = MutableHeaders(scope=message)
                for name, value in self.headers.items():
                    if name not in response_headers:
                        response_headers[name] = value
            await send(message)

        await self.app(scope, receive, send_wrapper)


# =============================================================================
# 2. Origin Guard (CORS 거절)
# =============================================================================


class OriginGuardMiddleware:
    """
    허용 origin이 아닌 cross-origin 요청을 경로/메서드와 무관하게 403으로 거절.

    - Origin 헤더 없음 (curl, 서버간 호출) → 통과
    - 같은 origin (이 서버가 내려준 UI) → 통과
    - 허용 목록의 origin → 통과 (CORS 헤더는 안쪽 CORSMiddleware가 추가)
    """

    def __init__(self, app: ASGIApp, allowed_origins: Iterable[str]) -> None:
        self.app = app
        self.allowed_origins = {o.rstrip("/") for o in allowed_origins}

    def is_allowed(self, scope: Scope, origin: str) -> bool:
        origin = origin.rstrip("/")
        if origin in self.allowed_origins:
            return True
        host = Headers(scope=scope).get("host")
        return host is not None and origin == f"{scope.get('scheme', 'http')}://{host}"

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if not _is_http(scope):
            await self.app(scope, receive, send)
            return

        origin = Headers(scope=scope).get("origin")
        if origin is not None and not self.is_allowed(scope, origin):
            logger.warning(
                f"Rejected cross-origin request: origin={origin!r} "
                f"{scope['method']} {scope['path']}"
            )
            response = JSONResponse(
                {"error": ErrorMessages.ORIGIN_NOT_ALLOWED}, status_code=403
            )
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)


# =============================================================================
# 3. Rate Limit
# =============================================================================


class RateLimitMiddleware:
    """
    클라이언트 주소별 고정 창 rate limit.

    카운터 저장소는 외부에서 주입 (app.state.rate_limit_store와 같은 객체).
    표준 RateLimit-* 헤더만 사용, 레거시 X-RateLimit-* 헤더는 보내지 않음.
    """

    def __init__(
        self,
        app: ASGIApp,
        store: FixedWindowStore,
        trust_forwarded_for: bool = False,
    ) -> None:
        self.app = app
        self.store = store
        self.trust_forwarded_for = trust_forwarded_for

    def client_key(self, scope: Scope) -> str:
        """rate limit 키 (클라이언트 네트워크 주소)."""
        if self.trust_forwarded_for:
            forwarded = Headers(scope=scope).get("x-forwarded-for")
            if forwarded:
                first_hop = forwarded.split(",")[0].strip()
                if first_hop:
                    return first_hop
        client = scope.get("client")
        return client[0] if client else "unknown"

    def build_headers(self, decision: RateLimitDecision) -> dict[str, str]:
        window = self.store.window_seconds
        return {
            "RateLimit-Policy": f"{decision.limit};w={window}",
            "RateLimit-Limit": str(decision.limit),
            "RateLimit-Remaining": str(decision.remaining),
            "RateLimit-Reset": str(decision.reset_after),
        }

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if not _is_http(scope):
            await self.app(scope, receive, send)
            return

        decision = self.store.hit(self.client_key(scope))
        headers = self.build_headers(decision)

        if not decision.allowed:
            logger.warning(
                f"Rate limit exceeded: key={decision.key} limit={decision.limit} "
                f"reset_after={decision.reset_after}s"
            )
            response = JSONResponse(
                {"error": ErrorMessages.TOO_MANY_REQUESTS},
                status_code=429,
                headers={**headers, "Retry-After": str(decision.reset_after)},
            )
            await response(scope, receive, send)
            return

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                response_headers = MutableHeaders(scope=message)
                for name, value in headers.items():
                    response_headers[name] = value
            await send(message)

        await self.app(scope, receive, send_wrapper)


# =============================================================================
# 4. Body Size Limit
# =============================================================================


class BodyTooLarge(Exception):
    """스트리밍 중 본문이 상한을 넘음 (BodySizeLimitMiddleware 내부용)."""


class BodySizeLimitMiddleware:
    """
    요청 본문 크기 상한.

    - Content-Length가 상한 초과 → 핸들러 호출 없이 즉시 413
    - chunked 등 길이 미상 → 읽는 도중 누적 크기 초과 시 413
      (핸들러의 본문 읽기가 BodyTooLarge로 중단되므로 검증 로직은 실행되지 않음)
    """

    def __init__(self, app: ASGIApp, max_body_bytes: int = MAX_BODY_BYTES) -> None:
        self.app = app
        self.max_body_bytes = max_body_bytes

    def _reject(self) -> JSONResponse:
        return JSONResponse({"error": ErrorMessages.PAYLOAD_TOO_LARGE}, status_code=413)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if not _is_http(scope):
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length is not None and content_length.isdigit():
            if int(content_length) > self.max_body_bytes:
                logger.warning(
                    f"Rejected body: content-length={content_length} "
                    f"> limit={self.max_body_bytes}"
                )
                await self._reject()(scope, receive, send)
                return

        received = 0
        response_started = False

        async def receive_wrapper() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    raise BodyTooLarge()
            return message

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive_wrapper, send_wrapper)
        except BodyTooLarge:
            if response_started:
                raise
            logger.warning(f"Rejected streamed body: > limit={self.max_body_bytes}")
            await self._reject()(scope, receive, send)


# =============================================================================
# Installation
# =============================================================================


def install_edge_middleware(
    app: FastAPI,
    config: dict[str, Any],
    store: FixedWindowStore,
) -> None:
    """
    엣지 미들웨어 체인 설치.

    Starlette는 나중에 추가한 미들웨어가 바깥쪽이므로 역순으로 추가한다.

    Args:
        app: FastAPI 앱
        config: 전체 설정
        store: rate limit 카운터 저장소 (주입)
    """
    cors_config = config.get("cors", {})
    rate_config = config.get("rate_limit", {})
    limits_config = config.get("limits", {})

    allowed_origin = cors_config.get("allowed_origin", DEFAULT_FRONTEND_URL)

    # 4. 본문 크기
    app.add_middleware(
        BodySizeLimitMiddleware,
        max_body_bytes=int(limits_config.get("max_body_bytes", MAX_BODY_BYTES)),
    )
    # 3. rate limit
    app.add_middleware(
        RateLimitMiddleware,
        store=store,
        trust_forwarded_for=bool(rate_config.get("trust_forwarded_for", False)),
    )
    # 2. CORS (허용 origin 헤더 + preflight 응답)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[allowed_origin],
        allow_credentials=True,
        allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
        allow_headers=["*"],
        expose_headers=[*RATE_LIMIT_HEADERS, REQUEST_ID_HEADER],
    )
    app.add_middleware(OriginGuardMiddleware, allowed_origins=[allowed_origin])
    # 1. 보안 헤더
    app.add_middleware(
        SecurityHeadersMiddleware,
        headers=build_security_headers(config.get("security")),
    )
    # 0. request context (가장 바깥)
    app.add_middleware(RequestContextMiddleware)


def create_rate_limit_store(config: dict[str, Any]) -> FixedWindowStore:
    """config.rate_limit 기반 카운터 저장소 생성."""
    rate_config = config.get("rate_limit", {})
    return FixedWindowStore(
        window_seconds=int(rate_config.get("window_seconds", RATE_LIMIT_WINDOW_SECONDS)),
        max_requests=int(rate_config.get("max_requests", RATE_LIMIT_MAX_REQUESTS)),
    )
