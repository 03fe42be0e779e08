"""
Fixed-window rate limit counter store.

규칙:
- 클라이언트 주소별 카운터, 창은 첫 요청 시점부터 window_seconds 고정
- 창 경계에서만 리셋 (sliding 아님)
- 허용 판정은 storage의 증가 결과로 한 번에 결정 (동시 요청 과다 허용 방지)
- 전역 상태가 아니라 미들웨어에 주입되는 객체

카운터 엔진은 limits 라이브러리 (FixedWindowRateLimiter + MemoryStorage).
"""

import math
import time
from dataclasses import dataclass

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage, Storage
from limits.strategies import FixedWindowRateLimiter

from src.domain.constants import RATE_LIMIT_MAX_REQUESTS, RATE_LIMIT_WINDOW_SECONDS

RATE_LIMIT_NAMESPACE = "assistant"


@dataclass(frozen=True)
class RateLimitDecision:
    """hit() 결과 스냅샷."""
    key: str
    allowed: bool
    limit: int
    remaining: int
    reset_at: float  # 창 종료 시각 (epoch 초)
    now: float

    @property
    def reset_after(self) -> int:
        """창 리셋까지 남은 초 (올림)."""
        return max(math.ceil(self.reset_at - self.now), 0)


class FixedWindowStore:
    """
    클라이언트 주소별 고정 창 카운터.

    Usage:
        store = FixedWindowStore(window_seconds=900, max_requests=100)
        decision = store.hit("127.0.0.1")
        if not decision.allowed:
            ...  # 429
    """

    def __init__(
        self,
        window_seconds: int = RATE_LIMIT_WINDOW_SECONDS,
        max_requests: int = RATE_LIMIT_MAX_REQUESTS,
        storage: Storage | None = None,
    ):
        """
        Args:
            window_seconds: 창 길이(초)
            max_requests: 창당 최대 허용 요청 수
            storage: limits storage (None이면 프로세스 메모리)
        """
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")

        self.window_seconds = int(window_seconds)
        self.max_requests = max_requests
        self.item = RateLimitItemPerSecond(
            max_requests, self.window_seconds, namespace=RATE_LIMIT_NAMESPACE
        )
        self.storage = storage or MemoryStorage()
        self._limiter = FixedWindowRateLimiter(self.storage)

    def hit(self, key: str) -> RateLimitDecision:
        """
        카운터 증가 후 결과 반환.

        거절된 요청도 카운트는 증가하지만 창 리셋 시각에는 영향 없음.
        """
        allowed = self._limiter.hit(self.item, key)
        reset_at, remaining = self._limiter.get_window_stats(self.item, key)
        return RateLimitDecision(
            key=key,
            allowed=allowed,
            limit=self.max_requests,
            remaining=0 if not allowed else max(int(remaining), 0),
            reset_at=float(reset_at),
            now=time.time(),
        )

    def reset(self, key: str | None = None) -> None:
        """특정 키(또는 전체) 카운터 초기화."""
        if key is None:
            self.storage.reset()
        else:
            self._limiter.clear(self.item, key)
