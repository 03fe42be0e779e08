"""
Domain Constants: 서비스 전역 상수.

엣지 미들웨어 한도, LLM 호출 파라미터, UI 언어 목록 등
시스템 전반에서 사용되는 값들. default.yaml로 오버라이드 가능한 값은
여기 기본값이 SSOT.
"""

# =============================================================================
# Server (서버 기본값)
# =============================================================================

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 5000
DEFAULT_FRONTEND_URL = "http://localhost:3000"

# =============================================================================
# Edge Limits (엣지 미들웨어 한도)
# =============================================================================
# IP당 15분 창에서 최대 100회. 창은 첫 요청 시점부터 고정 (sliding 아님)

RATE_LIMIT_WINDOW_SECONDS = 15 * 60
RATE_LIMIT_MAX_REQUESTS = 100

# JSON 본문 최대 크기
MAX_BODY_BYTES = 10 * 1024 * 1024  # 10 MiB

REQUEST_ID_HEADER = "X-Request-ID"

# =============================================================================
# Completion API (LLM 호출 파라미터)
# =============================================================================
# Nebius Token Factory (OpenAI 호환 엔드포인트)

DEFAULT_LLM_PROVIDER = "openai"
DEFAULT_LLM_BASE_URL = "https://api.tokenfactory.nebius.com/v1/"
DEFAULT_LLM_MODEL = "openai/gpt-oss-120b"
DEFAULT_MAX_TOKENS = 2000
DEFAULT_TEMPERATURE = 0.3
DEFAULT_REQUEST_TIMEOUT = 60.0

LLM_API_KEY_ENV = "NEBIUS_API_KEY"

# =============================================================================
# Code Explanation
# =============================================================================

UNKNOWN_LANGUAGE = "unknown"

# UI 언어 선택 목록 (전송 시 소문자화)
SUPPORTED_LANGUAGES = (
    "JavaScript",
    "Python",
    "Java",
    "C++",
    "C#",
    "TypeScript",
    "Go",
    "Rust",
    "Ruby",
    "PHP",
    "Swift",
    "Kotlin",
    "SQL",
    "HTML",
    "CSS",
    "Other",
)
