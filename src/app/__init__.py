"""
App layer: API 서버 + UI (FastAPI + Jinja2).

역할:
- POST /api/correct-text, POST /api/explain-code (LLM 중계)
- 엣지 미들웨어 (보안 헤더, CORS, rate limit, 본문 상한)
- 코드 설명 / 텍스트 교정 화면

주의: 폴더 구분
- src/app/templates/ → Jinja2 HTML
- src/app/static/ → 화면 JS/CSS
"""
