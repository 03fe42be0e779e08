"""
Page Routes (HTML).

- GET / → 코드 설명 화면
- GET /correct → 텍스트 교정 화면

화면 로직(상태 전이, 렌더링, 복사)은 static/js/app.js가 담당.
"""

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from src.domain.constants import SUPPORTED_LANGUAGES

# Jinja2 템플릿 설정
_templates_dir = Path(__file__).parent.parent / "templates"
jinja_templates = Jinja2Templates(directory=_templates_dir)

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def explain_page(request: Request) -> HTMLResponse:
    """코드 설명 화면."""
    return jinja_templates.TemplateResponse(
        request,
        "explain.html",
        {
            "page": "explain",
            "languages": SUPPORTED_LANGUAGES,
            "default_language": SUPPORTED_LANGUAGES[0],
        },
    )


@router.get("/correct", response_class=HTMLResponse)
async def correct_page(request: Request) -> HTMLResponse:
    """텍스트 교정 화면."""
    return jinja_templates.TemplateResponse(
        request,
        "correct.html",
        {"page": "correct"},
    )
