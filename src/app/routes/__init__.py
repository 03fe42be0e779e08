"""
FastAPI Routes.

페이지 라우트 (HTML) + API 라우트 (JSON)
"""

from . import correct, explain, pages

__all__ = ["correct", "explain", "pages"]
