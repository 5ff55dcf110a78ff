"""
FastAPI Routes.

API 라우트 (REST): 템플릿 목록, 업로드 분석, 문서 생성
"""

from . import generate, templates

__all__ = ["generate", "templates"]
