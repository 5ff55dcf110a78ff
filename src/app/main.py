"""
FastAPI 애플리케이션 진입점.

실행:
- 개발: uv run uvicorn src.app.main:app --reload
- 프로덕션: uv run uvicorn src.app.main:app
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.app.routes import generate, templates
from src.core.config import load_config, resolve_path
from src.domain.errors import (
    ConversionError,
    EmptyRenderOutput,
    ErrorCodes,
    PipelineError,
    RenderEngineUnavailable,
    TemplateRenderError,
    UnsupportedFormat,
)
from src.render.pipeline import create_pipeline

logger = logging.getLogger(__name__)

# 에러 종류 → HTTP 상태 (데이터 문제 4xx, 서버 측 장애 503)
STATUS_BY_ERROR: dict[type[PipelineError], int] = {
    UnsupportedFormat: 400,
    TemplateRenderError: 422,
    ConversionError: 422,
    RenderEngineUnavailable: 503,
    EmptyRenderOutput: 503,
}


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    애플리케이션 생명주기 관리.

    시작 시: .env/설정 로드, 렌더러 실행 파일 탐색 (한 번만), 파이프라인 구성
    """
    load_dotenv()
    config = load_config()
    paths: dict[str, Any] = config.get("paths") or {}

    app.state.config = config
    app.state.templates_root = resolve_path(paths.get("templates_dir") or "templates")
    app.state.uploads_root = resolve_path(paths.get("uploads_dir") or "uploads")
    app.state.pipeline = create_pipeline(config)

    yield


# =============================================================================
# App Instance
# =============================================================================

app = FastAPI(
    title="Document Template Pipeline",
    description="템플릿 placeholder 채우기 → DOCX/PDF 다운로드",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

# API 라우트
app.include_router(templates.api_router, prefix="/api", tags=["Templates API"])
app.include_router(generate.api_router, prefix="/api", tags=["Generate API"])


# =============================================================================
# Error Handling
# =============================================================================


def status_for(exc: PipelineError) -> int:
    """PipelineError → HTTP 상태 코드."""
    if exc.code == ErrorCodes.TEMPLATE_NOT_FOUND:
        return 404
    for error_type, status in STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return status
    return 500


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
    """파이프라인 에러 → {"error", "code", "details", ...} JSON."""
    status = status_for(exc)
    if status >= 500:
        logger.error(f"{request.url.path} failed: {exc}")
    else:
        logger.warning(f"{request.url.path} rejected: {exc}")
    return JSONResponse(status_code=status, content={"details": [], **exc.to_dict()})


# =============================================================================
# Root Endpoints
# =============================================================================


@app.get("/health")
async def health() -> dict[str, str]:
    """헬스 체크."""
    return {"status": "ok"}


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.app.main:app",
        host="127.0.0.1",
        port=5001,
        reload=True,
    )
