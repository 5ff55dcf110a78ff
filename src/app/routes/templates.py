"""
Templates Routes: 저장된 템플릿 목록/다운로드.

- GET /api/templates → {"templates": [...]} (.docx/.pdf, 숨김 파일 제외)
- GET /api/template/{filename} → 템플릿 파일
"""

import logging
from pathlib import Path
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse

from src.domain.constants import SUPPORTED_TEMPLATE_EXTENSIONS

logger = logging.getLogger(__name__)

api_router = APIRouter()


def list_template_files(templates_root: Path) -> list[str]:
    """
    템플릿 디렉터리의 파일 이름 목록.

    Args:
        templates_root: 템플릿 디렉터리

    Returns:
        정렬된 파일 이름 목록

    Raises:
        OSError: 디렉터리를 읽을 수 없음
    """
    return sorted(
        entry.name
        for entry in templates_root.iterdir()
        if entry.is_file()
        and not entry.name.startswith(".")
        and entry.suffix.lower() in SUPPORTED_TEMPLATE_EXTENSIONS
    )


def resolve_template_file(templates_root: Path, filename: str) -> Path | None:
    """디렉터리 밖을 가리키는 이름은 None."""
    root = templates_root.resolve()
    candidate = (root / filename).resolve()
    if candidate.parent != root or not candidate.is_file():
        return None
    return candidate


@api_router.get("/templates")
async def list_templates(request: Request) -> dict[str, Any]:
    """템플릿 목록."""
    templates_root: Path = request.app.state.templates_root
    try:
        templates = list_template_files(templates_root)
    except OSError as e:
        logger.error(f"Failed to read templates dir {templates_root}: {e}")
        raise HTTPException(status_code=500, detail="Failed to list templates") from e

    return {"templates": templates}


@api_router.get("/template/{filename}")
async def download_template(request: Request, filename: str) -> FileResponse:
    """템플릿 파일 다운로드 (처리용)."""
    path = resolve_template_file(request.app.state.templates_root, filename)
    if path is None:
        raise HTTPException(status_code=404, detail="Template not found")
    return FileResponse(path, filename=path.name)
