"""
Generate Routes: 업로드한 템플릿 분석/문서 생성.

- POST /api/upload → {"placeholders": [...]}
- POST /api/generate → 최종 문서 (DOCX 또는 PDF) 다운로드

규칙:
- 업로드 파일은 고유 이름으로 저장, 요청이 끝나면 성공/실패와 관계없이 삭제
- 파이프라인 에러는 main의 exception handler가 JSON으로 변환
"""

import json
import logging
from pathlib import Path
from typing import Any

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import Response

from src.core.ids import generate_upload_id
from src.core.scratch import discard
from src.render.pipeline import TemplatePipeline, native_format_for

logger = logging.getLogger(__name__)

api_router = APIRouter()


async def save_upload(upload: UploadFile, uploads_root: Path) -> Path:
    """
    업로드 파일을 고유 이름으로 저장.

    확장자는 원본 파일명 기준으로 유지한다.
    """
    uploads_root.mkdir(parents=True, exist_ok=True)
    original = upload.filename or ""
    path = uploads_root / f"{generate_upload_id(original)}{Path(original).suffix.lower()}"
    path.write_bytes(await upload.read())
    return path


def parse_values(raw: str | None) -> dict[str, Any]:
    """values 폼 필드 (JSON 객체) 파싱."""
    if not raw:
        return {}
    try:
        values = json.loads(raw)
    except json.JSONDecodeError:
        raise HTTPException(status_code=400, detail="values must be valid JSON") from None
    if not isinstance(values, dict):
        raise HTTPException(status_code=400, detail="values must be a JSON object")
    return values


@api_router.post("/upload")
async def upload_template(
    request: Request,
    template: UploadFile | None = File(None),
) -> dict[str, Any]:
    """업로드한 템플릿의 placeholder 목록."""
    if template is None or not template.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    # 확장자 검사를 먼저 (지원하지 않으면 저장하지 않음)
    native_format_for(Path(template.filename))

    pipeline: TemplatePipeline = request.app.state.pipeline
    path = await save_upload(template, request.app.state.uploads_root)
    try:
        placeholders = await pipeline.list_tokens(path, original_name=template.filename)
    finally:
        discard(path)

    return {"placeholders": placeholders}


@api_router.post("/generate")
async def generate_document(
    request: Request,
    template: UploadFile | None = File(None),
    values: str | None = Form(None),
    output_format: str = Form("native", alias="outputFormat"),
) -> Response:
    """
    값을 채운 문서 생성.

    Args:
        template: DOCX/PDF 템플릿 (multipart)
        values: JSON 객체 문자열 {토큰: 값}
        output_format: native | docx | pdf

    Returns:
        문서 bytes (Content-Disposition: attachment)
    """
    if template is None or not template.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    parsed_values = parse_values(values)
    native_format_for(Path(template.filename))
    logger.info(f"Generate {template.filename!r} as {output_format!r} ({len(parsed_values)} values)")

    pipeline: TemplatePipeline = request.app.state.pipeline
    path = await save_upload(template, request.app.state.uploads_root)
    try:
        document = await pipeline.render_document(
            path,
            parsed_values,
            output_format,
            original_name=template.filename,
        )
    finally:
        discard(path)

    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": f"attachment; filename={document.filename}"},
    )
