"""
템플릿 파이프라인: HTTP 계층이 쓰는 진입점.

- list_tokens(path) → placeholder 목록 (추출 모드)
- render(path, values, target_format) → 최종 bytes (렌더 + 필요 시 변환)

요청 간 공유 상태 없음. 블로킹 작업(zip/XML)은 스레드로 넘겨 이벤트 루프를 막지 않는다.
"""

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from src.core.config import build_renderer_settings, resolve_path
from src.domain.constants import (
    MEDIA_TYPE_BY_FORMAT,
    NATIVE_FORMAT_BY_EXTENSION,
    OUTPUT_FILENAME_BY_FORMAT,
)
from src.domain.errors import ErrorCodes, TemplateRenderError, UnsupportedFormat

from .converter import FormatConverter, resolve_output_format
from .engine import PdfEngine
from .placeholders import extract_tokens
from .word import DocxRenderer


@dataclass
class RenderedDocument:
    """최종 출력 (호출자 소유)."""
    content: bytes
    output_format: str

    @property
    def media_type(self) -> str:
        return MEDIA_TYPE_BY_FORMAT[self.output_format]

    @property
    def filename(self) -> str:
        return OUTPUT_FILENAME_BY_FORMAT[self.output_format]


def native_format_for(file_path: Path, original_name: str | None = None) -> str:
    """
    확장자 → native 형식.

    Args:
        file_path: 템플릿 경로
        original_name: 업로드 원본 파일명 (저장 경로와 확장자가 다를 때)

    Raises:
        UnsupportedFormat: UNSUPPORTED_FILE_TYPE
    """
    extension = Path(original_name or file_path.name).suffix.lower()
    try:
        return NATIVE_FORMAT_BY_EXTENSION[extension]
    except KeyError:
        raise UnsupportedFormat(
            ErrorCodes.UNSUPPORTED_FILE_TYPE,
            "Unsupported file type",
            extension=extension,
        ) from None


class TemplatePipeline:
    """
    추출/렌더/변환 오케스트레이션.

    Usage:
        pipeline = TemplatePipeline(FormatConverter(PdfEngine(settings)))
        tokens = await pipeline.list_tokens(path)
        data = await pipeline.render(path, {"name": "Alex"}, "pdf")
    """

    def __init__(self, converter: FormatConverter):
        self.converter = converter

    async def list_tokens(self, file_path: Path, original_name: str | None = None) -> list[str]:
        """템플릿의 placeholder 목록 (처음 등장 순서, 중복 제거)."""
        native = native_format_for(file_path, original_name)
        _ensure_exists(file_path)

        if native == "docx":
            return await asyncio.to_thread(DocxRenderer(file_path).get_placeholders)
        return await asyncio.to_thread(_raw_text_tokens, file_path)

    async def render(
        self,
        file_path: Path,
        values: Mapping[str, Any] | None = None,
        target_format: str = "native",
        original_name: str | None = None,
    ) -> bytes:
        """값을 채운 최종 문서 bytes."""
        document = await self.render_document(file_path, values, target_format, original_name)
        return document.content

    async def render_document(
        self,
        file_path: Path,
        values: Mapping[str, Any] | None = None,
        target_format: str = "native",
        original_name: str | None = None,
    ) -> RenderedDocument:
        """render()와 같지만 출력 형식 정보까지 반환."""
        native = native_format_for(file_path, original_name)
        target = resolve_output_format(target_format, native)
        _ensure_exists(file_path)

        if native == "docx":
            rendered = await asyncio.to_thread(DocxRenderer(file_path).render, values or {})
        else:
            # 원시 텍스트 템플릿은 치환하지 않고 그대로 반환
            rendered = await asyncio.to_thread(file_path.read_bytes)

        content = await self.converter.convert(rendered, native, target)
        return RenderedDocument(content=content, output_format=target)


def create_pipeline(config: dict[str, Any], environ: dict[str, str] | None = None) -> TemplatePipeline:
    """설정 dict로 파이프라인 구성 (렌더러 실행 파일 탐색 포함)."""
    settings = build_renderer_settings(config, environ)
    paths: dict[str, Any] = config.get("paths") or {}
    scratch_dir = resolve_path(paths["scratch_dir"]) if paths.get("scratch_dir") else None
    return TemplatePipeline(FormatConverter(PdfEngine(settings), scratch_dir=scratch_dir))


def _ensure_exists(file_path: Path) -> None:
    if not file_path.is_file():
        raise TemplateRenderError(
            ErrorCodes.TEMPLATE_NOT_FOUND,
            "Template not found",
            path=str(file_path),
        )


def _raw_text_tokens(file_path: Path) -> list[str]:
    return extract_tokens(file_path.read_bytes().decode("utf-8", errors="replace"))
