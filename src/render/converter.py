"""
출력 형식 변환: 렌더링된 패키지 → 요청 형식 bytes.

흐름:
- target == native → 그대로 반환 (렌더러 호출 없음)
- docx → pdf: 임시 파일 → mammoth HTML → 인쇄 셸 → PdfEngine
"""

import asyncio
import logging
from pathlib import Path

from src.core.scratch import scratch_copy
from src.domain.errors import ErrorCodes, UnsupportedFormat
from src.domain.schemas import OutputFormat

from .engine import PdfEngine
from .markup import docx_to_html, wrap_document

logger = logging.getLogger(__name__)


def resolve_output_format(requested: str | OutputFormat | None, native_format: str) -> str:
    """
    요청 형식 문자열 → 실제 출력 형식 ("docx" | "pdf").

    None/빈 문자열(공백만 있는 것 포함)/"native"는 템플릿의 native 형식.

    Raises:
        UnsupportedFormat: UNSUPPORTED_OUTPUT_FORMAT
    """
    if requested is None:
        return native_format

    value = requested.value if isinstance(requested, OutputFormat) else requested.strip().lower()
    if not value:
        return native_format

    try:
        fmt = OutputFormat(value)
    except ValueError:
        raise UnsupportedFormat(
            ErrorCodes.UNSUPPORTED_OUTPUT_FORMAT,
            "Unsupported output format",
            output_format=requested,
        ) from None

    return native_format if fmt is OutputFormat.NATIVE else fmt.value


class FormatConverter:
    """
    렌더링된 문서를 요청 형식으로 변환.

    Usage:
        converter = FormatConverter(PdfEngine(settings))
        pdf = await converter.convert(docx_bytes, "docx", "pdf")
    """

    def __init__(self, engine: PdfEngine, scratch_dir: Path | None = None):
        self.engine = engine
        self.scratch_dir = scratch_dir

    async def convert(self, rendered: bytes, native_format: str, target_format: str) -> bytes:
        """
        Args:
            rendered: 렌더링된 문서 bytes (native 형식)
            native_format: "docx" 또는 "pdf"
            target_format: "native" | "docx" | "pdf"

        Returns:
            target 형식 bytes

        Raises:
            UnsupportedFormat: 변환 경로 없음 (예: pdf → docx)
            ConversionError, RenderEngineUnavailable, EmptyRenderOutput
        """
        target = resolve_output_format(target_format, native_format)

        if target == native_format:
            return rendered

        if native_format == OutputFormat.DOCX.value and target == OutputFormat.PDF.value:
            return await self._docx_to_pdf(rendered)

        raise UnsupportedFormat(
            ErrorCodes.UNSUPPORTED_OUTPUT_FORMAT,
            "No conversion available",
            native_format=native_format,
            output_format=target,
        )

    async def _docx_to_pdf(self, rendered: bytes) -> bytes:
        body = await asyncio.to_thread(self._to_html, rendered)
        return await self.engine.render_html_to_pdf(wrap_document(body))

    def _to_html(self, rendered: bytes) -> str:
        with scratch_copy(rendered, suffix=".rendered.docx", scratch_dir=self.scratch_dir) as path:
            return docx_to_html(path)
