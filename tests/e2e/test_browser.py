"""
실제 Chromium으로 PDF 렌더링 (Playwright).

브라우저가 설치되어 있지 않으면 skip:
    uv run playwright install chromium
"""

from pathlib import Path

import pytest

from src.core.config import build_renderer_settings
from src.domain.constants import PDF_SIGNATURE
from src.domain.errors import ErrorCodes, RenderEngineUnavailable
from src.render.converter import FormatConverter
from src.render.engine import PdfEngine
from src.render.markup import wrap_document
from src.render.pipeline import TemplatePipeline


@pytest.fixture
def engine() -> PdfEngine:
    """default.yaml과 같은 탐색 규칙 (환경변수 → 캐시 폴더 → playwright 기본)."""
    return PdfEngine(build_renderer_settings({}))


async def render_or_skip(engine: PdfEngine, html: str) -> bytes:
    try:
        return await engine.render_html_to_pdf(html)
    except RenderEngineUnavailable as e:
        if e.code == ErrorCodes.ENGINE_UNAVAILABLE:
            pytest.skip(f"Chromium not available: {e}")
        raise


@pytest.mark.asyncio
async def test_html_to_pdf(engine: PdfEngine):
    pdf = await render_or_skip(engine, wrap_document("<h1>Hello</h1><p>World</p>"))

    assert pdf.startswith(PDF_SIGNATURE)
    assert len(pdf) > 500


@pytest.mark.asyncio
async def test_docx_to_pdf(engine: PdfEngine, structured_template: Path, tmp_path: Path):
    pipeline = TemplatePipeline(FormatConverter(engine, scratch_dir=tmp_path))

    try:
        pdf = await pipeline.render(structured_template, {"client": "ACME", "date": "2024-01-15"}, "pdf")
    except RenderEngineUnavailable as e:
        if e.code == ErrorCodes.ENGINE_UNAVAILABLE:
            pytest.skip(f"Chromium not available: {e}")
        raise

    assert pdf.startswith(PDF_SIGNATURE)
    assert list(tmp_path.iterdir()) == []
