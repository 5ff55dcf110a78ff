"""
test_converter.py - 출력 형식 변환 테스트

DoD:
- target == native → 입력 그대로 (엔진 호출 없음)
- docx → pdf: HTML 셸을 거쳐 엔진 호출, 임시 파일은 성공/실패 모두 삭제
- 변환 경로 없음 → UnsupportedFormat
"""

from pathlib import Path

import pytest

from src.domain.errors import (
    ConversionError,
    ErrorCodes,
    RenderEngineUnavailable,
    UnsupportedFormat,
)
from src.domain.schemas import OutputFormat
from src.render.converter import FormatConverter, resolve_output_format
from src.render.word import DocxRenderer


class ExplodingEngine:
    """호출되면 실패하는 엔진 (fast path 확인용)."""

    async def render_html_to_pdf(self, html: str) -> bytes:
        raise AssertionError("engine must not be invoked")


class RecordingEngine:
    def __init__(self, result: bytes = b"%PDF-1.7 recorded", error: Exception | None = None):
        self.result = result
        self.error = error
        self.html: list[str] = []

    async def render_html_to_pdf(self, html: str) -> bytes:
        self.html.append(html)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def rendered_letter(letter_template: Path) -> bytes:
    return DocxRenderer(letter_template).render({"name": "Alex", "amount": "42"})


# =============================================================================
# resolve_output_format
# =============================================================================


class TestResolveOutputFormat:

    @pytest.mark.parametrize("requested", [None, "", " ", "\t\n", "native", "NATIVE", OutputFormat.NATIVE])
    def test_native_aliases(self, requested):
        assert resolve_output_format(requested, "docx") == "docx"

    def test_explicit_format(self):
        assert resolve_output_format("pdf", "docx") == "pdf"
        assert resolve_output_format(" PDF ", "docx") == "pdf"

    def test_unknown_format(self):
        with pytest.raises(UnsupportedFormat) as exc_info:
            resolve_output_format("xlsx", "docx")

        assert exc_info.value.code == ErrorCodes.UNSUPPORTED_OUTPUT_FORMAT
        assert exc_info.value.context["output_format"] == "xlsx"


# =============================================================================
# FormatConverter
# =============================================================================


class TestFastPath:
    """형식이 같으면 그대로 반환."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("target", ["native", "docx"])
    async def test_docx_passthrough(self, target: str, rendered_letter: bytes, tmp_path: Path):
        converter = FormatConverter(ExplodingEngine(), scratch_dir=tmp_path)

        result = await converter.convert(rendered_letter, "docx", target)

        assert result is rendered_letter
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_pdf_passthrough(self):
        converter = FormatConverter(ExplodingEngine())

        assert await converter.convert(b"%PDF-raw", "pdf", "pdf") == b"%PDF-raw"


class TestDocxToPdf:

    @pytest.mark.asyncio
    async def test_converts_through_html_shell(self, rendered_letter: bytes, tmp_path: Path):
        engine = RecordingEngine()
        converter = FormatConverter(engine, scratch_dir=tmp_path)

        result = await converter.convert(rendered_letter, "docx", "pdf")

        assert result == b"%PDF-1.7 recorded"
        (html,) = engine.html
        assert html.startswith("<!doctype html>")
        assert "Dear Alex, your balance is 42." in html
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_with_fake_browser(self, rendered_letter: bytes, make_chromium, make_engine, fake_pdf: bytes):
        chromium = make_chromium()
        converter = FormatConverter(make_engine(chromium))

        result = await converter.convert(rendered_letter, "docx", "pdf")

        assert result == fake_pdf
        html = chromium.page_calls[0][1]
        assert "Dear Alex" in html
        assert chromium.registry.alive == 0

    @pytest.mark.asyncio
    async def test_scratch_removed_on_engine_failure(self, rendered_letter: bytes, tmp_path: Path):
        engine = RecordingEngine(error=RenderEngineUnavailable(ErrorCodes.ENGINE_UNAVAILABLE))
        converter = FormatConverter(engine, scratch_dir=tmp_path)

        with pytest.raises(RenderEngineUnavailable):
            await converter.convert(rendered_letter, "docx", "pdf")

        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_scratch_removed_on_conversion_failure(self, tmp_path: Path):
        """손상된 패키지 → ConversionError, 엔진 호출 없음, 임시 파일 없음."""
        converter = FormatConverter(ExplodingEngine(), scratch_dir=tmp_path)

        with pytest.raises(ConversionError):
            await converter.convert(b"not a zip", "docx", "pdf")

        assert list(tmp_path.iterdir()) == []


class TestUnsupportedConversion:

    @pytest.mark.asyncio
    async def test_pdf_to_docx(self):
        converter = FormatConverter(ExplodingEngine())

        with pytest.raises(UnsupportedFormat) as exc_info:
            await converter.convert(b"%PDF-raw", "pdf", "docx")

        assert exc_info.value.context == {"native_format": "pdf", "output_format": "docx"}

    @pytest.mark.asyncio
    async def test_unknown_target(self, rendered_letter: bytes):
        converter = FormatConverter(ExplodingEngine())

        with pytest.raises(UnsupportedFormat):
            await converter.convert(rendered_letter, "docx", "odt")
