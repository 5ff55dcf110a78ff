"""
Pytest fixtures for the pipeline tests.

구성:
- DOCX 템플릿 생성 (python-docx)
- Playwright 대체 객체 (브라우저 프로세스 수 추적)
"""

import io
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import pytest
from docx import Document

from src.domain.schemas import RendererSettings
from src.render.engine import PdfEngine

FAKE_PDF = b"%PDF-1.7\n% fake pdf body\n%%EOF"

# =============================================================================
# Template Fixtures
# =============================================================================


@pytest.fixture
def make_docx(tmp_path: Path) -> Callable[..., Path]:
    """
    문단 텍스트 목록으로 DOCX 생성.

    Usage:
        path = make_docx("Dear {name}", "Second paragraph")
    """

    def _make(*paragraphs: str, name: str = "template.docx") -> Path:
        path = tmp_path / name
        doc = Document()
        for text in paragraphs:
            doc.add_paragraph(text)
        doc.save(path)
        return path

    return _make


@pytest.fixture
def letter_template(make_docx) -> Path:
    """"Dear {name}, your balance is {amount}." 템플릿."""
    return make_docx("Dear {name}, your balance is {amount}.", name="letter.docx")


@pytest.fixture
def split_run_template(tmp_path: Path) -> Path:
    """
    태그가 여러 run(서식 경계)에 걸친 템플릿.

    "Hello {na" + bold "me" + "}!"
    """
    path = tmp_path / "split.docx"
    doc = Document()
    paragraph = doc.add_paragraph()
    paragraph.add_run("Hello {na")
    paragraph.add_run("me").bold = True
    paragraph.add_run("}!")
    doc.save(path)
    return path


@pytest.fixture
def header_template(tmp_path: Path) -> Path:
    """본문 + 머리글에 placeholder."""
    path = tmp_path / "header.docx"
    doc = Document()
    doc.sections[0].header.paragraphs[0].text = "Ref {ref}"
    doc.add_paragraph("Body {name}")
    doc.save(path)
    return path


@pytest.fixture
def structured_template(tmp_path: Path) -> Path:
    """제목/강조 포함 템플릿 (HTML 변환 확인용)."""
    path = tmp_path / "structured.docx"
    doc = Document()
    doc.add_heading("Service Agreement", level=1)
    paragraph = doc.add_paragraph("Client: ")
    paragraph.add_run("{client}").bold = True
    paragraph.add_run(" signed on ")
    paragraph.add_run("{date}").italic = True
    doc.save(path)
    return path


def read_paragraphs(data: bytes) -> list[str]:
    """DOCX bytes → 본문 문단 텍스트 (빈 문단 제외)."""
    return [p.text for p in Document(io.BytesIO(data)).paragraphs if p.text]


# =============================================================================
# Playwright Fakes
# =============================================================================


class ProcessRegistry:
    """살아 있는 가짜 브라우저 수."""

    def __init__(self) -> None:
        self.alive = 0
        self.launched = 0


class FakePage:
    def __init__(self, pdf: bytes, calls: list, pdf_error: Exception | None = None) -> None:
        self._pdf = pdf
        self._calls = calls
        self._pdf_error = pdf_error

    async def set_content(self, html: str, **kwargs: Any) -> None:
        self._calls.append(("set_content", html, kwargs))

    async def pdf(self, **kwargs: Any) -> bytes:
        self._calls.append(("pdf", kwargs))
        if self._pdf_error is not None:
            raise self._pdf_error
        return self._pdf


class FakeBrowser:
    def __init__(self, registry: ProcessRegistry, page: FakePage, close_error: Exception | None = None) -> None:
        self._registry = registry
        self._page = page
        self._close_error = close_error
        self.closed = False
        registry.alive += 1
        registry.launched += 1

    async def new_page(self) -> FakePage:
        return self._page

    async def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._registry.alive -= 1
        if self._close_error is not None:
            raise self._close_error


class FakeChromium:
    """
    가짜 chromium BrowserType.

    Args:
        launch_failures: 앞에서부터 실패시킬 launch 횟수
        pdf: page.pdf() 반환값
        pdf_error: page.pdf()에서 던질 예외
        close_error: browser.close()에서 던질 예외
    """

    def __init__(
        self,
        launch_failures: int = 0,
        pdf: bytes = FAKE_PDF,
        pdf_error: Exception | None = None,
        close_error: Exception | None = None,
    ) -> None:
        self.registry = ProcessRegistry()
        self.launch_calls: list[dict[str, Any]] = []
        self.page_calls: list = []
        self._launch_failures = launch_failures
        self._pdf = pdf
        self._pdf_error = pdf_error
        self._close_error = close_error

    async def launch(self, **kwargs: Any) -> FakeBrowser:
        self.launch_calls.append(kwargs)
        if len(self.launch_calls) <= self._launch_failures:
            raise RuntimeError(f"launch attempt {len(self.launch_calls)} failed")
        page = FakePage(self._pdf, self.page_calls, self._pdf_error)
        return FakeBrowser(self.registry, page, self._close_error)


class FakePlaywright:
    def __init__(self, chromium: FakeChromium) -> None:
        self.chromium = chromium


def fake_playwright_factory(chromium: FakeChromium) -> Callable[[], Any]:
    """PdfEngine(playwright_factory=...)에 넣을 팩토리."""

    @asynccontextmanager
    async def factory() -> AsyncIterator[FakePlaywright]:
        yield FakePlaywright(chromium)

    return factory


@pytest.fixture
def fake_pdf() -> bytes:
    """가짜 엔진이 돌려주는 PDF bytes."""
    return FAKE_PDF


@pytest.fixture
def make_chromium() -> type[FakeChromium]:
    """FakeChromium 생성자 (실패 시나리오는 인자로)."""
    return FakeChromium


@pytest.fixture
def make_engine() -> Callable[..., PdfEngine]:
    """
    가짜 chromium을 쓰는 PdfEngine.

    Usage:
        chromium = make_chromium(launch_failures=1)
        engine = make_engine(chromium)
    """

    def _make(chromium: FakeChromium, settings: RendererSettings | None = None) -> PdfEngine:
        return PdfEngine(
            settings or RendererSettings(settle_ms=0),
            playwright_factory=fake_playwright_factory(chromium),
        )

    return _make


@pytest.fixture
def docx_paragraphs() -> Callable[[bytes], list[str]]:
    """DOCX bytes → 본문 문단 텍스트 목록."""
    return read_paragraphs
