"""
Headless 렌더러: HTML → PDF (Playwright Chromium).

규칙:
- 변환 1건 = 브라우저 프로세스 1개 (풀링/재사용 없음)
- 샌드박스 비활성화 + /dev/shm 사용 억제 (컨테이너 환경)
- 첫 실행 실패 시 최소 인자 + 기본 실행 파일로 1회 재시도, 또 실패하면 RenderEngineUnavailable
- networkidle 대기 후 짧은 고정 대기 → 그 다음에 PDF (레이아웃/폰트 로딩이 끝나야 페이지가 맞음)
- 성공/실패와 관계없이 브라우저 종료, 종료 실패가 원래 에러를 가리지 않음
- 빈 PDF는 EmptyRenderOutput
"""

import asyncio
import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from playwright.async_api import Browser, BrowserType, Playwright, async_playwright

from src.domain.constants import ENGINE_FALLBACK_ARGS, ENGINE_LAUNCH_ARGS
from src.domain.errors import (
    EmptyRenderOutput,
    ErrorCodes,
    PipelineError,
    RenderEngineUnavailable,
)
from src.domain.schemas import RendererSettings
from src.utils.retry import FallbackFailedError, call_with_fallback

logger = logging.getLogger(__name__)

PlaywrightFactory = Callable[[], AbstractAsyncContextManager[Playwright]]


class PdfEngine:
    """
    HTML → PDF 렌더러.

    Usage:
        engine = PdfEngine(settings)
        pdf_bytes = await engine.render_html_to_pdf(html)
    """

    def __init__(
        self,
        settings: RendererSettings | None = None,
        playwright_factory: PlaywrightFactory = async_playwright,
    ):
        """
        Args:
            settings: 실행 파일 경로/페이지 설정 (앱 시작 시 확정된 값)
            playwright_factory: Playwright 컨텍스트 생성 함수 (테스트 주입용)
        """
        self.settings = settings or RendererSettings()
        self._playwright_factory = playwright_factory

    async def render_html_to_pdf(self, html: str) -> bytes:
        """
        완전한 HTML 문서를 페이지 나뉜 PDF로 렌더링.

        Args:
            html: 셸까지 감싼 HTML 문서

        Returns:
            PDF bytes (비어 있지 않음)

        Raises:
            RenderEngineUnavailable: 실행 실패 (fallback 포함) 또는 렌더 중 실패
            EmptyRenderOutput: PDF가 비어 있음
        """
        try:
            async with self._playwright_factory() as playwright:
                return await self._render_with(playwright.chromium, html)
        except PipelineError:
            raise
        except Exception as e:
            raise RenderEngineUnavailable(
                ErrorCodes.ENGINE_UNAVAILABLE,
                "Could not start playwright",
                error=str(e),
            ) from e

    async def _render_with(self, chromium: BrowserType, html: str) -> bytes:
        browser = await self._launch(chromium)
        try:
            page = await browser.new_page()
            await page.set_content(
                html,
                wait_until="networkidle",
                timeout=self.settings.timeout_ms,
            )
            await asyncio.sleep(self.settings.settle_ms / 1000)
            page_settings = self.settings.page
            pdf: bytes = await page.pdf(
                format=page_settings.format,
                print_background=page_settings.print_background,
                margin=page_settings.margin(),
            )
        except Exception as e:
            raise RenderEngineUnavailable(
                ErrorCodes.ENGINE_RENDER_FAILED,
                "Error generating PDF",
                error=str(e),
            ) from e
        finally:
            await self._teardown(browser)

        if not pdf:
            raise EmptyRenderOutput(ErrorCodes.ENGINE_EMPTY_OUTPUT)

        logger.info(f"Rendered PDF: {len(html)} chars HTML -> {len(pdf)} bytes")
        return pdf

    async def _launch(self, chromium: BrowserType) -> Browser:
        """브라우저 실행 (기본 설정 → fallback 1회)."""
        executable = self.settings.executable_path

        async def primary() -> Browser:
            logger.info(f"Launching browser: {executable or 'playwright default'}")
            return await chromium.launch(
                headless=True,
                executable_path=str(executable) if executable else None,
                args=list(ENGINE_LAUNCH_ARGS),
            )

        async def fallback() -> Browser:
            return await chromium.launch(
                headless=True,
                args=list(ENGINE_FALLBACK_ARGS),
            )

        try:
            return await call_with_fallback(primary, fallback, label="Browser launch")
        except FallbackFailedError as e:
            raise RenderEngineUnavailable(
                ErrorCodes.ENGINE_UNAVAILABLE,
                "Could not launch headless browser",
                primary_error=str(e.primary_error),
                fallback_error=str(e.fallback_error),
            ) from e

    async def _teardown(self, browser: Browser) -> None:
        """브라우저 종료 (실패는 로그만)."""
        try:
            await browser.close()
        except Exception as e:
            logger.warning(f"Failed to close browser: {e}")
