"""
E2E 테스트용 설정 (HTTP 계층).

구성:
- TestClient: lifespan 실행 후 app.state를 테스트 디렉터리/가짜 엔진으로 교체
- 실제 Chromium 테스트는 브라우저가 설치된 경우에만 실행
"""

from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from src.app.main import app
from src.render.converter import FormatConverter
from src.render.pipeline import TemplatePipeline

# =============================================================================
# 디렉터리
# =============================================================================


@pytest.fixture
def templates_root(tmp_path: Path) -> Path:
    root = tmp_path / "templates"
    root.mkdir()
    return root


@pytest.fixture
def uploads_root(tmp_path: Path) -> Path:
    root = tmp_path / "uploads"
    root.mkdir()
    return root


# =============================================================================
# Client
# =============================================================================


@pytest.fixture
def chromium(make_chromium):
    """API 테스트에서 쓰는 가짜 브라우저 (시나리오별로 교체 가능)."""
    return make_chromium()


@pytest.fixture
def client(
    templates_root: Path,
    uploads_root: Path,
    chromium,
    make_engine,
) -> Generator[TestClient, None, None]:
    """
    FastAPI TestClient.

    lifespan이 만든 state를 덮어써서 저장소의 templates/ 와
    실제 브라우저를 건드리지 않는다.
    """
    with TestClient(app) as client:
        app.state.templates_root = templates_root
        app.state.uploads_root = uploads_root
        app.state.pipeline = TemplatePipeline(FormatConverter(make_engine(chromium)))
        yield client


@pytest.fixture
def docx_upload(letter_template: Path) -> tuple[str, bytes, str]:
    """multipart 업로드 튜플 (filename, content, content_type)."""
    return (
        "letter.docx",
        letter_template.read_bytes(),
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    )
