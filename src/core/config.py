"""
설정 로드: default.yaml + 환경변수.

규칙:
- 설정 파일이 없으면 빈 dict → 전부 기본값
- 렌더러 실행 파일 탐색은 앱 시작 시 한 번만 수행하고 결과를 주입
  (호출 시점에 환경변수/파일시스템을 다시 보지 않음)

탐색 우선순위:
1. 명시 경로 (RENDERER_EXECUTABLE_PATH 또는 renderer.executable_path), 실제 파일일 때만
2. 브라우저 캐시 폴더 스캔: 버전이 가장 높은 {prefix}-{version} 폴더
3. None → playwright 기본 탐색
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from src.domain.constants import (
    BROWSER_BINARY_CANDIDATES,
    DEFAULT_BROWSER_CACHE_DIR,
    DEFAULT_BROWSER_PREFIX,
    RENDERER_EXECUTABLE_ENV,
)
from src.domain.schemas import PdfPageSettings, RendererSettings

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "default.yaml"

_VERSION_DIR_PATTERN = re.compile(r"^(?P<prefix>[A-Za-z_]+)-(?P<version>\d[\w.\-]*)$")


# =============================================================================
# Config File
# =============================================================================


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """설정 파일 로드."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data: dict[str, Any] | None = yaml.safe_load(f)
        return data or {}


def resolve_path(value: str, root: Path = PROJECT_ROOT) -> Path:
    """설정 경로 해석. 상대 경로는 프로젝트 루트 기준."""
    path = Path(value).expanduser()
    return path if path.is_absolute() else root / path


# =============================================================================
# Renderer Executable Discovery
# =============================================================================


def version_key(version: str) -> tuple[int, ...]:
    """
    폴더 버전 문자열 → 비교용 정수 튜플.

    "140.0.7339.82" → (140, 0, 7339, 82), "1140" → (1140,)
    숫자가 아닌 조각은 무시한다.
    """
    return tuple(int(piece) for piece in re.split(r"[.\-_]", version) if piece.isdigit())


def find_cached_browser(cache_dir: Path, prefix: str = DEFAULT_BROWSER_PREFIX) -> Path | None:
    """
    캐시 폴더에서 최신 브라우저 빌드의 실행 파일 경로 찾기.

    {prefix}-{version} 폴더 중 버전이 가장 높은 하나를 고르고,
    그 안에 실행 파일이 있을 때만 반환한다. 최신 폴더에 실행 파일이
    없으면 더 낮은 버전으로 내려가지 않고 None.

    Args:
        cache_dir: 브라우저 캐시 루트 (예: ~/.cache/ms-playwright)
        prefix: 폴더 접두어 (예: chromium)

    Returns:
        실행 파일 경로 또는 None
    """
    if not cache_dir.is_dir():
        return None

    candidates: list[tuple[tuple[int, ...], Path]] = []
    for entry in cache_dir.iterdir():
        if not entry.is_dir():
            continue
        match = _VERSION_DIR_PATTERN.match(entry.name)
        if match is None or match.group("prefix") != prefix:
            continue
        candidates.append((version_key(match.group("version")), entry))

    if not candidates:
        return None

    _, latest = max(candidates, key=lambda item: item[0])
    for relative in BROWSER_BINARY_CANDIDATES:
        binary = latest / relative
        if binary.is_file():
            return binary

    logger.warning(f"Latest browser build {latest} has no executable, using default discovery")
    return None


def locate_executable(
    renderer_config: dict[str, Any],
    environ: dict[str, str] | None = None,
) -> Path | None:
    """
    렌더러 실행 파일 결정 (탐색 우선순위는 모듈 docstring 참조).

    Args:
        renderer_config: default.yaml의 renderer 섹션
        environ: 환경변수 (테스트 주입용, 기본 os.environ)

    Returns:
        실행 파일 경로 또는 None (playwright 기본 탐색)
    """
    env = os.environ if environ is None else environ

    explicit = env.get(RENDERER_EXECUTABLE_ENV) or renderer_config.get("executable_path")
    if explicit:
        explicit_path = Path(explicit).expanduser()
        if explicit_path.is_file():
            return explicit_path
        logger.warning(f"Configured renderer executable not found: {explicit_path}")

    cache_dir = Path(renderer_config.get("cache_dir") or DEFAULT_BROWSER_CACHE_DIR).expanduser()
    prefix = renderer_config.get("browser_prefix") or DEFAULT_BROWSER_PREFIX
    return find_cached_browser(cache_dir, prefix)


def build_renderer_settings(
    config: dict[str, Any],
    environ: dict[str, str] | None = None,
) -> RendererSettings:
    """전체 설정 dict → RendererSettings (실행 파일 탐색 포함)."""
    renderer_config: dict[str, Any] = config.get("renderer") or {}
    page_config: dict[str, Any] = renderer_config.get("page") or {}
    margin: dict[str, str] = page_config.get("margin") or {}

    defaults = PdfPageSettings()
    page = PdfPageSettings(
        format=page_config.get("format", defaults.format),
        margin_top=margin.get("top", defaults.margin_top),
        margin_right=margin.get("right", defaults.margin_right),
        margin_bottom=margin.get("bottom", defaults.margin_bottom),
        margin_left=margin.get("left", defaults.margin_left),
        print_background=page_config.get("print_background", defaults.print_background),
    )

    executable = locate_executable(renderer_config, environ)
    if executable:
        logger.info(f"Renderer executable: {executable}")
    else:
        logger.info("Renderer executable: playwright default")

    return RendererSettings(
        executable_path=executable,
        settle_ms=int(renderer_config.get("settle_ms", 50)),
        timeout_ms=int(renderer_config.get("timeout_ms", 30000)),
        page=page,
    )
