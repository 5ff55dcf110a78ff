"""
Scratch files: 요청 단위 임시 파일.

규칙:
- 이름은 render_id 기반으로 고유 → 동시 요청 간 충돌 없음
- 사용 후 성공/실패와 관계없이 삭제
- 삭제 실패는 경고 로그만 (원래 결과/에러를 가리지 않음)
"""

import logging
import tempfile
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from src.core.ids import generate_render_id

logger = logging.getLogger(__name__)


def discard(path: Path) -> bool:
    """
    파일 삭제 (best-effort).

    Returns:
        실제로 삭제했으면 True
    """
    try:
        path.unlink()
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning(f"Failed to remove scratch file {path}: {e}")
        return False


@contextmanager
def scratch_copy(
    data: bytes,
    suffix: str = "",
    scratch_dir: Path | None = None,
) -> Generator[Path, None, None]:
    """
    바이트를 임시 파일로 쓰고 경로를 넘겨준 뒤 항상 삭제.

    Usage:
        with scratch_copy(rendered, suffix=".docx") as path:
            html = convert(path)

    Args:
        data: 파일 내용
        suffix: 확장자 (예: ".docx")
        scratch_dir: 임시 디렉터리 (None이면 시스템 temp)
    """
    directory = scratch_dir or Path(tempfile.gettempdir())
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{generate_render_id()}{suffix}"

    try:
        path.write_bytes(data)
        yield path
    finally:
        discard(path)
