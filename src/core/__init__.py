"""
Core layer: 설정, ID, 임시 파일.

역할:
- default.yaml/환경변수 로드, 렌더러 실행 파일 탐색
- 요청 단위 고유 ID
- 임시 파일 생성/정리
"""

from .config import build_renderer_settings, load_config, locate_executable
from .ids import generate_render_id, generate_upload_id
from .scratch import discard, scratch_copy

__all__ = [
    # config
    "load_config",
    "locate_executable",
    "build_renderer_settings",
    # ids
    "generate_upload_id",
    "generate_render_id",
    # scratch
    "discard",
    "scratch_copy",
]
