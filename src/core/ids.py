"""
ID 생성: upload_id, render_id

규칙:
- 요청마다 고유 (UUID v4) → 업로드/임시 파일 이름 충돌 없음
- 파일명으로 안전한 문자만 사용
"""

import uuid
from datetime import UTC, datetime
from pathlib import Path


def generate_upload_id(original_filename: str = "") -> str:
    """
    업로드 ID 생성.

    포맷: UPL-{timestamp}-{uuid[:8]}-{원본 파일명 stem}

    Args:
        original_filename: 업로드된 원본 파일명 (확장자 포함 가능)

    Returns:
        upload_id 문자열
    """
    stem = _sanitize_for_id(Path(original_filename).stem) if original_filename else "UNKNOWN"
    return f"UPL-{_timestamp()}-{uuid.uuid4().hex[:8]}-{stem}"


def generate_render_id() -> str:
    """
    Render ID 생성 (변환용 임시 파일 이름).

    포맷: RND-{timestamp}-{uuid[:8]}
    """
    return f"RND-{_timestamp()}-{uuid.uuid4().hex[:8]}"


def _timestamp() -> str:
    return datetime.now(UTC).strftime("%Y%m%d%H%M%S")


def _sanitize_for_id(value: str) -> str:
    """
    ID에 사용할 수 있도록 문자열 정리.

    - 공백 → 밑줄
    - 특수문자/비ASCII 제거
    - 최대 20자
    """
    sanitized = ""
    for c in value:
        if c.isascii() and c.isalnum():
            sanitized += c
        elif c in " _-":
            sanitized += "_"

    while "__" in sanitized:
        sanitized = sanitized.replace("__", "_")

    sanitized = sanitized.strip("_")

    return sanitized[:20] if sanitized else "UNKNOWN"
