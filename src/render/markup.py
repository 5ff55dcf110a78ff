"""
DOCX → HTML 변환 (PDF 출력용 중간 단계).

mammoth로 문단/제목/강조/목록 구조만 옮긴다. 표/이미지/머리글 등은
mammoth가 처리하는 만큼만 (best-effort) 남고 나머지는 버린다.
결과 조각은 고정 인쇄용 HTML 셸에 감싸서 렌더러로 넘긴다.
"""

import logging
from pathlib import Path

import mammoth

from src.domain.errors import ConversionError, ErrorCodes

logger = logging.getLogger(__name__)

# 인쇄용 고정 셸 (템플릿과 무관한 상수)
HTML_SHELL = """<!doctype html>
<html>
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width,initial-scale=1"/>
  <style>
    body {{ font-family: Arial, Helvetica, sans-serif; color: #111; line-height: 1.5; margin: 28px; font-size: 12pt; }}
    h1,h2,h3,h4 {{ margin: 16px 0 8px; font-weight: bold; }}
    p {{ margin: 0 0 12px 0; }}
    strong {{ font-weight: bold; }}
    em {{ font-style: italic; }}
    ul,ol {{ margin: 8px 0 8px 24px; }}
    table {{ border-collapse: collapse; }}
    td, th {{ border: 1px solid #999; padding: 4px 6px; vertical-align: top; }}
  </style>
</head>
<body>
{body}
</body>
</html>"""

# Title 스타일은 mammoth 기본 매핑에 없으므로 h1로
STYLE_MAP = """
p[style-name='Title'] => h1:fresh
p[style-name='Subtitle'] => h2:fresh
"""


def docx_to_html(docx_path: Path) -> str:
    """
    DOCX 파일 → HTML 조각.

    Args:
        docx_path: 렌더링이 끝난 DOCX 경로

    Returns:
        HTML 조각 (템플릿 문법 없음)

    Raises:
        ConversionError: CONVERSION_FAILED (손상된 zip, 필수 part 누락 등)
    """
    try:
        with open(docx_path, "rb") as f:
            result = mammoth.convert_to_html(f, style_map=STYLE_MAP)
    except Exception as e:
        raise ConversionError(
            ErrorCodes.CONVERSION_FAILED,
            "Could not convert document to HTML",
            path=docx_path.name,
            error=str(e),
        ) from e

    for message in result.messages:
        logger.warning(f"mammoth {message.type}: {message.message}")

    html: str = result.value
    return html


def wrap_document(body: str) -> str:
    """HTML 조각을 인쇄용 셸에 감싸 완전한 문서로."""
    return HTML_SHELL.format(body=body)
