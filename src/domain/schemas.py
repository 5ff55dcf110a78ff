"""
Data schemas for the pipeline.

규칙:
- 렌더 결과는 요청 단위로만 존재 (저장하지 않음)
- 설정 값은 앱 시작 시 한 번 확정되어 주입됨
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

# =============================================================================
# Output Format
# =============================================================================

class OutputFormat(str, Enum):
    """
    요청 가능한 출력 형식.

    NATIVE는 "템플릿과 같은 형식"을 뜻하며, 패키지(.docx) 템플릿에서는
    DOCX와 동일하게 취급된다.
    """
    NATIVE = "native"
    DOCX = "docx"
    PDF = "pdf"


class FieldErrorReason(str, Enum):
    """Merge field 문법 오류 종류."""
    UNCLOSED_TAG = "unclosed_tag"            # 문단이 태그 안에서 끝남
    UNOPENED_TAG = "unopened_tag"            # 여는 { 없이 }
    DUPLICATE_OPEN_TAG = "duplicate_open_tag"  # 태그 안에서 다시 {


# =============================================================================
# Error Detail
# =============================================================================

@dataclass
class FieldError:
    """
    TemplateRenderError에 실리는 필드 단위 상세.

    part/paragraph/offset으로 위치를, context로 주변 텍스트를 전달한다.
    """
    reason: FieldErrorReason
    part: str
    paragraph: int
    offset: int
    context: str = ""
    field: str | None = None

    def describe(self) -> str:
        where = f"{self.part}#p{self.paragraph}@{self.offset}"
        label = f" {self.field!r}" if self.field is not None else ""
        return f"{self.reason.value}{label} at {where}: {self.context!r}"

    def to_dict(self) -> dict[str, Any]:
        """JSON 직렬화용."""
        return {
            "reason": self.reason.value,
            "part": self.part,
            "paragraph": self.paragraph,
            "offset": self.offset,
            "context": self.context,
            "field": self.field,
        }


# =============================================================================
# Renderer Settings
# =============================================================================

@dataclass(frozen=True)
class PdfPageSettings:
    """PDF 페이지 크기/여백 (고정값)."""
    format: str = "A4"
    margin_top: str = "20mm"
    margin_right: str = "18mm"
    margin_bottom: str = "20mm"
    margin_left: str = "18mm"
    print_background: bool = True

    def margin(self) -> dict[str, str]:
        return {
            "top": self.margin_top,
            "right": self.margin_right,
            "bottom": self.margin_bottom,
            "left": self.margin_left,
        }


@dataclass(frozen=True)
class RendererSettings:
    """
    Headless 렌더러 설정.

    executable_path는 앱 시작 시 탐색이 끝난 결과다 (None이면
    playwright 기본 탐색에 맡김). 호출 시점에 환경변수를 다시 보지 않는다.
    """
    executable_path: Path | None = None
    settle_ms: int = 50
    timeout_ms: int = 30000
    page: PdfPageSettings = field(default_factory=PdfPageSettings)
