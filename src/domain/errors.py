"""
Error definitions for the pipeline.

규칙:
- 조용한 실패 금지 → PipelineError 하위 클래스로 명시적 실패
- 에러에는 안정적인 code + 사람이 읽을 수 있는 message + 구조화된 context
- 임시 파일 정리 실패만 예외 (로그만 남기고 전파하지 않음)
"""

from typing import Any

from .schemas import FieldError


class PipelineError(Exception):
    """
    파이프라인 에러의 공통 베이스.

    Usage:
        raise ConversionError(ErrorCodes.CONVERSION_FAILED, error=str(e))
    """

    default_message = "Pipeline error"

    def __init__(self, code: str, message: str | None = None, **context: Any) -> None:
        self.code = code
        self.message = message or self.default_message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"[{self.code}] {self.message} ({ctx_str})" if ctx_str else f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            "error": self.message,
            **self.context,
        }


class UnsupportedFormat(PipelineError):
    """확장자/출력 형식을 인식할 수 없음. 재시도 불가."""

    default_message = "Unsupported file type"


class TemplateRenderError(PipelineError):
    """
    Merge field 치환 실패.

    errors: 문제가 된 태그 목록 (있을 때만). 호출자가 특정 필드를
    하이라이트할 수 있도록 문자열이 아닌 FieldError 리스트로 유지한다.
    """

    default_message = "Error rendering docx"

    def __init__(
        self,
        code: str,
        message: str | None = None,
        errors: list[FieldError] | None = None,
        **context: Any,
    ) -> None:
        self.errors = list(errors or [])
        super().__init__(code, message, **context)

    def _format_message(self) -> str:
        base = super()._format_message()
        if not self.errors:
            return base
        details = "; ".join(e.describe() for e in self.errors)
        return f"{base}: {details}"

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["details"] = [e.to_dict() for e in self.errors]
        return data


class ConversionError(PipelineError):
    """렌더링된 패키지를 HTML로 변환하지 못함 (손상된 zip, 필수 part 누락)."""

    default_message = "Could not convert document to HTML"


class RenderEngineUnavailable(PipelineError):
    """Headless 브라우저를 fallback 포함 두 번 모두 띄우지 못함. 서버 측 장애."""

    default_message = "PDF render engine unavailable"


class EmptyRenderOutput(PipelineError):
    """엔진은 실행됐지만 PDF 바이트가 비어 있음. 서버 측 장애."""

    default_message = "Generated PDF buffer is empty"


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === Input ===
    UNSUPPORTED_FILE_TYPE = "UNSUPPORTED_FILE_TYPE"
    UNSUPPORTED_OUTPUT_FORMAT = "UNSUPPORTED_OUTPUT_FORMAT"
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"

    # === Render ===
    TEMPLATE_SYNTAX = "TEMPLATE_SYNTAX"
    TEMPLATE_CORRUPT = "TEMPLATE_CORRUPT"
    RENDER_FAILED = "RENDER_FAILED"

    # === Convert ===
    CONVERSION_FAILED = "CONVERSION_FAILED"

    # === Engine ===
    ENGINE_UNAVAILABLE = "ENGINE_UNAVAILABLE"
    ENGINE_EMPTY_OUTPUT = "ENGINE_EMPTY_OUTPUT"
    ENGINE_RENDER_FAILED = "ENGINE_RENDER_FAILED"
