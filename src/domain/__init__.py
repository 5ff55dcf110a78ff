"""Domain layer: errors and schemas."""

from .errors import (
    ConversionError,
    EmptyRenderOutput,
    ErrorCodes,
    PipelineError,
    RenderEngineUnavailable,
    TemplateRenderError,
    UnsupportedFormat,
)
from .schemas import (
    FieldError,
    FieldErrorReason,
    OutputFormat,
    PdfPageSettings,
    RendererSettings,
)

__all__ = [
    "PipelineError",
    "UnsupportedFormat",
    "TemplateRenderError",
    "ConversionError",
    "RenderEngineUnavailable",
    "EmptyRenderOutput",
    "ErrorCodes",
    "FieldError",
    "FieldErrorReason",
    "OutputFormat",
    "PdfPageSettings",
    "RendererSettings",
]
