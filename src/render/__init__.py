"""
Render layer: 템플릿 → 최종 파일.

역할:
- placeholder 추출, DOCX merge field 치환
- DOCX → HTML (mammoth) → PDF (Playwright Chromium)
"""

from .converter import FormatConverter, resolve_output_format
from .engine import PdfEngine
from .markup import docx_to_html, wrap_document
from .pipeline import RenderedDocument, TemplatePipeline, create_pipeline, native_format_for
from .placeholders import extract_tokens
from .word import DocxRenderer, render_docx

__all__ = [
    "extract_tokens",
    "DocxRenderer",
    "render_docx",
    "docx_to_html",
    "wrap_document",
    "PdfEngine",
    "FormatConverter",
    "resolve_output_format",
    "TemplatePipeline",
    "RenderedDocument",
    "create_pipeline",
    "native_format_for",
]
