"""
Domain Constants: 파이프라인 전역 상수.

파일 형식, 미디어 타입, 다운로드 파일명 등 시스템 전반에서 사용되는 값들.
"""

# =============================================================================
# Template Formats (입력 템플릿 형식)
# =============================================================================

DOCX_EXTENSION = ".docx"
PDF_EXTENSION = ".pdf"

# 목록/업로드에서 허용하는 확장자
SUPPORTED_TEMPLATE_EXTENSIONS = (DOCX_EXTENSION, PDF_EXTENSION)

# 확장자 → native 출력 형식
NATIVE_FORMAT_BY_EXTENSION = {
    DOCX_EXTENSION: "docx",
    PDF_EXTENSION: "pdf",
}

# =============================================================================
# Output (출력 파일 정책)
# =============================================================================

DOCX_MEDIA_TYPE = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
)
PDF_MEDIA_TYPE = "application/pdf"

MEDIA_TYPE_BY_FORMAT = {
    "docx": DOCX_MEDIA_TYPE,
    "pdf": PDF_MEDIA_TYPE,
}

# 다운로드 파일명 (Content-Disposition)
OUTPUT_FILENAME_BY_FORMAT = {
    "docx": "contract.docx",
    "pdf": "contract.pdf",
}

PDF_SIGNATURE = b"%PDF-"

# =============================================================================
# Package Parts (docx 내부 경로)
# =============================================================================

MAIN_DOCUMENT_PART = "word/document.xml"

# merge field를 스캔하는 part 패턴 (본문이 항상 먼저)
MERGE_PART_PATTERNS = (
    r"word/document\.xml",
    r"word/header\d*\.xml",
    r"word/footer\d*\.xml",
    r"word/footnotes\.xml",
    r"word/endnotes\.xml",
)

# =============================================================================
# Renderer Defaults
# =============================================================================

RENDERER_EXECUTABLE_ENV = "RENDERER_EXECUTABLE_PATH"
DEFAULT_BROWSER_CACHE_DIR = "~/.cache/ms-playwright"
DEFAULT_BROWSER_PREFIX = "chromium"

# 캐시 폴더 안에서 찾는 실행 파일 상대 경로 (먼저 존재하는 것 사용)
BROWSER_BINARY_CANDIDATES = (
    "chrome-linux64/chrome",
    "chrome-linux/chrome",
)

# 중첩 샌드박스/작은 /dev/shm 컨테이너 대응
ENGINE_LAUNCH_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
)
ENGINE_FALLBACK_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
)
