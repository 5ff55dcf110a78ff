"""
Word (DOCX) 렌더러: zip 패키지 + WordprocessingML merge field.

역할:
- 추출 모드: 모든 part의 run 텍스트를 이어 붙여 {name} 토큰 목록 추출
- 렌더 모드: 문단 단위로 {name} 태그를 값으로 치환 → 같은 구조의 새 패키지 bytes

규칙:
- 태그는 여러 run(서식 경계)에 걸쳐도 되지만 문단을 넘지 않음
- 문법 오류는 패키지 전체에서 모아서 한 번에 TemplateRenderError
- 스타일/이미지/표는 건드리지 않음 (w:t 텍스트만 수정)
- 원본 part 순서/압축 방식 유지, 수정하지 않은 part는 내용 그대로 복사
"""

import io
import re
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any
from zipfile import BadZipFile, ZipFile

from lxml import etree

from src.domain.constants import MAIN_DOCUMENT_PART, MERGE_PART_PATTERNS
from src.domain.errors import ErrorCodes, PipelineError, TemplateRenderError
from src.domain.schemas import FieldError, FieldErrorReason

from .placeholders import extract_tokens

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
XML_NS = "http://www.w3.org/XML/1998/namespace"

W_P = f"{{{W_NS}}}p"
W_T = f"{{{W_NS}}}t"
W_BR = f"{{{W_NS}}}br"
XML_SPACE = f"{{{XML_NS}}}space"

OPEN_DELIMITER = "{"
CLOSE_DELIMITER = "}"

_PART_PATTERNS = [re.compile(rf"^{p}$") for p in MERGE_PART_PATTERNS]
_PART_NUMBER = re.compile(r"(\d+)\.xml$")

# 값에 들어오면 XML로 쓸 수 없는 문자 (\t \n \r 제외한 C0, 서로게이트, U+FFFE/U+FFFF)
_BREAK_CHARS = re.compile(r"\r\n|[\x0b\x0c]")
_ILLEGAL_XML_CHARS = re.compile(r"[\x00-\x08\x0e-\x1f\ud800-\udfff\ufffe\uffff]")
_XML_PARSER = etree.XMLParser(resolve_entities=False, remove_blank_text=False)

# 에러 context로 보여줄 주변 글자 수
_CONTEXT_CHARS = 15


class DocxRenderer:
    """
    Word 문서 렌더러.

    Usage:
        renderer = DocxRenderer(template_path)
        tokens = renderer.get_placeholders()
        data = renderer.render({"name": "Alex"})
    """

    def __init__(self, template_path: Path):
        """
        Args:
            template_path: DOCX 템플릿 파일 경로

        Raises:
            TemplateRenderError: TEMPLATE_NOT_FOUND
        """
        if not template_path.exists():
            raise TemplateRenderError(
                ErrorCodes.TEMPLATE_NOT_FOUND,
                "Template not found",
                path=str(template_path),
            )

        self.template_path = template_path
        self._content: bytes | None = None

    def _load_template(self) -> bytes:
        """템플릿 로드 (lazy)."""
        if self._content is None:
            self._content = self.template_path.read_bytes()
        return self._content

    # -------------------------------------------------------------------------
    # Extract mode
    # -------------------------------------------------------------------------

    def get_full_text(self) -> str:
        """
        패키지 전체 텍스트 (서식 경계 무시, 문단 구분자 없음).

        본문 → 머리글 → 바닥글 → 각주/미주 순서. part 안에서는 문서 순서대로
        w:t를 읽는다 (텍스트박스 안의 문단도 놓인 자리에서).
        """
        with self._open_package() as package:
            return "".join(
                node.text or ""
                for _, root in self._iter_merge_parts(package)
                for node in root.iter(W_T)
            )

    def get_placeholders(self) -> list[str]:
        """
        템플릿에서 사용된 placeholder 목록 추출.

        Returns:
            placeholder 이름 목록 (처음 등장한 순서)
        """
        return extract_tokens(self.get_full_text())

    # -------------------------------------------------------------------------
    # Render mode
    # -------------------------------------------------------------------------

    def render(self, values: Mapping[str, Any] | None = None) -> bytes:
        """
        템플릿에 값을 채워 새 DOCX 패키지 생성.

        Args:
            values: 토큰 이름 → 값. 없는 토큰은 빈 문자열, 남는 키는 무시.

        Returns:
            렌더링된 DOCX bytes

        Raises:
            TemplateRenderError: TEMPLATE_SYNTAX (errors에 상세), TEMPLATE_CORRUPT, RENDER_FAILED
        """
        values = values or {}
        try:
            with self._open_package() as package:
                rewritten: dict[str, bytes] = {}
                errors: list[FieldError] = []

                for part_name, root in self._iter_merge_parts(package):
                    part_errors = _merge_part(part_name, root, values)
                    if part_errors:
                        errors.extend(part_errors)
                        continue
                    rewritten[part_name] = etree.tostring(
                        root,
                        xml_declaration=True,
                        encoding="UTF-8",
                        standalone=True,
                    )

                if errors:
                    raise TemplateRenderError(
                        ErrorCodes.TEMPLATE_SYNTAX,
                        "Error rendering docx",
                        errors=errors,
                        template=self.template_path.name,
                    )

                return _repackage(package, rewritten)

        except PipelineError:
            raise
        except Exception as e:
            raise TemplateRenderError(
                ErrorCodes.RENDER_FAILED,
                "Error rendering docx",
                template=self.template_path.name,
                error=str(e),
            ) from e

    # -------------------------------------------------------------------------
    # Package access
    # -------------------------------------------------------------------------

    def _open_package(self) -> ZipFile:
        try:
            return ZipFile(io.BytesIO(self._load_template()))
        except BadZipFile as e:
            raise TemplateRenderError(
                ErrorCodes.TEMPLATE_CORRUPT,
                "Template is not a valid docx package",
                template=self.template_path.name,
                error=str(e),
            ) from e

    def _iter_merge_parts(self, package: ZipFile) -> Iterator[tuple[str, etree._Element]]:
        """merge field 대상 part를 (이름, XML root)로 순회."""
        names = package.namelist()
        if MAIN_DOCUMENT_PART not in names:
            raise TemplateRenderError(
                ErrorCodes.TEMPLATE_CORRUPT,
                "Template has no main document part",
                template=self.template_path.name,
                part=MAIN_DOCUMENT_PART,
            )

        for pattern in _PART_PATTERNS:
            for name in sorted((n for n in names if pattern.match(n)), key=_part_order):
                try:
                    root = etree.fromstring(package.read(name), _XML_PARSER)
                except (etree.XMLSyntaxError, BadZipFile) as e:
                    raise TemplateRenderError(
                        ErrorCodes.TEMPLATE_CORRUPT,
                        "Template part could not be parsed",
                        template=self.template_path.name,
                        part=name,
                        error=str(e),
                    ) from e
                yield name, root


def render_docx(template_path: Path, values: Mapping[str, Any] | None = None) -> bytes:
    """
    Word 문서 생성 (간편 함수).

    Args:
        template_path: DOCX 템플릿 파일 경로
        values: 토큰 이름 → 값

    Returns:
        렌더링된 DOCX bytes
    """
    return DocxRenderer(template_path).render(values)


# =============================================================================
# Paragraph merge
# =============================================================================


def _text_nodes(paragraph: etree._Element) -> list[etree._Element]:
    """문단에 직접 속한 w:t 목록 (텍스트박스 안의 중첩 문단 제외)."""
    return [
        node
        for node in paragraph.iter(W_T)
        if next(node.iterancestors(W_P), None) is paragraph
    ]


def _paragraph_text(nodes: list[etree._Element]) -> str:
    return "".join(node.text or "" for node in nodes)


def _scan_tags(text: str) -> tuple[list[tuple[int, int]], list[tuple[FieldErrorReason, int, int]]]:
    """
    문단 텍스트에서 태그 위치 찾기.

    Returns:
        (태그 [start, end) 목록, (오류 종류, 위치, 태그 시작 또는 -1) 목록)
    """
    tags: list[tuple[int, int]] = []
    problems: list[tuple[FieldErrorReason, int, int]] = []
    open_at: int | None = None

    for i, ch in enumerate(text):
        if ch == OPEN_DELIMITER:
            if open_at is not None:
                problems.append((FieldErrorReason.DUPLICATE_OPEN_TAG, i, open_at))
            open_at = i
        elif ch == CLOSE_DELIMITER:
            if open_at is None:
                problems.append((FieldErrorReason.UNOPENED_TAG, i, -1))
            else:
                tags.append((open_at, i + 1))
                open_at = None

    if open_at is not None:
        problems.append((FieldErrorReason.UNCLOSED_TAG, open_at, open_at))

    return tags, problems


def _part_order(name: str) -> tuple[int, str]:
    """header2.xml < header10.xml (번호 없는 part가 먼저)."""
    match = _PART_NUMBER.search(name)
    return (int(match.group(1)) if match else 0, name)


def _lookup(values: Mapping[str, Any], name: str) -> str:
    """
    값 조회: 정확한 이름 → 공백 제거한 이름. 없거나 None이면 "".

    세로 탭/폼 피드(엑셀·워드에서 붙여 넣은 줄바꿈)는 줄바꿈으로,
    XML에 쓸 수 없는 나머지 제어 문자는 버린다.
    """
    if name in values:
        value = values[name]
    else:
        value = values.get(name.strip())
    if value is None:
        return ""
    text = _BREAK_CHARS.sub("\n", str(value))
    return _ILLEGAL_XML_CHARS.sub("", text)


def _merge_part(part_name: str, root: etree._Element, values: Mapping[str, Any]) -> list[FieldError]:
    """part 안의 모든 문단 치환. 문법 오류가 있으면 수정 없이 오류 목록 반환."""
    errors: list[FieldError] = []
    pending: list[tuple[list[etree._Element], str, list[tuple[int, int]]]] = []

    for index, paragraph in enumerate(root.iter(W_P)):
        nodes = _text_nodes(paragraph)
        text = _paragraph_text(nodes)
        if OPEN_DELIMITER not in text and CLOSE_DELIMITER not in text:
            continue

        tags, problems = _scan_tags(text)
        for reason, offset, tag_start in problems:
            field = None
            if tag_start >= 0:
                field = text[tag_start + 1:offset] if offset > tag_start else text[tag_start + 1:]
            errors.append(
                FieldError(
                    reason=reason,
                    part=part_name,
                    paragraph=index,
                    offset=offset,
                    context=text[max(0, offset - _CONTEXT_CHARS):offset + _CONTEXT_CHARS],
                    field=field,
                )
            )
        pending.append((nodes, text, tags))

    if errors:
        return errors

    for nodes, text, tags in pending:
        _apply_tags(nodes, text, tags, values)
    return []


def _apply_tags(
    nodes: list[etree._Element],
    text: str,
    tags: list[tuple[int, int]],
    values: Mapping[str, Any],
) -> None:
    """
    태그를 값으로 치환.

    값은 태그가 시작하는 w:t에 들어가고, 태그가 걸쳐 있던 나머지 w:t에서는
    태그 글자만 지운다. 값의 줄바꿈은 같은 run 안의 w:br로 바꾼다.
    """
    covered = [False] * len(text)
    inserts: dict[int, str] = {}
    for start, end in tags:
        inserts[start] = _lookup(values, text[start + 1:end - 1])
        for i in range(start, end):
            covered[i] = True

    position = 0
    for node in nodes:
        original = node.text or ""
        lines = [""]
        for i in range(position, position + len(original)):
            if i in inserts:
                value_lines = inserts[i].replace("\r\n", "\n").split("\n")
                lines[-1] += value_lines[0]
                lines.extend(value_lines[1:])
            if not covered[i]:
                lines[-1] += text[i]
        position += len(original)

        if len(lines) == 1 and lines[0] == original:
            continue
        _write_lines(node, lines)


def _write_lines(node: etree._Element, lines: list[str]) -> None:
    """w:t 하나를 줄 목록으로 교체 (w:t, w:br, w:t, ...)."""
    node.text = lines[0]
    node.set(XML_SPACE, "preserve")

    anchor = node
    for line in lines[1:]:
        br = etree.Element(W_BR)
        anchor.addnext(br)
        t = etree.Element(W_T)
        t.text = line
        t.set(XML_SPACE, "preserve")
        br.addnext(t)
        anchor = t


def _repackage(package: ZipFile, rewritten: Mapping[str, bytes]) -> bytes:
    """원본 순서/압축 방식 그대로 새 zip 작성."""
    buffer = io.BytesIO()
    with ZipFile(buffer, "w") as out:
        for info in package.infolist():
            data = rewritten.get(info.filename)
            if data is None:
                data = package.read(info.filename)
            out.writestr(info, data)
    return buffer.getvalue()
