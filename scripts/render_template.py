#!/usr/bin/env python3
"""
render_template.py - 템플릿 placeholder 확인/문서 생성 (HTTP 서버 없이)

default.yaml의 renderer 설정을 그대로 사용:
- 실행 파일 탐색 (RENDERER_EXECUTABLE_PATH → 캐시 폴더 → playwright 기본)
- PDF 페이지 크기/여백

사용법:
    # placeholder 목록
    uv run python scripts/render_template.py templates/contract.docx

    # 값 채워서 DOCX
    uv run python scripts/render_template.py templates/contract.docx \\
        --values '{"name": "Alex", "amount": "42"}' -o out.docx

    # PDF로
    uv run python scripts/render_template.py templates/contract.docx \\
        --values-file values.json --format pdf -o out.pdf
"""

import argparse
import asyncio
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

from src.core.config import load_config
from src.domain.errors import PipelineError
from src.render.pipeline import create_pipeline

# 로깅 설정
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def load_values(args: argparse.Namespace) -> dict:
    """--values / --values-file → dict."""
    if args.values_file:
        return json.loads(Path(args.values_file).read_text(encoding="utf-8"))
    if args.values:
        return json.loads(args.values)
    return {}


async def run(args: argparse.Namespace) -> int:
    load_dotenv()
    config = load_config(Path(args.config) if args.config else None)
    pipeline = create_pipeline(config)
    template = Path(args.template)

    if args.output is None:
        tokens = await pipeline.list_tokens(template)
        logger.info(f"{template.name}: {len(tokens)} placeholders")
        for token in tokens:
            print(token)
        return 0

    document = await pipeline.render_document(template, load_values(args), args.format)
    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(document.content)
    logger.info(f"Saved {document.output_format}: {output} ({len(document.content)} bytes)")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="템플릿 placeholder 확인/문서 생성",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("template", help="템플릿 파일 경로 (.docx/.pdf)")
    parser.add_argument(
        "-o",
        "--output",
        help="출력 파일 경로 (없으면 placeholder 목록만 출력)",
    )
    parser.add_argument("--values", help="JSON 객체 문자열")
    parser.add_argument("--values-file", help="JSON 파일 경로")
    parser.add_argument(
        "--format",
        default="native",
        choices=["native", "docx", "pdf"],
        help="출력 형식 (기본: native)",
    )
    parser.add_argument("--config", help="설정 파일 경로 (기본: default.yaml)")

    args = parser.parse_args()

    try:
        return asyncio.run(run(args))
    except PipelineError as e:
        logger.error(str(e))
        return 1
    except json.JSONDecodeError as e:
        logger.error(f"values JSON 파싱 실패: {e}")
        return 1


if __name__ == "__main__":
    exit(main())
