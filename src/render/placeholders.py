"""
Placeholder 추출: {name} 형식 토큰.

규칙:
- 중복 제거, 처음 등장한 순서 유지 (알파벳 정렬 아님)
- 중첩/이스케이프 없음: 토큰 = 첫 { 와 다음 } 사이 텍스트
- 닫히지 않은 { 이후로는 토큰 없음
- {} 는 빈 이름 토큰 "" 으로 그대로 반환
- 토큰은 줄바꿈을 넘지 않음
"""

import re

PLACEHOLDER_PATTERN = re.compile(r"\{(.*?)\}")


def extract_tokens(text: str) -> list[str]:
    """
    텍스트에서 placeholder 이름 목록 추출.

    Args:
        text: 평탄화된 문서 텍스트

    Returns:
        토큰 이름 목록 (예: "{a}{a}{b}" → ["a", "b"])
    """
    return list(dict.fromkeys(m.group(1) for m in PLACEHOLDER_PATTERN.finditer(text)))
