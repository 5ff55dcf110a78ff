"""
재시도 로직 유틸리티.

주 호출이 실패하면 fallback을 정확히 한 번 실행합니다.
(렌더러 실행: 기본 인자 → 최소 인자 + 기본 실행 파일)
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_with_fallback(
    primary_func: Callable[[], Awaitable[T]],
    fallback_func: Callable[[], Awaitable[T]],
    label: str = "operation",
    exceptions: tuple[type[Exception], ...] = (Exception,),
) -> T:
    """
    primary 실패 시 fallback 1회 실행.

    Args:
        primary_func: 주 함수
        fallback_func: fallback 함수
        label: 로그에 쓸 작업 이름
        exceptions: fallback으로 넘어갈 예외 타입들

    Returns:
        primary_func 또는 fallback_func의 반환값

    Raises:
        FallbackFailedError: 둘 다 실패 (primary/fallback 예외를 모두 보관)
    """
    try:
        return await primary_func()
    except exceptions as primary_error:
        logger.warning(f"{label} failed: {primary_error}. Attempting fallback...")

        try:
            result = await fallback_func()
        except exceptions as fallback_error:
            logger.error(f"{label} fallback also failed: {fallback_error}")
            raise FallbackFailedError(primary_error, fallback_error) from fallback_error

        logger.info(f"{label} fallback succeeded")
        return result


class FallbackFailedError(Exception):
    """primary와 fallback이 모두 실패."""

    def __init__(self, primary_error: Exception, fallback_error: Exception) -> None:
        self.primary_error = primary_error
        self.fallback_error = fallback_error
        super().__init__(f"primary: {primary_error}; fallback: {fallback_error}")
