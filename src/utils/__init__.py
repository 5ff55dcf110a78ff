"""Utilities: 재시도/fallback 헬퍼."""

from .retry import FallbackFailedError, call_with_fallback

__all__ = ["call_with_fallback", "FallbackFailedError"]
