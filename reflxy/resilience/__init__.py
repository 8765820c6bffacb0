"""Resilience patterns for external API calls

This module provides fallback strategies for degrading gracefully when the
text generation API fails.
"""

from reflxy.resilience.fallback import execute_with_fallbacks, FallbackStrategy

__all__ = [
    "execute_with_fallbacks",
    "FallbackStrategy",
]
