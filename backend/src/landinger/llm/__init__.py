# backend/src/landinger/llm/__init__.py
"""LLM client abstraction."""

from landinger.llm.client import (
    LLMAuthenticationError,
    LLMClient,
    LLMConnectionError,
    LLMError,
    LLMOverloadedError,
    LLMRateLimitError,
)

__all__ = [
    "LLMAuthenticationError",
    "LLMClient",
    "LLMConnectionError",
    "LLMError",
    "LLMOverloadedError",
    "LLMRateLimitError",
]
