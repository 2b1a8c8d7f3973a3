# backend/src/landinger/llm/client.py
"""LiteLLM-based LLM client."""

import json
import logging
import time
from datetime import datetime, timezone
from pathlib import Path

from litellm import acompletion
from litellm.exceptions import (
    APIConnectionError,
    AuthenticationError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
    ServiceUnavailableError,
    Timeout,
)

from landinger.constants.llm import (
    DEFAULT_TEMPERATURE,
    MAX_TOKENS,
    OVERLOAD_STATUS_CODES,
)

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Base exception for LLM client errors."""

    pass


class LLMConnectionError(LLMError):
    """Raised when unable to connect to the LLM provider."""

    pass


class LLMAuthenticationError(LLMError):
    """Raised when authentication with the LLM provider fails."""

    pass


class LLMRateLimitError(LLMError):
    """Raised when rate limited by the LLM provider."""

    pass


class LLMOverloadedError(LLMError):
    """Raised when the provider reports it is temporarily over capacity.

    This is the only error the page generator retries.
    """

    pass


def _is_overload(e: Exception) -> bool:
    """Check whether a provider error is a transient capacity error."""
    if isinstance(e, ServiceUnavailableError):
        return True
    status_code = getattr(e, "status_code", None)
    if status_code in OVERLOAD_STATUS_CODES:
        return True
    return "overloaded" in str(e).lower()


class LLMClient:
    """Unified LLM client supporting multiple providers via LiteLLM."""

    def __init__(
        self,
        provider: str,
        model: str,
        api_key: str | None = None,
        endpoint: str | None = None,
        log_path: Path | None = None,
    ):
        """Initialize LLM client.

        Args:
            provider: LLM provider (anthropic, openai, google, ollama).
            model: Model name.
            api_key: Optional API key (uses env var if not provided).
            endpoint: Optional custom endpoint (for Ollama).
            log_path: Optional path to JSONL log file for query logging.
        """
        self.provider = provider
        self.model = model
        self.api_key = api_key
        self.endpoint = endpoint
        self.log_path = log_path

    def _log_query(
        self,
        system_prompt: str | None,
        prompt: str,
        temperature: float,
        max_tokens: int,
        response: str | None,
        duration_ms: int,
        error: str | None,
        error_details: dict | None = None,
    ) -> None:
        """Append a query record to the JSONL log file."""
        if not self.log_path:
            return

        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "provider": self.provider,
            "model": self.model,
            "request": {
                "system_prompt": system_prompt,
                "prompt": prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
            },
            "response": response,
            "duration_ms": duration_ms,
            "error": error,
        }

        if error_details:
            entry["error_details"] = error_details

        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry) + "\n")
        except OSError as e:
            # Query logging must not break generation
            logger.warning(f"Failed to write LLM query log {self.log_path}: {e}")

    def _extract_error_details(self, e: Exception) -> dict | None:
        """Extract HTTP details from LiteLLM exceptions.

        Args:
            e: The exception to extract details from.

        Returns:
            Dict with status_code, retry-after and provider info if available.
        """
        details: dict = {}

        if hasattr(e, "status_code"):
            details["status_code"] = e.status_code

        response = getattr(e, "response", None)
        if response is not None:
            if hasattr(response, "status_code"):
                details["status_code"] = response.status_code
            headers = getattr(response, "headers", None)
            if headers is not None:
                relevant_headers = {
                    k: v
                    for k, v in dict(headers).items()
                    if k.lower() in ("retry-after", "request-id", "x-request-id")
                }
                if relevant_headers:
                    details["response_headers"] = relevant_headers

        if hasattr(e, "llm_provider"):
            details["llm_provider"] = e.llm_provider

        if hasattr(e, "message"):
            details["message"] = str(e.message)

        return details if details else None

    def _get_model_string(self) -> str:
        """Get LiteLLM model string.

        Returns:
            Model string in provider/model format.
        """
        if self.provider == "openai":
            return self.model  # OpenAI is default
        elif self.provider == "ollama":
            return f"ollama/{self.model}"
        else:
            return f"{self.provider}/{self.model}"

    def _translate_error(self, e: Exception) -> LLMError:
        """Map a LiteLLM exception onto the client's error hierarchy."""
        if isinstance(e, (AuthenticationError, PermissionDeniedError)):
            return LLMAuthenticationError(f"Authentication failed: {e}")
        if isinstance(e, NotFoundError):
            return LLMError(f"Model not found: {e}")
        if _is_overload(e):
            return LLMOverloadedError(f"Provider overloaded: {e}")
        if isinstance(e, RateLimitError):
            return LLMRateLimitError(f"Rate limit exceeded: {e}")
        if isinstance(e, (APIConnectionError, Timeout)):
            return LLMConnectionError(f"Connection failed: {e}")
        return LLMError(f"LLM API error: {e}")

    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Generate completion from prompt.

        Args:
            prompt: User prompt.
            system_prompt: Optional system prompt.
            temperature: Sampling temperature.
            max_tokens: Maximum response tokens.

        Returns:
            Generated text response.

        Raises:
            LLMError: Or one of its subclasses when the provider call fails.
        """
        if temperature is None:
            temperature = DEFAULT_TEMPERATURE
        if max_tokens is None:
            max_tokens = MAX_TOKENS

        messages = []

        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})

        messages.append({"role": "user", "content": prompt})

        kwargs = {
            "model": self._get_model_string(),
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        if self.api_key:
            kwargs["api_key"] = self.api_key

        if self.endpoint and self.provider == "ollama":
            kwargs["api_base"] = self.endpoint

        start_time = time.perf_counter()
        try:
            response = await acompletion(**kwargs)
        except Exception as e:
            # LiteLLM raises several unrelated exception families, not only APIError
            duration_ms = int((time.perf_counter() - start_time) * 1000)
            self._log_query(
                system_prompt,
                prompt,
                temperature,
                max_tokens,
                response=None,
                duration_ms=duration_ms,
                error=str(e),
                error_details=self._extract_error_details(e),
            )
            raise self._translate_error(e) from e

        result: str = str(response.choices[0].message.content or "")
        duration_ms = int((time.perf_counter() - start_time) * 1000)
        self._log_query(
            system_prompt,
            prompt,
            temperature,
            max_tokens,
            response=result,
            duration_ms=duration_ms,
            error=None,
        )
        return result
