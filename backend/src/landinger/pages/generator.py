"""Page generation through the LLM with bounded overload retry."""

import asyncio
import logging
from typing import Awaitable, Callable

from landinger.constants.llm import (
    DEFAULT_TEMPERATURE,
    MAX_TOKENS,
    OVERLOAD_MAX_ATTEMPTS,
    OVERLOAD_RETRY_DELAY_SECONDS,
)
from landinger.errors import GenerationFailure
from landinger.llm.client import LLMClient, LLMError, LLMOverloadedError
from landinger.pages.prompts import SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class PageGenerator:
    """Calls the LLM for one prompt, retrying only when the provider is overloaded.

    Retries wait with ``asyncio.sleep`` so other requests keep being served
    during the delay. There is no timeout beyond the retry bound; callers that
    need one wrap ``generate`` themselves.
    """

    def __init__(
        self,
        llm: LLMClient,
        max_tokens: int = MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
        max_attempts: int = OVERLOAD_MAX_ATTEMPTS,
        retry_delay: float = OVERLOAD_RETRY_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the generator.

        Args:
            llm: LLM client used for completions.
            max_tokens: Maximum response tokens per call.
            temperature: Sampling temperature per call.
            max_attempts: Total attempts while the provider reports overload.
            retry_delay: Seconds to wait between attempts.
            sleep: Awaitable sleep, replaceable in tests.
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.llm = llm
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self._sleep = sleep

    async def generate(self, prompt: str) -> str:
        """Generate raw page text for a prompt.

        Args:
            prompt: Prompt from compose_prompt().

        Returns:
            The model's raw response text.

        Raises:
            GenerationFailure: On a non-retryable provider error, an empty
                response, or overload on every attempt.
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                text = await self.llm.generate(
                    prompt,
                    system_prompt=SYSTEM_PROMPT,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                )
            except LLMOverloadedError as e:
                if attempt == self.max_attempts:
                    logger.error(f"Provider still overloaded after {attempt} attempts")
                    raise GenerationFailure(
                        "Text generation provider is overloaded, try again later",
                        details=str(e),
                        attempts=attempt,
                    ) from e
                logger.warning(
                    f"Provider overloaded (attempt {attempt}/{self.max_attempts}), "
                    f"retrying in {self.retry_delay}s"
                )
                await self._sleep(self.retry_delay)
                continue
            except LLMError as e:
                logger.error(f"Page generation failed: {e}")
                raise GenerationFailure(
                    "Failed to generate page", details=str(e), attempts=attempt
                ) from e

            if not text.strip():
                raise GenerationFailure("Model returned an empty response", attempts=attempt)
            return text

        # Unreachable: the loop either returns or raises on the last attempt
        raise GenerationFailure("Failed to generate page", attempts=self.max_attempts)
