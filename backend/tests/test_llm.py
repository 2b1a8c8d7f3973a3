# backend/tests/test_llm.py
"""LLM client tests."""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from litellm.exceptions import (
    APIConnectionError,
    AuthenticationError,
    BadRequestError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
    ServiceUnavailableError,
)

from landinger.llm import (
    LLMAuthenticationError,
    LLMClient,
    LLMConnectionError,
    LLMError,
    LLMOverloadedError,
    LLMRateLimitError,
)


@pytest.fixture
def mock_completion():
    """Mock litellm completion response."""
    with patch("landinger.llm.client.acompletion") as mock:
        mock.return_value = AsyncMock(
            choices=[
                AsyncMock(
                    message=AsyncMock(content="Test response")
                )
            ]
        )
        yield mock


async def test_llm_client_generates_response(mock_completion):
    """LLM client generates response from prompt."""
    client = LLMClient(provider="openai", model="gpt-4o")

    response = await client.generate("Test prompt")

    assert response == "Test response"
    mock_completion.assert_called_once()


async def test_llm_client_uses_configured_model(mock_completion):
    """LLM client uses configured provider and model."""
    client = LLMClient(provider="anthropic", model="claude-3-5-haiku-20241022")

    await client.generate("Test")

    call_args = mock_completion.call_args
    assert call_args.kwargs["model"] == "anthropic/claude-3-5-haiku-20241022"


async def test_llm_client_passes_system_prompt(mock_completion):
    """LLM client includes system prompt in messages."""
    client = LLMClient(provider="openai", model="gpt-4o")

    await client.generate("User message", system_prompt="You write HTML")

    messages = mock_completion.call_args.kwargs["messages"]
    assert messages[0] == {"role": "system", "content": "You write HTML"}
    assert messages[1] == {"role": "user", "content": "User message"}


async def test_llm_client_passes_sampling_settings(mock_completion):
    """Temperature and max_tokens reach the provider call."""
    client = LLMClient(provider="openai", model="gpt-4o", api_key="sk-test")

    await client.generate("Test", temperature=0.2, max_tokens=1000)

    kwargs = mock_completion.call_args.kwargs
    assert kwargs["temperature"] == 0.2
    assert kwargs["max_tokens"] == 1000
    assert kwargs["api_key"] == "sk-test"


async def test_llm_client_ollama_uses_endpoint(mock_completion):
    """Ollama models get the ollama/ prefix and the configured endpoint."""
    client = LLMClient(provider="ollama", model="llama3", endpoint="http://localhost:11434")

    await client.generate("Test")

    kwargs = mock_completion.call_args.kwargs
    assert kwargs["model"] == "ollama/llama3"
    assert kwargs["api_base"] == "http://localhost:11434"


async def test_llm_client_returns_empty_string_for_none_content(mock_completion):
    """A response without content is returned as an empty string."""
    mock_completion.return_value = AsyncMock(choices=[AsyncMock(message=AsyncMock(content=None))])
    client = LLMClient(provider="openai", model="gpt-4o")

    assert await client.generate("Test") == ""


# =============================================================================
# Error Translation Tests
# =============================================================================


async def test_llm_client_handles_auth_error():
    """Authentication errors map to LLMAuthenticationError."""
    with patch("landinger.llm.client.acompletion") as mock:
        mock.side_effect = AuthenticationError(
            message="Invalid API key", llm_provider="openai", model="gpt-4o"
        )
        client = LLMClient(provider="openai", model="gpt-4o")

        with pytest.raises(LLMAuthenticationError):
            await client.generate("Test")


async def test_llm_client_handles_rate_limit():
    """Rate limit errors map to LLMRateLimitError."""
    with patch("landinger.llm.client.acompletion") as mock:
        mock.side_effect = RateLimitError(
            message="Rate limit exceeded", llm_provider="openai", model="gpt-4o"
        )
        client = LLMClient(provider="openai", model="gpt-4o")

        with pytest.raises(LLMRateLimitError):
            await client.generate("Test")


async def test_llm_client_handles_service_unavailable_as_overload():
    """503 from the provider maps to LLMOverloadedError."""
    with patch("landinger.llm.client.acompletion") as mock:
        mock.side_effect = ServiceUnavailableError(
            message="Service unavailable", llm_provider="anthropic", model="claude"
        )
        client = LLMClient(provider="anthropic", model="claude")

        with pytest.raises(LLMOverloadedError):
            await client.generate("Test")


async def test_llm_client_handles_overloaded_message():
    """An error whose message says overloaded maps to LLMOverloadedError."""
    with patch("landinger.llm.client.acompletion") as mock:
        mock.side_effect = BadRequestError(
            message='{"type": "overloaded_error", "message": "Overloaded"}',
            llm_provider="anthropic",
            model="claude",
        )
        client = LLMClient(provider="anthropic", model="claude")

        with pytest.raises(LLMOverloadedError):
            await client.generate("Test")


async def test_llm_client_handles_connection_error():
    """Connection failures map to LLMConnectionError."""
    with patch("landinger.llm.client.acompletion") as mock:
        mock.side_effect = APIConnectionError(
            message="Connection refused", llm_provider="ollama", model="llama3"
        )
        client = LLMClient(provider="ollama", model="llama3")

        with pytest.raises(LLMConnectionError):
            await client.generate("Test")


async def test_llm_client_handles_bad_request_as_generic_error():
    """Other provider errors map to the base LLMError."""
    with patch("landinger.llm.client.acompletion") as mock:
        mock.side_effect = BadRequestError(
            message="max_tokens too large", llm_provider="openai", model="gpt-4o"
        )
        client = LLMClient(provider="openai", model="gpt-4o")

        with pytest.raises(LLMError) as exc_info:
            await client.generate("Test")

    assert not isinstance(exc_info.value, LLMOverloadedError)
    assert "max_tokens too large" in str(exc_info.value)


async def test_llm_client_handles_unknown_model():
    """A misspelled model surfaces as LLMError with the provider message."""
    with patch("landinger.llm.client.acompletion") as mock:
        mock.side_effect = NotFoundError(
            message="model not found", model="gpt-9", llm_provider="openai"
        )
        client = LLMClient(provider="openai", model="gpt-9")

        with pytest.raises(LLMError) as exc_info:
            await client.generate("Test")

    assert "model not found" in str(exc_info.value)


async def test_llm_client_handles_permission_denied():
    """403 from the provider maps to LLMAuthenticationError."""
    response = httpx.Response(403, request=httpx.Request("POST", "https://api.test"))
    with patch("landinger.llm.client.acompletion") as mock:
        mock.side_effect = PermissionDeniedError(
            message="key lacks access", llm_provider="openai", model="gpt-4o", response=response
        )
        client = LLMClient(provider="openai", model="gpt-4o")

        with pytest.raises(LLMAuthenticationError):
            await client.generate("Test")


async def test_llm_client_translates_unlisted_exceptions():
    """Exceptions outside the LiteLLM hierarchy are still translated."""
    with patch("landinger.llm.client.acompletion") as mock:
        mock.side_effect = ValueError("unsupported parameter")
        client = LLMClient(provider="openai", model="gpt-4o")

        with pytest.raises(LLMError, match="unsupported parameter"):
            await client.generate("Test")


# =============================================================================
# Query Log Tests
# =============================================================================


async def test_llm_client_logs_queries(mock_completion, tmp_path):
    """Each query is appended to the JSONL log."""
    log_path = tmp_path / "logs" / "llm-queries.jsonl"
    client = LLMClient(provider="openai", model="gpt-4o", log_path=log_path)

    await client.generate("First")
    await client.generate("Second")

    lines = log_path.read_text().splitlines()
    assert len(lines) == 2
    entry = json.loads(lines[0])
    assert entry["request"]["prompt"] == "First"
    assert entry["response"] == "Test response"
    assert entry["error"] is None


async def test_llm_client_logs_errors(tmp_path):
    """Failed queries are logged with the error."""
    log_path = tmp_path / "llm.jsonl"
    with patch("landinger.llm.client.acompletion") as mock:
        mock.side_effect = RateLimitError(
            message="Rate limit exceeded", llm_provider="openai", model="gpt-4o"
        )
        client = LLMClient(provider="openai", model="gpt-4o", log_path=log_path)

        with pytest.raises(LLMRateLimitError):
            await client.generate("Test")

    entry = json.loads(log_path.read_text().splitlines()[0])
    assert entry["response"] is None
    assert "Rate limit exceeded" in entry["error"]


async def test_llm_client_unwritable_log_does_not_fail(mock_completion, tmp_path):
    """A log path that cannot be written is skipped."""
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    client = LLMClient(provider="openai", model="gpt-4o", log_path=blocker / "llm.jsonl")

    assert await client.generate("Test") == "Test response"
