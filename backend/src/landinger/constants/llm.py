"""LLM client configuration.

Default parameters for LLM API calls. Settings from config.ini override these;
they are also the fallback when settings cannot be loaded.
"""

# =============================================================================
# Generation Defaults
# =============================================================================
# MAX_TOKENS caps response length. A full single-file landing page with
# embedded CSS and JavaScript routinely needs several thousand tokens.
# DEFAULT_TEMPERATURE is fixed per call and not exposed to API callers.

MAX_TOKENS = 8192
DEFAULT_TEMPERATURE = 0.7

# =============================================================================
# Overload Retry
# =============================================================================
# Only provider overload (HTTP 503/529) is retried. MAX_ATTEMPTS counts the
# first call, so 3 means at most two retries.

OVERLOAD_MAX_ATTEMPTS = 3
OVERLOAD_RETRY_DELAY_SECONDS = 2.0
OVERLOAD_STATUS_CODES = frozenset({503, 529})

# =============================================================================
# Provider Defaults
# =============================================================================

DEFAULT_PROVIDER = "anthropic"
DEFAULT_MODELS = {
    "anthropic": "claude-3-5-haiku-20241022",
    "openai": "gpt-4o-mini",
    "google": "gemini-1.5-flash",
    "ollama": "llama3",
}
