"""FastAPI dependency injection functions."""

from functools import lru_cache

from landinger.config import Config, load_settings
from landinger.llm.client import LLMClient
from landinger.pages.generator import PageGenerator
from landinger.pages.publisher import Publisher
from landinger.pages.service import PageService
from landinger.storage.base import ObjectStore
from landinger.storage.factory import create_store


@lru_cache
def get_settings() -> Config:
    """Get cached application settings."""
    return load_settings()


_store_instance: ObjectStore | None = None


def get_store() -> ObjectStore:
    """Get the storage backend selected at startup."""
    global _store_instance
    if _store_instance is None:
        _store_instance = create_store(get_settings())
    return _store_instance


def _reset_store_instance() -> None:
    """Reset storage backend instance (for testing only)."""
    global _store_instance
    _store_instance = None


_llm_instance: LLMClient | None = None


def get_llm() -> LLMClient:
    """Get LLM client instance."""
    global _llm_instance
    if _llm_instance is None:
        settings = get_settings()
        _llm_instance = LLMClient(
            provider=settings.llm_provider,
            model=settings.llm_model,
            api_key=settings.llm_api_key,
            endpoint=settings.llm_endpoint,
            log_path=settings.llm_log_path,
        )
    return _llm_instance


def _reset_llm_instance() -> None:
    """Reset LLM client instance (for testing only)."""
    global _llm_instance
    _llm_instance = None


def get_page_service() -> PageService:
    """Get a PageService wired to the process-wide store and LLM client."""
    settings = get_settings()
    publisher = Publisher(get_store(), public_base_url=settings.page_url_base)
    generator = PageGenerator(
        get_llm(),
        max_tokens=settings.llm.max_tokens,
        temperature=settings.llm.temperature,
        max_attempts=settings.retry.max_attempts,
        retry_delay=settings.retry.delay_seconds,
    )
    return PageService(publisher, generator)
