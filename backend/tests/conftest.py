"""Shared pytest fixtures for all tests."""

import gc
from unittest.mock import AsyncMock

import pytest

from landinger.db.connection import Database
from landinger.db.migrations import run_migrations
from landinger.llm.client import LLMClient
from landinger.pages.generator import PageGenerator
from landinger.pages.publisher import Publisher
from landinger.pages.service import PageService
from landinger.storage.memory import MemoryStore

SAMPLE_HTML = """<!DOCTYPE html>
<html lang="en">
<head><title>Acme</title></head>
<body><h1>Acme Widgets</h1></body>
</html>"""


@pytest.fixture(autouse=True)
def cleanup_after_test():
    """Collect garbage after each test so SQLite handles are released."""
    yield
    gc.collect()


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch, tmp_path):
    """Isolate every test from the host's environment and cached singletons."""
    from landinger.api.deps import _reset_llm_instance, _reset_store_instance, get_settings
    from landinger.config import load_settings

    for var in (
        "ACTIVE_PROVIDER",
        "ACTIVE_MODEL",
        "ANTHROPIC_API_KEY",
        "OPENAI_API_KEY",
        "GOOGLE_API_KEY",
        "STORAGE_BACKEND",
        "PUBLIC_BASE_URL",
        "BLOB_BUCKET",
        "BLOB_REGION",
        "BLOB_ENDPOINT_URL",
        "BLOB_PUBLIC_BASE_URL",
        "OLLAMA_ENDPOINT",
        "PAGES_GIT_COMMIT",
        "PAGES_GIT_PUSH",
        "CORS_ORIGINS",
        "LANDINGER_CONFIG",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("LANDINGER_DATA_DIR", str(tmp_path / "data"))

    load_settings.cache_clear()
    get_settings.cache_clear()
    _reset_store_instance()
    _reset_llm_instance()
    yield
    load_settings.cache_clear()
    get_settings.cache_clear()
    _reset_store_instance()
    _reset_llm_instance()


@pytest.fixture
def memory_store():
    """Fresh in-memory object store."""
    return MemoryStore(public_base_url="https://pages.test")


@pytest.fixture
def publisher(memory_store):
    """Publisher over the in-memory store with /view URLs."""
    return Publisher(memory_store, public_base_url="/view")


@pytest.fixture
def sample_html() -> str:
    """A well-formed page as a model would return it."""
    return SAMPLE_HTML


@pytest.fixture
def mock_llm():
    """LLM client whose generate() returns SAMPLE_HTML."""
    llm = AsyncMock(spec=LLMClient)
    llm.generate.return_value = SAMPLE_HTML
    return llm


@pytest.fixture
def fake_sleep():
    """Awaitable sleep that records delays instead of waiting."""
    return AsyncMock(return_value=None)


@pytest.fixture
def generator(mock_llm, fake_sleep):
    """PageGenerator over the mock LLM with instant retries."""
    return PageGenerator(mock_llm, sleep=fake_sleep)


@pytest.fixture
def page_service(publisher, generator):
    """PageService wired to the in-memory store and mock LLM."""
    return PageService(publisher, generator)


@pytest.fixture
def temp_db(tmp_path):
    """Create a migrated temporary database that cleans up properly."""
    db = Database(tmp_path / "pages.db")
    run_migrations(db)
    yield db
    db.close()
    gc.collect()
