"""Page generation and publication pipeline."""

from landinger.pages.extraction import ExtractionResult, extract_document, extract_html
from landinger.pages.generator import PageGenerator
from landinger.pages.naming import metadata_key, normalize_page_name, page_key
from landinger.pages.prompts import SYSTEM_PROMPT, compose_prompt
from landinger.pages.publisher import Publisher
from landinger.pages.schemas import (
    HealthReport,
    PageDocument,
    PageMetadata,
    PublishResult,
)
from landinger.pages.service import PageService

__all__ = [
    "ExtractionResult",
    "HealthReport",
    "PageDocument",
    "PageGenerator",
    "PageMetadata",
    "PageService",
    "PublishResult",
    "Publisher",
    "SYSTEM_PROMPT",
    "compose_prompt",
    "extract_document",
    "extract_html",
    "metadata_key",
    "normalize_page_name",
    "page_key",
]
