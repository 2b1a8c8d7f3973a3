"""Page service: request-level orchestration of the generation pipeline."""

import logging

from landinger.constants.pages import DEFAULT_PAGE_TYPE
from landinger.errors import PageNotFoundError, StorageFailure, ValidationFailure
from landinger.pages.extraction import extract_document
from landinger.pages.generator import PageGenerator
from landinger.pages.naming import normalize_page_name
from landinger.pages.prompts import compose_prompt
from landinger.pages.publisher import Publisher
from landinger.pages.schemas import HealthReport, PageDocument, PageMetadata, PublishResult
from landinger.storage.base import StorageBackendError

logger = logging.getLogger(__name__)


class PageService:
    """Creates, revises, reads and deletes published pages.

    Stateless across requests: the publisher and generator it holds are
    process-wide and never mutated.
    """

    def __init__(self, publisher: Publisher, generator: PageGenerator):
        self.publisher = publisher
        self.generator = generator

    def resolve_key(self, page_name: str) -> str:
        """Validate a caller-supplied page name and return its canonical key.

        Surrounding whitespace is part of the name, so ``"home "`` maps to
        ``home_``; it only matters for the blank check.

        Raises:
            ValidationFailure: If the name is blank.
        """
        if not page_name or not page_name.strip():
            raise ValidationFailure("pageName is required")
        return normalize_page_name(page_name)

    async def generate_page(
        self,
        instructions: str,
        page_name: str,
        sibling_pages: list[str] | None = None,
        page_type: str = DEFAULT_PAGE_TYPE,
    ) -> tuple[PublishResult, str]:
        """Create or revise a page from a natural-language instruction.

        If a page is already published under the normalized name, the model is
        asked to apply only the requested change to it; otherwise a new page
        is created.

        Args:
            instructions: What to build or change.
            page_name: Free-form page name; normalized to the storage key.
            sibling_pages: Other pages of the site to link to.
            page_type: Kind of page when creating.

        Returns:
            Tuple of (publish result, published HTML body).

        Raises:
            ValidationFailure: If instructions or page_name are missing.
            GenerationFailure: If the model call failed.
            StorageFailure: If the page could not be persisted.
        """
        if not instructions or not instructions.strip():
            raise ValidationFailure("instructions is required")
        canonical_key = self.resolve_key(page_name)

        existing = self.publisher.fetch_existing(canonical_key)
        mode = "update" if existing is not None else "create"
        logger.info(f"Generating page {canonical_key} ({mode})")

        prompt = compose_prompt(instructions, existing, sibling_pages, page_type)
        raw_text = await self.generator.generate(prompt)

        extracted = extract_document(raw_text)
        if not extracted.is_well_formed:
            logger.warning(f"Publishing {canonical_key} with incomplete document markers")

        result = self.publisher.publish(
            canonical_key=canonical_key,
            display_title=page_name,
            instruction=instructions.strip(),
            body=extracted.body,
        )
        return result, extracted.body

    def get_page(self, page_name: str) -> tuple[PageDocument, PageMetadata | None]:
        """Fetch a published page and its metadata.

        Raises:
            ValidationFailure: If page_name is invalid.
            PageNotFoundError: If no body is stored under the name.
            StorageFailure: If the backend read failed.
        """
        canonical_key = self.resolve_key(page_name)
        document = self.publisher.get_document(canonical_key)
        if document is None:
            raise PageNotFoundError(canonical_key)
        return document, self.publisher.get_metadata(canonical_key)

    def list_pages(self) -> list[PageMetadata]:
        """Metadata of all published pages, newest first."""
        return self.publisher.list_metadata()

    def delete_page(self, page_name: str) -> str:
        """Delete a page body and metadata.

        Returns:
            The canonical key that was deleted.

        Raises:
            ValidationFailure: If page_name is invalid.
            PageNotFoundError: If neither body nor metadata exist.
            StorageFailure: If deletion was incomplete.
        """
        canonical_key = self.resolve_key(page_name)
        if (
            self.publisher.get_document(canonical_key) is None
            and self.publisher.get_metadata(canonical_key) is None
        ):
            raise PageNotFoundError(canonical_key)
        self.publisher.delete(canonical_key)
        return canonical_key

    def find_orphans(self) -> list[str]:
        """Canonical keys with a stored body but no metadata.

        These are left behind by partially failed publishes; the page is live
        but listings do not show it.
        """
        listed = {meta.canonical_key for meta in self.publisher.list_metadata()}
        return sorted(key for key in self.publisher.list_page_keys() if key not in listed)

    def health(self) -> HealthReport:
        """Check storage reachability and consistency."""
        store = self.publisher.store
        configured = store.name != "memory"

        try:
            store.ping()
        except StorageBackendError as e:
            logger.error(f"Storage backend {store.name} unreachable: {e}")
            return HealthReport(
                status="unavailable",
                backend=store.name,
                storage_configured=configured,
                storage_reachable=False,
                message=f"Storage unreachable: {e}",
            )

        try:
            orphans = self.find_orphans()
        except StorageFailure as e:
            return HealthReport(
                status="unavailable",
                backend=store.name,
                storage_configured=configured,
                storage_reachable=False,
                message=f"{e.message}: {e.details}",
            )

        if orphans:
            return HealthReport(
                status="degraded",
                backend=store.name,
                storage_configured=configured,
                storage_reachable=True,
                orphaned_pages=orphans,
                message=f"{len(orphans)} page(s) have no metadata",
            )

        message = "Storage is healthy"
        if not configured:
            message = "Using in-memory storage; pages are lost on restart"
        return HealthReport(
            status="ok",
            backend=store.name,
            storage_configured=configured,
            storage_reachable=True,
            message=message,
        )
