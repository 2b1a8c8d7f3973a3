"""Publisher: the only writer of page bodies and metadata sidecars."""

import logging
from datetime import datetime, UTC

from pydantic import ValidationError

from landinger.constants.storage import (
    HTML_CONTENT_TYPE,
    HTML_SUFFIX,
    JSON_CONTENT_TYPE,
    METADATA_PREFIX,
    PAGES_PREFIX,
)
from landinger.errors import StorageFailure
from landinger.pages.naming import canonical_key_from_storage_key, metadata_key, page_key
from landinger.pages.schemas import PageDocument, PageMetadata, PublishResult
from landinger.storage.base import ObjectNotFoundError, ObjectStore, StorageBackendError

logger = logging.getLogger(__name__)


class Publisher:
    """Reads and writes page documents and their metadata in an ObjectStore.

    Each page is two objects: ``pages/<key>.html`` and
    ``metadata/<key>.json``. The body is always written first, so a failed
    metadata write leaves a live page that listings do not show; that case is
    reported as a partial StorageFailure.
    """

    def __init__(self, store: ObjectStore, public_base_url: str | None = None) -> None:
        """Initialize the publisher.

        Args:
            store: Storage backend.
            public_base_url: Prefix for public page URLs (``<base>/<key>``).
                When None the backend's object URL is used.
        """
        self.store = store
        self.public_base_url = public_base_url.rstrip("/") if public_base_url is not None else None

    def public_url_for(self, canonical_key: str) -> str:
        """Public URL a page is served at."""
        if self.public_base_url is not None:
            return f"{self.public_base_url}/{canonical_key}"
        return self.store.url_for(page_key(canonical_key))

    def fetch_existing(self, canonical_key: str) -> PageDocument | None:
        """Fetch the currently published document, if any.

        Any failure, not just not-found, is treated as absence so the caller
        falls back to creating the page.

        Returns:
            The document, or None if it is absent or could not be read.
        """
        try:
            data = self.store.get(page_key(canonical_key))
        except ObjectNotFoundError:
            return None
        except StorageBackendError as e:
            logger.warning(f"Could not read existing page {canonical_key}, treating as new: {e}")
            return None
        return PageDocument(canonical_key=canonical_key, body=data.decode("utf-8", errors="replace"))

    def get_document(self, canonical_key: str) -> PageDocument | None:
        """Read a published document for display.

        Unlike fetch_existing(), backend failures are raised.

        Raises:
            StorageFailure: If the backend read fails.
        """
        try:
            data = self.store.get(page_key(canonical_key))
        except ObjectNotFoundError:
            return None
        except StorageBackendError as e:
            raise StorageFailure(f"Failed to read page {canonical_key}", details=str(e)) from e
        return PageDocument(canonical_key=canonical_key, body=data.decode("utf-8", errors="replace"))

    def get_metadata(self, canonical_key: str) -> PageMetadata | None:
        """Read a page's metadata sidecar.

        Returns:
            The metadata, or None if absent or unreadable.

        Raises:
            StorageFailure: If the backend read fails.
        """
        try:
            data = self.store.get(metadata_key(canonical_key))
        except ObjectNotFoundError:
            return None
        except StorageBackendError as e:
            raise StorageFailure(
                f"Failed to read metadata for {canonical_key}", details=str(e)
            ) from e
        try:
            return PageMetadata.model_validate_json(data)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed metadata for {canonical_key}: {e}")
            return None

    def publish(
        self,
        canonical_key: str,
        display_title: str,
        instruction: str,
        body: str,
    ) -> PublishResult:
        """Write a page body and its metadata, replacing any previous version.

        ``created_at`` is carried over from existing metadata; a page with no
        metadata is treated as new. ``updated_at`` is always set to now.

        Raises:
            StorageFailure: partial=False if the prior metadata could not be
                read or the body write failed, partial=True if the body was
                written but the metadata was not.
        """
        try:
            prior = self.get_metadata(canonical_key)
        except StorageFailure as e:
            # createdAt cannot be carried over, so nothing is written
            logger.error(f"Could not read prior metadata for {canonical_key}: {e.details}")
            raise StorageFailure(
                f"Failed to read existing metadata for {canonical_key}",
                details=e.details,
                partial=False,
                canonical_key=canonical_key,
            ) from e

        try:
            stored = self.store.put(
                page_key(canonical_key),
                body.encode("utf-8"),
                content_type=HTML_CONTENT_TYPE,
                allow_overwrite=True,
            )
        except StorageBackendError as e:
            logger.error(f"Failed to write page {canonical_key}: {e}")
            raise StorageFailure(
                f"Failed to save page {canonical_key}",
                details=str(e),
                partial=False,
                canonical_key=canonical_key,
            ) from e

        now = datetime.now(UTC)
        public_url = self.public_url_for(canonical_key)
        created_at = now
        if prior is not None:
            # Records written without createdAt fall back to their first known time
            created_at = prior.created_at or prior.updated_at or now

        metadata = PageMetadata(
            canonical_key=canonical_key,
            display_title=display_title,
            last_instruction=instruction,
            created_at=created_at,
            updated_at=now,
            public_url=public_url,
            file_name=f"{canonical_key}{HTML_SUFFIX}",
            storage_url=stored.url,
        )

        try:
            self.store.put(
                metadata_key(canonical_key),
                metadata.to_json().encode("utf-8"),
                content_type=JSON_CONTENT_TYPE,
                allow_overwrite=True,
            )
        except StorageBackendError as e:
            logger.error(
                f"Page {canonical_key} is live but its metadata write failed; "
                f"it will be missing from listings: {e}"
            )
            raise StorageFailure(
                f"Page {canonical_key} was saved but its metadata was not",
                details=str(e),
                partial=True,
                canonical_key=canonical_key,
                public_url=public_url,
            ) from e

        created = prior is None
        logger.info(f"{'Created' if created else 'Updated'} page {canonical_key} at {public_url}")
        return PublishResult(
            canonical_key=canonical_key,
            public_url=public_url,
            created=created,
            metadata=metadata,
        )

    def list_metadata(self) -> list[PageMetadata]:
        """List metadata for every published page, newest first by created_at.

        Unreadable or malformed records are skipped with a warning.

        Raises:
            StorageFailure: If the backend listing fails.
        """
        try:
            objects = self.store.list(METADATA_PREFIX)
        except StorageBackendError as e:
            raise StorageFailure("Failed to list pages", details=str(e)) from e

        pages = []
        for obj in objects:
            key = canonical_key_from_storage_key(obj.key)
            if key is None:
                continue
            try:
                meta = self.get_metadata(key)
            except StorageFailure as e:
                logger.warning(f"Skipping metadata {obj.key}: {e.details}")
                continue
            if meta is not None:
                pages.append(meta)

        epoch = datetime.min.replace(tzinfo=UTC)

        def sort_key(meta: PageMetadata) -> datetime:
            stamp = meta.created_at or meta.updated_at or epoch
            # Legacy records may hold naive timestamps
            return stamp if stamp.tzinfo else stamp.replace(tzinfo=UTC)

        return sorted(pages, key=sort_key, reverse=True)

    def list_page_keys(self) -> list[str]:
        """Canonical keys of every stored page body.

        Raises:
            StorageFailure: If the backend listing fails.
        """
        try:
            objects = self.store.list(PAGES_PREFIX)
        except StorageBackendError as e:
            raise StorageFailure("Failed to list pages", details=str(e)) from e
        keys = []
        for obj in objects:
            key = canonical_key_from_storage_key(obj.key)
            if key:
                keys.append(key)
        return keys

    def delete(self, canonical_key: str) -> None:
        """Delete a page body and its metadata.

        Both objects are removed in one backend call; missing objects are not
        an error.

        Raises:
            StorageFailure: partial=True if the backend reports failure but one
                of the two objects is gone, partial=False otherwise.
        """
        keys = [page_key(canonical_key), metadata_key(canonical_key)]
        try:
            self.store.delete(keys)
        except StorageBackendError as e:
            remaining = [k for k in keys if self._exists(k)]
            partial = len(remaining) == 1
            logger.error(f"Deletion of {canonical_key} incomplete, remaining: {remaining}: {e}")
            raise StorageFailure(
                f"Failed to delete page {canonical_key}",
                details=str(e),
                partial=partial,
                canonical_key=canonical_key,
            ) from e
        logger.info(f"Deleted page {canonical_key}")

    def _exists(self, key: str) -> bool:
        try:
            self.store.get(key)
            return True
        except ObjectNotFoundError:
            return False
        except StorageBackendError:
            # Unknown, assume still present
            return True
