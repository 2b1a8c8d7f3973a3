"""Build the configured ObjectStore once at startup."""

import logging

from landinger.config import Config, ConfigError
from landinger.db.connection import Database
from landinger.db.migrations import run_migrations
from landinger.storage.base import ObjectStore
from landinger.storage.blob import BlobStore
from landinger.storage.database import DatabaseStore
from landinger.storage.filesystem import FilesystemStore
from landinger.storage.memory import MemoryStore

logger = logging.getLogger(__name__)


def create_store(settings: Config) -> ObjectStore:
    """Create the storage backend named by settings.storage.backend.

    Args:
        settings: Application settings.

    Returns:
        The ObjectStore every request will use.

    Raises:
        ConfigError: If the selected backend is missing required settings.
    """
    backend = settings.storage.backend

    if backend == "blob":
        if not settings.blob_bucket:
            raise ConfigError("STORAGE_BACKEND=blob requires BLOB_BUCKET")
        store: ObjectStore = BlobStore(
            bucket=settings.blob_bucket,
            region=settings.blob_region,
            endpoint_url=settings.blob_endpoint_url,
            public_base_url=settings.blob_public_base_url,
        )
    elif backend == "filesystem":
        store = FilesystemStore(
            settings.pages_path,
            git_commit=settings.storage.git_commit,
            git_push=settings.storage.git_push,
        )
    elif backend == "database":
        db = Database(settings.database_path)
        run_migrations(db)
        store = DatabaseStore(db)
    elif backend == "memory":
        logger.warning("Using in-memory page storage; pages are lost on restart")
        store = MemoryStore()
    else:
        raise ConfigError(f"Unknown storage backend: {backend!r}")

    logger.info(f"Storage backend: {store.name}")
    return store
