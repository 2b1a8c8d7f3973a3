"""Storage backends for published pages."""

from landinger.storage.base import (
    ObjectExistsError,
    ObjectNotFoundError,
    ObjectStore,
    StorageBackendError,
    StoredObject,
)
from landinger.storage.blob import BlobStore
from landinger.storage.database import DatabaseStore
from landinger.storage.factory import create_store
from landinger.storage.filesystem import FilesystemStore
from landinger.storage.memory import MemoryStore

__all__ = [
    "BlobStore",
    "DatabaseStore",
    "FilesystemStore",
    "MemoryStore",
    "ObjectExistsError",
    "ObjectNotFoundError",
    "ObjectStore",
    "StorageBackendError",
    "StoredObject",
    "create_store",
]
