"""Object store interface shared by every storage backend."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


class StorageBackendError(Exception):
    """Raised when the backend itself fails (I/O, network, database)."""

    pass


class ObjectNotFoundError(StorageBackendError):
    """Raised when a key has no stored object."""

    def __init__(self, key: str):
        super().__init__(f"Object not found: {key}")
        self.key = key


class ObjectExistsError(StorageBackendError):
    """Raised when writing to an existing key without allow_overwrite."""

    def __init__(self, key: str):
        super().__init__(f"Object already exists: {key}")
        self.key = key


@dataclass(frozen=True)
class StoredObject:
    """A key in the store and the URL it is published at."""

    key: str
    url: str


@runtime_checkable
class ObjectStore(Protocol):
    """Key/bytes store with explicit overwrite semantics.

    Keys are slash-separated logical paths such as ``pages/home.html``.
    Implementations must never write an object under a different key than
    requested; when ``allow_overwrite`` is False and the key exists they raise
    ObjectExistsError.
    """

    name: str

    def put(
        self,
        key: str,
        data: bytes,
        content_type: str,
        allow_overwrite: bool = False,
    ) -> StoredObject: ...

    def get(self, key: str) -> bytes: ...

    def list(self, prefix: str) -> list[StoredObject]: ...

    def delete(self, keys: list[str]) -> None: ...

    def url_for(self, key: str) -> str: ...

    def ping(self) -> None: ...
