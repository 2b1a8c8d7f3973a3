"""In-memory object store.

Used when no persistent backend is configured. Contents live as long as the
process does and are lost on restart.
"""

from __future__ import annotations

import threading

from landinger.storage.base import ObjectExistsError, ObjectNotFoundError, StoredObject


class MemoryStore:
    """Dict-backed ObjectStore."""

    name = "memory"

    def __init__(self, public_base_url: str = "memory://") -> None:
        self._public_base_url = public_base_url.rstrip("/")
        self._objects: dict[str, tuple[bytes, str]] = {}
        self._lock = threading.Lock()

    def url_for(self, key: str) -> str:
        return f"{self._public_base_url}/{key}"

    def put(
        self,
        key: str,
        data: bytes,
        content_type: str,
        allow_overwrite: bool = False,
    ) -> StoredObject:
        with self._lock:
            if not allow_overwrite and key in self._objects:
                raise ObjectExistsError(key)
            self._objects[key] = (bytes(data), content_type)
        return StoredObject(key=key, url=self.url_for(key))

    def get(self, key: str) -> bytes:
        with self._lock:
            try:
                return self._objects[key][0]
            except KeyError:
                raise ObjectNotFoundError(key) from None

    def content_type(self, key: str) -> str:
        """Content type recorded for a key."""
        with self._lock:
            try:
                return self._objects[key][1]
            except KeyError:
                raise ObjectNotFoundError(key) from None

    def list(self, prefix: str) -> list[StoredObject]:
        with self._lock:
            keys = sorted(k for k in self._objects if k.startswith(prefix))
        return [StoredObject(key=k, url=self.url_for(k)) for k in keys]

    def delete(self, keys: list[str]) -> None:
        with self._lock:
            for key in keys:
                self._objects.pop(key, None)

    def ping(self) -> None:
        return None
