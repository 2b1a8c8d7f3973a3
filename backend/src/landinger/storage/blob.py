"""ObjectStore implementation backed by an S3-compatible blob bucket."""

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from landinger.constants.storage import NO_CACHE_CONTROL
from landinger.storage.base import (
    ObjectExistsError,
    ObjectNotFoundError,
    StorageBackendError,
    StoredObject,
)

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = frozenset({"NoSuchKey", "404", "NotFound"})
_EXISTS_CODES = frozenset({"PreconditionFailed", "412", "ConditionalRequestConflict"})

# S3 caps delete_objects at 1000 keys per request
_DELETE_BATCH = 1000


def _error_code(e: ClientError) -> str:
    return str(e.response.get("Error", {}).get("Code", ""))


class BlobStore:
    """S3-compatible bucket that conforms to the ObjectStore protocol.

    Objects are written with no-cache headers so a republished page is served
    fresh on the next request. Public URLs come from ``public_base_url`` when
    set (a CDN or custom domain), otherwise from the bucket's virtual-host URL.
    """

    name = "blob"

    def __init__(
        self,
        bucket: str,
        region: str | None = None,
        endpoint_url: str | None = None,
        public_base_url: str | None = None,
        client: Any = None,
        **boto_kwargs: Any,
    ) -> None:
        self._bucket = bucket
        self._region = region
        if client is None:
            client = boto3.client(
                "s3", region_name=region, endpoint_url=endpoint_url, **boto_kwargs
            )
        self._client = client
        if public_base_url:
            self._public_base_url = public_base_url.rstrip("/")
        elif endpoint_url:
            self._public_base_url = f"{endpoint_url.rstrip('/')}/{bucket}"
        elif region:
            self._public_base_url = f"https://{bucket}.s3.{region}.amazonaws.com"
        else:
            self._public_base_url = f"https://{bucket}.s3.amazonaws.com"

    def url_for(self, key: str) -> str:
        return f"{self._public_base_url}/{key}"

    def put(
        self,
        key: str,
        data: bytes,
        content_type: str,
        allow_overwrite: bool = False,
    ) -> StoredObject:
        kwargs: dict[str, Any] = {
            "Bucket": self._bucket,
            "Key": key,
            "Body": data,
            "ContentType": content_type,
            "CacheControl": NO_CACHE_CONTROL,
        }
        if not allow_overwrite:
            # Conditional write: S3 rejects it with 412 if the key exists
            kwargs["IfNoneMatch"] = "*"

        try:
            self._client.put_object(**kwargs)
        except ClientError as e:
            if _error_code(e) in _EXISTS_CODES:
                raise ObjectExistsError(key) from e
            raise StorageBackendError(f"Failed to write {key}: {e}") from e
        except BotoCoreError as e:
            raise StorageBackendError(f"Failed to write {key}: {e}") from e

        return StoredObject(key=key, url=self.url_for(key))

    def get(self, key: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
            return response["Body"].read()
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                raise ObjectNotFoundError(key) from e
            raise StorageBackendError(f"Failed to read {key}: {e}") from e
        except BotoCoreError as e:
            raise StorageBackendError(f"Failed to read {key}: {e}") from e

    def list(self, prefix: str) -> list[StoredObject]:
        objects = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
                for item in page.get("Contents", []):
                    objects.append(StoredObject(key=item["Key"], url=self.url_for(item["Key"])))
        except (ClientError, BotoCoreError) as e:
            raise StorageBackendError(f"Failed to list {prefix}: {e}") from e
        return objects

    def delete(self, keys: list[str]) -> None:
        for start in range(0, len(keys), _DELETE_BATCH):
            batch = keys[start : start + _DELETE_BATCH]
            try:
                response = self._client.delete_objects(
                    Bucket=self._bucket,
                    Delete={"Objects": [{"Key": k} for k in batch], "Quiet": True},
                )
            except (ClientError, BotoCoreError) as e:
                raise StorageBackendError(f"Failed to delete {', '.join(batch)}: {e}") from e

            errors = response.get("Errors", [])
            if errors:
                failed = ", ".join(err.get("Key", "?") for err in errors)
                raise StorageBackendError(f"Failed to delete {failed}")

    def ping(self) -> None:
        try:
            self._client.head_bucket(Bucket=self._bucket)
        except (ClientError, BotoCoreError) as e:
            raise StorageBackendError(f"Bucket {self._bucket} unreachable: {e}") from e
