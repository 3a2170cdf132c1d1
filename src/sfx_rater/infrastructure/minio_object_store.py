"""MinIO storage adapter exposed as infrastructure."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from io import BytesIO
from typing import Any, Iterator

from minio.error import S3Error

from sfx_rater.application.object_store import ObjectStore
from sfx_rater.domain.errors import ObjectNotFound, StorageFailure

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"NoSuchKey", "NoSuchObject"}


@dataclass(frozen=True, slots=True)
class MinioObjectStore(ObjectStore):
    """Adapter reading and writing one bucket through a MinIO client."""

    client: Any
    bucket: str

    def list_keys(self, prefix: str) -> Iterator[str]:
        try:
            objects = list(self.client.list_objects(bucket_name=self.bucket, prefix=prefix, recursive=True))
        except S3Error as error:
            raise StorageFailure(f"failed to list '{prefix}': {error.code}") from error
        except Exception as error:  # noqa: BLE001
            raise StorageFailure(f"failed to list '{prefix}': {error}") from error

        for item in objects:
            if not item.is_dir:
                yield item.object_name

    def get(self, key: str) -> bytes:
        response = None
        try:
            response = self.client.get_object(bucket_name=self.bucket, object_name=key)
            return response.read()
        except S3Error as error:
            if error.code in _NOT_FOUND_CODES:
                raise ObjectNotFound(key) from error
            raise StorageFailure(f"failed to read '{key}': {error.code}") from error
        except Exception as error:  # noqa: BLE001
            raise StorageFailure(f"failed to read '{key}': {error}") from error
        finally:
            if response is not None:
                response.close()
                response.release_conn()

    def exists(self, key: str) -> bool:
        try:
            self.client.stat_object(bucket_name=self.bucket, object_name=key)
        except S3Error as error:
            if error.code in _NOT_FOUND_CODES:
                return False
            raise StorageFailure(f"failed to stat '{key}': {error.code}") from error
        except Exception as error:  # noqa: BLE001
            raise StorageFailure(f"failed to stat '{key}': {error}") from error
        return True

    def put(self, key: str, payload: bytes, content_type: str = "application/octet-stream") -> None:
        try:
            self.client.put_object(
                bucket_name=self.bucket,
                object_name=key,
                data=BytesIO(payload),
                length=len(payload),
                content_type=content_type,
            )
        except Exception as error:  # noqa: BLE001
            raise StorageFailure(f"failed to write '{key}': {error}") from error
        logger.debug("Stored object", extra={"object_key": key, "payload_size": len(payload)})

    def presigned_get_url(self, key: str, expires: timedelta) -> str:
        try:
            return self.client.presigned_get_object(bucket_name=self.bucket, object_name=key, expires=expires)
        except Exception as error:  # noqa: BLE001
            raise StorageFailure(f"failed to sign '{key}': {error}") from error
