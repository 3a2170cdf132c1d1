"""Application port for S3-compatible object storage."""

from __future__ import annotations

from datetime import timedelta
from typing import Iterable, Protocol


class ObjectStore(Protocol):
    """Port implemented by infrastructure adapters for key/value blob storage.

    ``get`` raises :class:`~sfx_rater.domain.errors.ObjectNotFound` for a missing
    key and :class:`~sfx_rater.domain.errors.StorageFailure` for anything else,
    so callers decide per call whether a miss is recoverable.
    """

    def list_keys(self, prefix: str) -> Iterable[str]:
        """Yield every key that starts with ``prefix``."""

    def get(self, key: str) -> bytes:
        """Return the object body for ``key``."""

    def exists(self, key: str) -> bool:
        """Return whether ``key`` exists."""

    def put(self, key: str, payload: bytes, content_type: str = "application/octet-stream") -> None:
        """Create or overwrite ``key``."""

    def presigned_get_url(self, key: str, expires: timedelta) -> str:
        """Return a time-limited direct download URL for ``key``."""
