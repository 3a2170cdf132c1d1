"""S3-compatible object storage configuration backed by MinIO client."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import TYPE_CHECKING

from sfx_rater.application.submission_ledger import LedgerLayout

logger = logging.getLogger(__name__)


if TYPE_CHECKING:
    from minio import Minio


_TRUTHY = {"1", "true", "yes", "on"}


class StorageConfigError(ValueError):
    """Raised when storage settings in the environment cannot be parsed."""

    code = "configuration_error"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Runtime configuration for S3-compatible object storage."""

    endpoint: str
    access_key: str
    secret_key: str
    bucket: str
    secure: bool
    region: str | None
    ledger_layout: LedgerLayout = LedgerLayout.PER_RECORD
    signed_url_ttl: timedelta = timedelta(hours=1)


@lru_cache(maxsize=1)
def load_storage_config() -> StorageConfig:
    """Load storage configuration from environment."""

    return StorageConfig(
        endpoint=os.getenv("SFX_RATER_S3_ENDPOINT", "s3.us-east-2.amazonaws.com"),
        access_key=os.getenv("SFX_RATER_S3_ACCESS_KEY", ""),
        secret_key=os.getenv("SFX_RATER_S3_SECRET_KEY", ""),
        bucket=os.getenv("SFX_RATER_S3_BUCKET", "sfx-rater"),
        secure=os.getenv("SFX_RATER_S3_SECURE", "true").lower() in _TRUTHY,
        region=os.getenv("SFX_RATER_S3_REGION", "us-east-2") or None,
        ledger_layout=_ledger_layout(os.getenv("SFX_RATER_LEDGER_LAYOUT", LedgerLayout.PER_RECORD.value)),
        signed_url_ttl=_signed_url_ttl(os.getenv("SFX_RATER_SIGNED_URL_TTL_SECONDS", "3600")),
    )


def _ledger_layout(raw: str) -> LedgerLayout:
    try:
        return LedgerLayout(raw.strip().lower())
    except ValueError as error:
        allowed = ", ".join(layout.value for layout in LedgerLayout)
        raise StorageConfigError(f"SFX_RATER_LEDGER_LAYOUT must be one of: {allowed} (got {raw!r})") from error


def _signed_url_ttl(raw: str) -> timedelta:
    try:
        seconds = int(raw)
    except ValueError as error:
        raise StorageConfigError(f"SFX_RATER_SIGNED_URL_TTL_SECONDS must be an integer (got {raw!r})") from error
    if seconds <= 0:
        raise StorageConfigError(f"SFX_RATER_SIGNED_URL_TTL_SECONDS must be positive (got {seconds})")
    return timedelta(seconds=seconds)


def load_cors_origins() -> list[str]:
    raw = os.getenv("SFX_RATER_CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def build_storage_client(config: StorageConfig) -> Minio:
    """Build a MinIO client for ``config``."""

    from minio import Minio

    logger.debug(
        "Building object storage client",
        extra={"endpoint": config.endpoint, "bucket": config.bucket, "secure": config.secure},
    )
    return Minio(
        endpoint=config.endpoint,
        access_key=config.access_key or None,
        secret_key=config.secret_key or None,
        secure=config.secure,
        region=config.region,
    )


@lru_cache(maxsize=1)
def get_storage_client() -> Minio:
    """Build and cache a MinIO client for the environment configuration."""

    return build_storage_client(load_storage_config())
