"""Domain event contracts for rating workflows."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True, slots=True)
class DomainEvent:
    """Base domain event emitted by application services."""

    correlation_id: str
    payload_summary: dict[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))


@dataclass(frozen=True, slots=True)
class PairsDiscovered(DomainEvent):
    """Eligible pairs were computed from the current storage listing."""


@dataclass(frozen=True, slots=True)
class AudioPairServed(DomainEvent):
    """Both blobs of a pair were fetched for playback."""


@dataclass(frozen=True, slots=True)
class ResponseSubmitted(DomainEvent):
    """A rating was appended to the ledger and indexed."""


@dataclass(frozen=True, slots=True)
class SubmissionRejected(DomainEvent):
    """A submission or fetch was refused before touching storage."""
