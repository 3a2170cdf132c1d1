"""Application port for the submission ledger and its submitted index."""

from __future__ import annotations

from enum import Enum
from typing import Protocol

from sfx_rater.domain.models import SubmissionRecord


class LedgerLayout(str, Enum):
    """How submissions are laid out in object storage."""

    PER_RECORD = "per-record"
    SHARED_ARRAY = "shared-array"


class SubmissionLedger(Protocol):
    """Port implemented by infrastructure adapters for recording ratings."""

    def read_submitted_ids(self) -> set[str]:
        """Return every combination id already submitted; empty when nothing was written yet."""

    def is_submitted(self, combination_id: str) -> bool:
        """Return whether ``combination_id`` was already submitted."""

    def append(self, record: SubmissionRecord) -> None:
        """Add ``record`` to the ledger."""

    def mark_submitted(self, combination_id: str) -> None:
        """Add ``combination_id`` to the submitted index."""

    def read_records(self) -> list[SubmissionRecord]:
        """Return every recorded submission."""
