"""Application service moving legacy shared-array submissions to per-record objects."""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass

from sfx_rater.application.object_store import ObjectStore
from sfx_rater.infrastructure.submission_ledgers import PerRecordLedger, SharedArrayLedger, record_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MigrationSummary:
    records_copied: int
    records_skipped: int
    markers_written: int


@dataclass(slots=True)
class MigrateLedger:
    """Copy legacy records and index entries into the per-record layout.

    Record keys are derived from each record's position and content, so running
    the migration twice writes nothing new. The legacy arrays are left in place.
    """

    store: ObjectStore

    def run(self) -> MigrationSummary:
        legacy = SharedArrayLedger(store=self.store)
        target = PerRecordLedger(store=self.store)

        copied = skipped = 0
        for position, record in enumerate(legacy.read_records()):
            fingerprint = json.dumps([position, record.as_dict()], sort_keys=True).encode("utf-8")
            key = record_key(record.combination_id, f"legacy-{hashlib.sha1(fingerprint).hexdigest()[:16]}")
            if self.store.exists(key):
                skipped += 1
                continue
            target.put_record(key, record)
            copied += 1

        markers = 0
        for combination_id in sorted(legacy.read_submitted_ids()):
            if target.is_marked(combination_id):
                continue
            target.mark_submitted(combination_id)
            markers += 1

        summary = MigrationSummary(records_copied=copied, records_skipped=skipped, markers_written=markers)
        logger.info(
            "Ledger migration finished",
            extra={
                "records_copied": summary.records_copied,
                "records_skipped": summary.records_skipped,
                "markers_written": summary.markers_written,
            },
        )
        return summary
