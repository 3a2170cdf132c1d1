"""Infrastructure adapters for the submission ledger and submitted index."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any
from uuid import uuid4

from sfx_rater.application.object_store import ObjectStore
from sfx_rater.application.submission_ledger import LedgerLayout, SubmissionLedger
from sfx_rater.domain.errors import ObjectNotFound, StorageFailure
from sfx_rater.domain.models import SubmissionRecord

logger = logging.getLogger(__name__)

RESPONSES_KEY = "responses/all_responses.json"
INDEX_KEY = "responses/index.json"
RECORDS_PREFIX = "responses/records/"
SUBMITTED_PREFIX = "responses/submitted/"

_JSON = "application/json"


def read_json_array(store: ObjectStore, key: str) -> list[Any]:
    """Read a JSON array document; a missing object reads as an empty array."""

    try:
        payload = store.get(key)
    except ObjectNotFound:
        return []

    try:
        document = json.loads(payload)
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise StorageFailure(f"'{key}' is not valid JSON") from error
    if not isinstance(document, list):
        raise StorageFailure(f"'{key}' must hold a JSON array")
    return document


def parse_index(document: list[Any], key: str = INDEX_KEY) -> set[str]:
    if not all(isinstance(item, str) for item in document):
        raise StorageFailure(f"'{key}' must hold an array of strings")
    return set(document)


def parse_record(item: Any, key: str) -> SubmissionRecord:
    if not isinstance(item, dict):
        raise StorageFailure(f"'{key}' holds a record that is not an object")
    try:
        return SubmissionRecord(
            sfx_id=str(item["sfx_id"]),
            music_id=str(item["music_id"]),
            timestamp=float(item["timestamp"]),
        )
    except (KeyError, TypeError, ValueError) as error:
        raise StorageFailure(f"'{key}' holds a malformed record: {item!r}") from error


@dataclass(frozen=True, slots=True)
class SharedArrayLedger(SubmissionLedger):
    """Ledger and index kept as two shared JSON arrays.

    Both writes are read-modify-write without any concurrency check: two
    concurrent submissions can each read the same array and the slower write
    drops the other's entry.
    """

    store: ObjectStore

    def read_submitted_ids(self) -> set[str]:
        return parse_index(read_json_array(self.store, INDEX_KEY))

    def is_submitted(self, combination_id: str) -> bool:
        return combination_id in self.read_submitted_ids()

    def append(self, record: SubmissionRecord) -> None:
        records = read_json_array(self.store, RESPONSES_KEY)
        records.append(record.as_dict())
        self.store.put(RESPONSES_KEY, json.dumps(records, indent=2).encode("utf-8"), content_type=_JSON)

    def mark_submitted(self, combination_id: str) -> None:
        ids = read_json_array(self.store, INDEX_KEY)
        if combination_id in parse_index(ids):
            return
        ids.append(combination_id)
        self.store.put(INDEX_KEY, json.dumps(ids).encode("utf-8"), content_type=_JSON)

    def read_records(self) -> list[SubmissionRecord]:
        return [parse_record(item, RESPONSES_KEY) for item in read_json_array(self.store, RESPONSES_KEY)]


@dataclass(frozen=True, slots=True)
class PerRecordLedger(SubmissionLedger):
    """One object per submission and one marker object per submitted combination.

    Every write is a single PUT to a key no other submission uses, so
    concurrent submissions cannot overwrite each other. Reads also merge the
    legacy shared arrays when they exist.
    """

    store: ObjectStore

    def read_submitted_ids(self) -> set[str]:
        ids = parse_index(read_json_array(self.store, INDEX_KEY))
        for key in self.store.list_keys(SUBMITTED_PREFIX):
            combination_id = _marker_combination_id(key)
            if combination_id:
                ids.add(combination_id)
        return ids

    def is_submitted(self, combination_id: str) -> bool:
        if self.is_marked(combination_id):
            return True
        return combination_id in parse_index(read_json_array(self.store, INDEX_KEY))

    def is_marked(self, combination_id: str) -> bool:
        return self.store.exists(marker_key(combination_id))

    def append(self, record: SubmissionRecord) -> None:
        self.put_record(record_key(record.combination_id, uuid4().hex), record)

    def put_record(self, key: str, record: SubmissionRecord) -> None:
        self.store.put(key, json.dumps(record.as_dict()).encode("utf-8"), content_type=_JSON)

    def mark_submitted(self, combination_id: str) -> None:
        self.store.put(
            marker_key(combination_id),
            json.dumps({"combination_id": combination_id}).encode("utf-8"),
            content_type=_JSON,
        )

    def read_records(self) -> list[SubmissionRecord]:
        records = [parse_record(item, RESPONSES_KEY) for item in read_json_array(self.store, RESPONSES_KEY)]
        for key in sorted(self.store.list_keys(RECORDS_PREFIX)):
            if not key.endswith(".json"):
                continue
            try:
                payload = self.store.get(key)
            except ObjectNotFound:
                logger.warning("Ledger record disappeared while reading", extra={"object_key": key})
                continue
            try:
                item = json.loads(payload)
            except (UnicodeDecodeError, json.JSONDecodeError) as error:
                raise StorageFailure(f"'{key}' is not valid JSON") from error
            records.append(parse_record(item, key))
        return records


def marker_key(combination_id: str) -> str:
    return f"{SUBMITTED_PREFIX}{combination_id}.json"


def record_key(combination_id: str, record_name: str) -> str:
    return f"{RECORDS_PREFIX}{combination_id}/{record_name}.json"


def _marker_combination_id(key: str) -> str | None:
    name = key[len(SUBMITTED_PREFIX):]
    if "/" in name or not name.endswith(".json"):
        return None
    return name[: -len(".json")] or None


def build_ledger(store: ObjectStore, layout: LedgerLayout) -> SubmissionLedger:
    if layout is LedgerLayout.SHARED_ARRAY:
        return SharedArrayLedger(store=store)
    return PerRecordLedger(store=store)
