"""Application services orchestrating rating use-cases."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any
from uuid import uuid4

from sfx_rater.application.event_publisher import EventPublisher, NullEventPublisher
from sfx_rater.application.object_store import ObjectStore
from sfx_rater.application.submission_ledger import SubmissionLedger
from sfx_rater.domain.errors import AlreadySubmitted, AssetNotFound, ClientError, InvalidFieldError, MissingFieldError, ObjectNotFound
from sfx_rater.domain.events import AudioPairServed, PairsDiscovered, ResponseSubmitted, SubmissionRejected
from sfx_rater.domain.models import AudioAsset, AudioKind, AudioPair, Pair, SubmissionRecord, combination_id

logger = logging.getLogger(__name__)

DEFAULT_SIGNED_URL_TTL = timedelta(hours=1)


@dataclass(slots=True)
class DiscoverPairs:
    """Use case listing the pairs that still need a rating."""

    store: ObjectStore
    ledger: SubmissionLedger
    event_publisher: EventPublisher = NullEventPublisher()

    def run(self, correlation_id: str | None = None) -> list[Pair]:
        sfx_ids = self._numeric_ids(AudioKind.SFX)
        music_ids = self._numeric_ids(AudioKind.MUSIC)
        submitted = self.ledger.read_submitted_ids()

        candidates = [Pair.from_numeric_id(numeric_id) for numeric_id in sfx_ids & music_ids]
        pairs = sorted(
            (pair for pair in candidates if pair.combination_id not in submitted),
            key=lambda pair: int(pair.id),
        )

        self.event_publisher.publish(
            PairsDiscovered(
                correlation_id=correlation_id or str(uuid4()),
                payload_summary={
                    "sfx_count": len(sfx_ids),
                    "music_count": len(music_ids),
                    "candidate_count": len(candidates),
                    "available_count": len(pairs),
                },
            )
        )
        return pairs

    def _numeric_ids(self, kind: AudioKind) -> set[str]:
        ids: set[str] = set()
        for key in self.store.list_keys(kind.prefix):
            numeric_id = kind.parse_key(key)
            if numeric_id is not None:
                ids.add(numeric_id)
        return ids


@dataclass(slots=True)
class FetchAudioPair:
    """Use case loading both blobs of a pair that has not been rated yet."""

    store: ObjectStore
    ledger: SubmissionLedger
    event_publisher: EventPublisher = NullEventPublisher()

    def run(self, sfx_id: Any, music_id: Any, correlation_id: str | None = None) -> AudioPair:
        run_correlation_id = correlation_id or str(uuid4())
        sfx_id = AudioKind.SFX.validate_asset_id(sfx_id, field="sfx_id")
        music_id = AudioKind.MUSIC.validate_asset_id(music_id, field="music_id")

        combo_id = combination_id(sfx_id, music_id)
        if self.ledger.is_submitted(combo_id):
            self.event_publisher.publish(
                SubmissionRejected(
                    correlation_id=run_correlation_id,
                    payload_summary={"stage": "fetch", "combination_id": combo_id, "reason": "already_submitted"},
                )
            )
            raise AlreadySubmitted(combo_id)

        pair = AudioPair(
            sfx=self._load(AudioKind.SFX, sfx_id),
            music=self._load(AudioKind.MUSIC, music_id),
        )
        self.event_publisher.publish(
            AudioPairServed(
                correlation_id=run_correlation_id,
                payload_summary={
                    "combination_id": combo_id,
                    "sfx_bytes": len(pair.sfx.raw_bytes),
                    "music_bytes": len(pair.music.raw_bytes),
                },
            )
        )
        return pair

    def _load(self, kind: AudioKind, asset_id: str) -> AudioAsset:
        key = kind.object_key(asset_id)
        try:
            payload = self.store.get(key)
        except ObjectNotFound as error:
            raise AssetNotFound(key) from error
        return AudioAsset(asset_id=asset_id, kind=kind, raw_bytes=payload)


@dataclass(frozen=True, slots=True)
class SubmissionAck:
    """Acknowledgement returned once both ledger writes succeeded."""

    record: SubmissionRecord
    message: str = "Response submitted successfully"


@dataclass(slots=True)
class SubmitResponse:
    """Use case recording a rating and excluding its pair from discovery."""

    ledger: SubmissionLedger
    event_publisher: EventPublisher = NullEventPublisher()

    def run(self, sfx_id: Any, music_id: Any, timestamp: Any, correlation_id: str | None = None) -> SubmissionAck:
        run_correlation_id = correlation_id or str(uuid4())
        try:
            record = SubmissionRecord.from_payload(sfx_id, music_id, timestamp)
        except ClientError as error:
            self.event_publisher.publish(
                SubmissionRejected(
                    correlation_id=run_correlation_id,
                    payload_summary={"stage": "submit", "reason": error.code, "error": str(error)},
                )
            )
            raise

        # Ledger before index: a failure in between leaves the pair discoverable.
        self.ledger.append(record)
        self.ledger.mark_submitted(record.combination_id)

        self.event_publisher.publish(
            ResponseSubmitted(
                correlation_id=run_correlation_id,
                payload_summary={
                    "combination_id": record.combination_id,
                    "timestamp": record.timestamp,
                },
            )
        )
        return SubmissionAck(record=record)


@dataclass(slots=True)
class SignAudioUrl:
    """Use case producing a direct, time-limited download URL for one asset."""

    store: ObjectStore
    ttl: timedelta = DEFAULT_SIGNED_URL_TTL

    def run(self, kind: Any, asset_id: Any) -> str:
        if kind is None or kind == "":
            raise MissingFieldError("type")
        try:
            parsed_kind = AudioKind(str(kind).strip().lower())
        except ValueError as error:
            allowed = ", ".join(member.value for member in AudioKind)
            raise InvalidFieldError("type", f"expected one of: {allowed}") from error

        asset_id = parsed_kind.validate_asset_id(asset_id, field="id")
        key = parsed_kind.object_key(asset_id)
        logger.debug("Signing audio URL", extra={"object_key": key, "ttl_seconds": self.ttl.total_seconds()})
        return self.store.presigned_get_url(key, self.ttl)


@dataclass(slots=True)
class ExportResponses:
    """Use case reading every recorded rating."""

    ledger: SubmissionLedger

    def run(self) -> list[SubmissionRecord]:
        return self.ledger.read_records()
