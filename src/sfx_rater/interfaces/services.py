"""Service wiring shared by the API and CLI interfaces."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from sfx_rater.application.event_publisher import EventPublisher
from sfx_rater.application.ledger_migration import MigrateLedger
from sfx_rater.application.object_store import ObjectStore
from sfx_rater.application.rating_service import DiscoverPairs, ExportResponses, FetchAudioPair, SignAudioUrl, SubmitResponse
from sfx_rater.infrastructure.logging_event_publisher import LoggingEventPublisher
from sfx_rater.infrastructure.minio_object_store import MinioObjectStore
from sfx_rater.infrastructure.submission_ledgers import build_ledger
from sfx_rater.storage import StorageConfig, get_storage_client, load_storage_config

_event_publisher = LoggingEventPublisher()


@dataclass(frozen=True, slots=True)
class RaterServices:
    """Use cases bound to one object store and ledger layout."""

    discover_pairs: DiscoverPairs
    fetch_audio_pair: FetchAudioPair
    submit_response: SubmitResponse
    sign_audio_url: SignAudioUrl
    export_responses: ExportResponses
    migrate_ledger: MigrateLedger


def build_services(
    config: StorageConfig,
    store: ObjectStore,
    event_publisher: EventPublisher = _event_publisher,
) -> RaterServices:
    ledger = build_ledger(store, config.ledger_layout)
    return RaterServices(
        discover_pairs=DiscoverPairs(store=store, ledger=ledger, event_publisher=event_publisher),
        fetch_audio_pair=FetchAudioPair(store=store, ledger=ledger, event_publisher=event_publisher),
        submit_response=SubmitResponse(ledger=ledger, event_publisher=event_publisher),
        sign_audio_url=SignAudioUrl(store=store, ttl=config.signed_url_ttl),
        export_responses=ExportResponses(ledger=ledger),
        migrate_ledger=MigrateLedger(store=store),
    )


@lru_cache(maxsize=1)
def get_services() -> RaterServices:
    """Build and cache services for the environment configuration."""

    config = load_storage_config()
    return build_services(config, MinioObjectStore(client=get_storage_client(), bucket=config.bucket))
