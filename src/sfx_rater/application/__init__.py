"""DDD application layer."""

from .event_publisher import EventPublisher, NullEventPublisher
from .object_store import ObjectStore
from .rating_service import DiscoverPairs, ExportResponses, FetchAudioPair, SignAudioUrl, SubmissionAck, SubmitResponse
from .submission_ledger import LedgerLayout, SubmissionLedger

__all__ = [
    "EventPublisher",
    "NullEventPublisher",
    "ObjectStore",
    "SubmissionLedger",
    "LedgerLayout",
    "DiscoverPairs",
    "FetchAudioPair",
    "SubmitResponse",
    "SubmissionAck",
    "SignAudioUrl",
    "ExportResponses",
]
