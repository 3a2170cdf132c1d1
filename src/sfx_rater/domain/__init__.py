"""DDD domain layer."""

from .errors import (
    AlreadySubmitted,
    AssetNotFound,
    ClientError,
    InvalidFieldError,
    MissingFieldError,
    ObjectNotFound,
    RaterError,
    StorageFailure,
)
from .events import AudioPairServed, DomainEvent, PairsDiscovered, ResponseSubmitted, SubmissionRejected
from .models import AudioAsset, AudioKind, AudioPair, Pair, SubmissionRecord, combination_id

__all__ = [
    "RaterError",
    "ClientError",
    "MissingFieldError",
    "InvalidFieldError",
    "AlreadySubmitted",
    "ObjectNotFound",
    "StorageFailure",
    "AssetNotFound",
    "DomainEvent",
    "PairsDiscovered",
    "AudioPairServed",
    "ResponseSubmitted",
    "SubmissionRejected",
    "AudioKind",
    "AudioAsset",
    "AudioPair",
    "Pair",
    "SubmissionRecord",
    "combination_id",
]
