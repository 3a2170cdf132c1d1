"""Public package exports for SFX Rater with lazy imports."""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "AudioKind",
    "Pair",
    "SubmissionRecord",
    "DiscoverPairs",
    "FetchAudioPair",
    "SubmitResponse",
    "SignAudioUrl",
    "StorageConfig",
    "load_storage_config",
]

_EXPORT_MODULES: dict[str, str] = {
    "AudioKind": "sfx_rater.domain.models",
    "Pair": "sfx_rater.domain.models",
    "SubmissionRecord": "sfx_rater.domain.models",
    "DiscoverPairs": "sfx_rater.application.rating_service",
    "FetchAudioPair": "sfx_rater.application.rating_service",
    "SubmitResponse": "sfx_rater.application.rating_service",
    "SignAudioUrl": "sfx_rater.application.rating_service",
    "StorageConfig": "sfx_rater.storage",
    "load_storage_config": "sfx_rater.storage",
}


def __getattr__(name: str) -> Any:
    if name not in _EXPORT_MODULES:
        raise AttributeError(f"module 'sfx_rater' has no attribute {name!r}")

    module = import_module(_EXPORT_MODULES[name])
    value = getattr(module, name)
    globals()[name] = value
    return value
