from __future__ import annotations

import threading
from datetime import timedelta

import pytest

from sfx_rater.domain.errors import ObjectNotFound, StorageFailure


class InMemoryObjectStore:
    """Dictionary-backed stand-in for the MinIO adapter."""

    def __init__(self, objects: dict[str, bytes] | None = None) -> None:
        self.objects: dict[str, bytes] = dict(objects or {})
        self.gets: list[str] = []
        self.puts: list[str] = []
        self.fail_listing = False

    def list_keys(self, prefix: str):
        if self.fail_listing:
            raise StorageFailure(f"failed to list '{prefix}': AccessDenied")
        return [key for key in sorted(self.objects) if key.startswith(prefix)]

    def get(self, key: str) -> bytes:
        self.gets.append(key)
        try:
            return self.objects[key]
        except KeyError:
            raise ObjectNotFound(key) from None

    def exists(self, key: str) -> bool:
        return key in self.objects

    def put(self, key: str, payload: bytes, content_type: str = "application/octet-stream") -> None:
        self.puts.append(key)
        self.objects[key] = payload

    def presigned_get_url(self, key: str, expires: timedelta) -> str:
        return f"https://storage.local/bucket/{key}?expires={int(expires.total_seconds())}"


class BarrierStore(InMemoryObjectStore):
    """Holds matching reads or writes until every participant has reached them."""

    def __init__(self, parties: int, *, get_keys=(), put_prefixes=()) -> None:
        super().__init__()
        self.barrier = threading.Barrier(parties, timeout=5)
        self.get_keys = set(get_keys)
        self.put_prefixes = tuple(put_prefixes)

    def get(self, key: str) -> bytes:
        try:
            payload = super().get(key)
        except ObjectNotFound:
            payload = None
        if key in self.get_keys:
            self.barrier.wait()
        if payload is None:
            raise ObjectNotFound(key)
        return payload

    def put(self, key: str, payload: bytes, content_type: str = "application/octet-stream") -> None:
        if self.put_prefixes and key.startswith(self.put_prefixes):
            self.barrier.wait()
        super().put(key, payload, content_type)


class RecordingPublisher:
    def __init__(self) -> None:
        self.events = []

    def publish(self, event) -> None:
        self.events.append(event)


@pytest.fixture
def store() -> InMemoryObjectStore:
    return InMemoryObjectStore(
        {
            "sfx_outputs/sfx_7.mp3": b"sfx-7",
            "music_outputs/music_7.wav": b"music-7",
        }
    )


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()
