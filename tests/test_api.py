from __future__ import annotations

import base64
import json

import pytest
from fastapi.testclient import TestClient

from conftest import InMemoryObjectStore, RecordingPublisher
from sfx_rater.api import app
from sfx_rater.application.submission_ledger import LedgerLayout
from sfx_rater.domain.errors import StorageFailure
from sfx_rater.infrastructure.submission_ledgers import INDEX_KEY, RESPONSES_KEY
from sfx_rater.interfaces.services import build_services, get_services
from sfx_rater.storage import StorageConfig, StorageConfigError


client = TestClient(app)


def _config(layout: LedgerLayout = LedgerLayout.SHARED_ARRAY) -> StorageConfig:
    return StorageConfig(
        endpoint="minio:9000",
        access_key="",
        secret_key="",
        bucket="unit-test-bucket",
        secure=False,
        region=None,
        ledger_layout=layout,
    )


@pytest.fixture
def use_store(store):
    def install(target: InMemoryObjectStore = store, layout: LedgerLayout = LedgerLayout.SHARED_ARRAY):
        services = build_services(_config(layout), target, event_publisher=RecordingPublisher())
        app.dependency_overrides[get_services] = lambda: services
        return target

    yield install
    app.dependency_overrides.clear()


def test_health() -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_available_pairs_lists_unrated_pairs(use_store) -> None:
    use_store()

    response = client.get("/available-pairs")

    assert response.status_code == 200
    assert response.json() == {"pairs": [{"id": "7", "sfx_id": "sfx_7", "music_id": "music_7"}], "total": 1}


def test_available_pairs_returns_500_when_listing_fails(use_store) -> None:
    store = use_store()
    store.fail_listing = True

    response = client.get("/available-pairs")

    assert response.status_code == 500
    assert response.json()["detail"] == {"code": "storage_failure", "message": "Failed to fetch available pairs"}


def test_audio_returns_base64_payloads(use_store) -> None:
    use_store()

    response = client.get("/audio", params={"sfx_id": "sfx_7", "music_id": "music_7"})

    assert response.status_code == 200
    payload = response.json()
    assert base64.b64decode(payload["sfx"]) == b"sfx-7"
    assert base64.b64decode(payload["music"]) == b"music-7"


@pytest.mark.parametrize("params", [{}, {"sfx_id": "sfx_7"}, {"music_id": "music_7"}, {"sfx_id": "", "music_id": "music_7"}])
def test_audio_returns_400_when_params_missing(use_store, params) -> None:
    use_store()

    response = client.get("/audio", params=params)

    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "Missing sfx_id or music_id"


def test_audio_returns_400_for_malformed_ids(use_store) -> None:
    use_store()

    response = client.get("/audio", params={"sfx_id": "../secret", "music_id": "music_7"})

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "invalid_field"


def test_audio_returns_403_when_already_submitted(use_store, store) -> None:
    store.objects[INDEX_KEY] = b'["sfx_7_music_7"]'
    use_store()

    response = client.get("/audio", params={"sfx_id": "sfx_7", "music_id": "music_7"})

    assert response.status_code == 403
    assert response.json()["detail"] == {"code": "already_submitted", "message": "Already submitted"}
    assert "sfx_outputs/sfx_7.mp3" not in store.gets


def test_audio_returns_500_when_blob_missing(use_store) -> None:
    use_store(InMemoryObjectStore({"sfx_outputs/sfx_7.mp3": b"sfx-7"}))

    response = client.get("/audio", params={"sfx_id": "sfx_7", "music_id": "music_7"})

    assert response.status_code == 500
    assert response.json()["detail"]["message"] == "Failed to fetch audio"


@pytest.mark.parametrize("layout", [LedgerLayout.SHARED_ARRAY, LedgerLayout.PER_RECORD])
def test_submit_then_discovery_excludes_pair(use_store, store, layout) -> None:
    use_store(store, layout)

    response = client.post("/submit-response", json={"sfx_id": "sfx_7", "music_id": "music_7", "timestamp": 12.34})

    assert response.status_code == 200
    assert response.json() == {"message": "Response submitted successfully"}
    assert client.get("/available-pairs").json() == {"pairs": [], "total": 0}
    assert client.get("/audio", params={"sfx_id": "sfx_7", "music_id": "music_7"}).status_code == 403


def test_submit_writes_shared_array_documents(use_store, store) -> None:
    use_store()

    client.post("/submit-response", json={"sfx_id": "sfx_7", "music_id": "music_7", "timestamp": 12.34})

    assert json.loads(store.objects[INDEX_KEY]) == ["sfx_7_music_7"]
    assert json.loads(store.objects[RESPONSES_KEY]) == [{"sfx_id": "sfx_7", "music_id": "music_7", "timestamp": 12.34}]


@pytest.mark.parametrize(
    "body",
    [
        {"music_id": "music_7", "timestamp": 1.0},
        {"sfx_id": "sfx_7", "timestamp": 1.0},
        {"sfx_id": "sfx_7", "music_id": "music_7"},
        {"sfx_id": "", "music_id": "music_7", "timestamp": 1.0},
    ],
)
def test_submit_returns_400_on_missing_fields_without_writes(use_store, store, body) -> None:
    use_store()

    response = client.post("/submit-response", json=body)

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "missing_field"
    assert store.puts == []


def test_submit_accepts_zero_timestamp(use_store) -> None:
    use_store()

    response = client.post("/submit-response", json={"sfx_id": "sfx_7", "music_id": "music_7", "timestamp": 0})

    assert response.status_code == 200


@pytest.mark.parametrize("timestamp", [True, "12.34", [1.0], -1, {"seconds": 3}])
def test_submit_rejects_non_numeric_timestamp_without_writes(use_store, store, timestamp) -> None:
    use_store()

    response = client.post(
        "/submit-response",
        json={"sfx_id": "sfx_7", "music_id": "music_7", "timestamp": timestamp},
    )

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "invalid_field"
    assert store.puts == []


def test_submit_returns_400_on_malformed_body(use_store, store) -> None:
    use_store()

    response = client.post(
        "/submit-response",
        content=b"not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "invalid_request"
    assert store.puts == []


def test_submit_returns_500_on_storage_failure(use_store, store, monkeypatch) -> None:
    def failing_put(key, payload, content_type="application/octet-stream"):
        raise StorageFailure("write failed")

    use_store()
    monkeypatch.setattr(store, "put", failing_put)

    response = client.post("/submit-response", json={"sfx_id": "sfx_7", "music_id": "music_7", "timestamp": 1.0})

    assert response.status_code == 500
    assert response.json()["detail"]["message"] == "Failed to submit response"


def test_get_audio_url_returns_signed_url(use_store) -> None:
    use_store()

    response = client.get("/get-audio-url", params={"type": "music", "id": "music_7"})

    assert response.status_code == 200
    assert response.json() == {"url": "https://storage.local/bucket/music_outputs/music_7.wav?expires=3600"}


@pytest.mark.parametrize(
    ("params", "code"),
    [
        ({"type": "sfx"}, "missing_field"),
        ({"id": "sfx_7"}, "missing_field"),
        ({"type": "video", "id": "sfx_7"}, "invalid_field"),
    ],
)
def test_get_audio_url_rejects_bad_parameters(use_store, params, code) -> None:
    use_store()

    response = client.get("/get-audio-url", params=params)

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == code


def test_correlation_id_is_echoed_or_generated(use_store) -> None:
    use_store()

    echoed = client.get("/available-pairs", headers={"X-Correlation-Id": "corr-123"})
    generated = client.get("/available-pairs")

    assert echoed.headers["x-correlation-id"] == "corr-123"
    assert generated.headers["x-correlation-id"]


def test_cors_preflight_is_allowed() -> None:
    response = client.options(
        "/submit-response",
        headers={"Origin": "https://rater.example", "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_invalid_storage_configuration_returns_structured_500() -> None:
    def misconfigured():
        raise StorageConfigError("SFX_RATER_SIGNED_URL_TTL_SECONDS must be an integer (got 'soon')")

    app.dependency_overrides[get_services] = misconfigured
    try:
        response = client.get("/available-pairs")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"detail": {"code": "configuration_error", "message": "Service is misconfigured"}}
    assert response.headers["X-Correlation-Id"]
