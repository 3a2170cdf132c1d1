import pytest

from sfx_rater.domain.errors import InvalidFieldError, MissingFieldError
from sfx_rater.domain.models import AudioKind, Pair, SubmissionRecord, combination_id


@pytest.mark.parametrize(
    ("kind", "key", "expected"),
    [
        (AudioKind.SFX, "sfx_outputs/sfx_7.mp3", "7"),
        (AudioKind.SFX, "sfx_outputs/sfx_001.mp3", "001"),
        (AudioKind.MUSIC, "music_outputs/music_12.wav", "12"),
        (AudioKind.SFX, "sfx_outputs/sfx_7.wav", None),
        (AudioKind.SFX, "sfx_outputs/old/sfx_7.mp3", None),
        (AudioKind.MUSIC, "music_outputs/music_x.wav", None),
        (AudioKind.MUSIC, "sfx_outputs/music_3.wav", None),
    ],
)
def test_parse_key_extracts_numeric_id_for_matching_keys_only(kind, key, expected) -> None:
    assert kind.parse_key(key) == expected


def test_object_key_uses_kind_prefix_and_extension() -> None:
    assert AudioKind.SFX.object_key("sfx_7") == "sfx_outputs/sfx_7.mp3"
    assert AudioKind.MUSIC.object_key("music_7") == "music_outputs/music_7.wav"
    assert AudioKind.SFX.media_type == "audio/mpeg"
    assert AudioKind.MUSIC.media_type == "audio/wav"


def test_pair_from_numeric_id() -> None:
    pair = Pair.from_numeric_id("7")

    assert pair.as_dict() == {"id": "7", "sfx_id": "sfx_7", "music_id": "music_7"}
    assert pair.combination_id == "sfx_7_music_7"
    assert combination_id("sfx_1", "music_2") == "sfx_1_music_2"


def test_submission_record_accepts_zero_timestamp() -> None:
    record = SubmissionRecord.from_payload("sfx_7", "music_7", 0)

    assert record.timestamp == 0.0
    assert record.as_dict() == {"sfx_id": "sfx_7", "music_id": "music_7", "timestamp": 0.0}


@pytest.mark.parametrize(
    ("sfx_id", "music_id", "timestamp", "field"),
    [
        (None, "music_7", 1.0, "sfx_id"),
        ("", "music_7", 1.0, "sfx_id"),
        ("sfx_7", None, 1.0, "music_id"),
        ("sfx_7", "music_7", None, "timestamp"),
    ],
)
def test_submission_record_reports_missing_fields(sfx_id, music_id, timestamp, field) -> None:
    with pytest.raises(MissingFieldError) as exc_info:
        SubmissionRecord.from_payload(sfx_id, music_id, timestamp)

    assert exc_info.value.field == field


@pytest.mark.parametrize(
    ("sfx_id", "music_id", "timestamp", "field"),
    [
        ("music_7", "music_7", 1.0, "sfx_id"),
        ("sfx_7", "../music_7", 1.0, "music_id"),
        ("sfx_7", "music_7", -0.5, "timestamp"),
        ("sfx_7", "music_7", float("nan"), "timestamp"),
        ("sfx_7", "music_7", True, "timestamp"),
        ("sfx_7", "music_7", "12.3", "timestamp"),
    ],
)
def test_submission_record_rejects_malformed_fields(sfx_id, music_id, timestamp, field) -> None:
    with pytest.raises(InvalidFieldError) as exc_info:
        SubmissionRecord.from_payload(sfx_id, music_id, timestamp)

    assert exc_info.value.field == field
