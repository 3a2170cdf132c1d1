"""Domain models for pair discovery and submission workflows."""

from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from sfx_rater.domain.errors import InvalidFieldError, MissingFieldError


class AudioKind(str, Enum):
    """Kinds of audio assets served for rating."""

    SFX = "sfx"
    MUSIC = "music"

    @property
    def prefix(self) -> str:
        return f"{self.value}_outputs/"

    @property
    def extension(self) -> str:
        return "mp3" if self is AudioKind.SFX else "wav"

    @property
    def media_type(self) -> str:
        return "audio/mpeg" if self is AudioKind.SFX else "audio/wav"

    def asset_id(self, numeric_id: str) -> str:
        return f"{self.value}_{numeric_id}"

    def object_key(self, asset_id: str) -> str:
        """Storage key for an asset identifier such as ``sfx_7``."""

        return f"{self.prefix}{asset_id}.{self.extension}"

    def parse_key(self, key: str) -> str | None:
        """Return the numeric id encoded in ``key`` or ``None`` when it is not an asset of this kind."""

        match = _KEY_PATTERNS[self].match(key)
        return match.group(1) if match else None

    def validate_asset_id(self, value: Any, *, field: str) -> str:
        if value is None or value == "":
            raise MissingFieldError(field)
        if not isinstance(value, str) or not _ASSET_ID_PATTERNS[self].match(value):
            raise InvalidFieldError(field, f"expected an identifier like '{self.value}_1'")
        return value


_KEY_PATTERNS = {
    kind: re.compile(rf"^{re.escape(kind.prefix)}{kind.value}_(\d+)\.{kind.extension}$") for kind in AudioKind
}
_ASSET_ID_PATTERNS = {kind: re.compile(rf"^{kind.value}_\d+$") for kind in AudioKind}


def combination_id(sfx_id: str, music_id: str) -> str:
    """Key identifying a rated (sfx, music) combination."""

    return f"{sfx_id}_{music_id}"


@dataclass(frozen=True, slots=True)
class AudioAsset:
    """Raw audio blob fetched from object storage."""

    asset_id: str
    kind: AudioKind
    raw_bytes: bytes

    @property
    def media_type(self) -> str:
        return self.kind.media_type


@dataclass(frozen=True, slots=True)
class Pair:
    """A sound effect and music track sharing the same numeric id."""

    id: str
    sfx_id: str
    music_id: str

    @classmethod
    def from_numeric_id(cls, numeric_id: str) -> Pair:
        return cls(
            id=numeric_id,
            sfx_id=AudioKind.SFX.asset_id(numeric_id),
            music_id=AudioKind.MUSIC.asset_id(numeric_id),
        )

    @property
    def combination_id(self) -> str:
        return combination_id(self.sfx_id, self.music_id)

    def as_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class AudioPair:
    """Both blobs of a pair, ready to be handed to a player."""

    sfx: AudioAsset
    music: AudioAsset


@dataclass(frozen=True, slots=True)
class SubmissionRecord:
    """A single rating: where in the music track the sound effect belongs."""

    sfx_id: str
    music_id: str
    timestamp: float

    @property
    def combination_id(self) -> str:
        return combination_id(self.sfx_id, self.music_id)

    @classmethod
    def from_payload(cls, sfx_id: Any, music_id: Any, timestamp: Any) -> SubmissionRecord:
        """Validate raw request values; presence is checked before shape."""

        for field, value in (("sfx_id", sfx_id), ("music_id", music_id)):
            if value is None or value == "":
                raise MissingFieldError(field)
        if timestamp is None:
            raise MissingFieldError("timestamp")

        sfx_id = AudioKind.SFX.validate_asset_id(sfx_id, field="sfx_id")
        music_id = AudioKind.MUSIC.validate_asset_id(music_id, field="music_id")
        return cls(sfx_id=sfx_id, music_id=music_id, timestamp=_validate_timestamp(timestamp))

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def _validate_timestamp(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidFieldError("timestamp", "expected a number of seconds")
    seconds = float(value)
    if not math.isfinite(seconds) or seconds < 0.0:
        raise InvalidFieldError("timestamp", "expected a finite, non-negative number of seconds")
    return seconds
