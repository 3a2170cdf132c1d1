"""Error taxonomy shared by every layer."""

from __future__ import annotations


class RaterError(Exception):
    """Base class for errors raised by rater workflows."""

    code = "rater_error"


class ClientError(RaterError):
    """The request is missing data or carries malformed data."""

    code = "invalid_request"


class MissingFieldError(ClientError):
    code = "missing_field"

    def __init__(self, field: str) -> None:
        super().__init__(f"Missing required field: {field}")
        self.field = field


class InvalidFieldError(ClientError):
    code = "invalid_field"

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"Invalid value for {field}: {reason}")
        self.field = field


class AlreadySubmitted(RaterError):
    """A response for this combination was already recorded."""

    code = "already_submitted"

    def __init__(self, combination_id: str) -> None:
        super().__init__(f"Already submitted: {combination_id}")
        self.combination_id = combination_id


class ObjectNotFound(RaterError):
    """The requested storage object does not exist."""

    code = "not_found"

    def __init__(self, key: str) -> None:
        super().__init__(f"Object not found: {key}")
        self.key = key


class StorageFailure(RaterError):
    """Object storage could not complete the request."""

    code = "storage_failure"


class AssetNotFound(StorageFailure):
    """An audio blob referenced by a pair is missing."""

    code = "asset_not_found"

    def __init__(self, key: str) -> None:
        super().__init__(f"Audio asset not found: {key}")
        self.key = key
