"""
Failure taxonomy for ledger operations.

Every failure carries a stable machine-readable ``code`` so callers can
branch on it without parsing message text.
"""

from __future__ import annotations

NOT_FOUND_ERROR = "NOT_FOUND_ERROR"
ALREADY_EXIST_ERROR = "ALREADY_EXIST_ERROR"
INVALID = "INVALID"
STORE_FAILURE = "STORE_FAILURE"
SERIALIZATION_FAILURE = "SERIALIZATION_FAILURE"


class LedgerError(Exception):
    """Base class for all lifecycle failures surfaced to callers."""

    code: str = "ERROR"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class InvalidArguments(LedgerError):
    """Malformed argument count or shape."""

    code = INVALID


class NotFound(LedgerError):
    """Operation requires an existing key and none is present."""

    code = NOT_FOUND_ERROR


class AlreadyExists(LedgerError):
    """Register on a key that already holds a value."""

    code = ALREADY_EXIST_ERROR


class StoreFailure(LedgerError):
    """The underlying store call failed."""

    code = STORE_FAILURE


class SerializationFailure(LedgerError):
    """Stored bytes could not be decoded as a document."""

    code = SERIALIZATION_FAILURE
