"""
Document record and its external field table.

The wire format is a JSON object keyed by the external field tags below.
Selective update walks the same table, so a tag that is not listed here is
never read from a patch and never written to the ledger.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from typing import Any, Mapping, Sequence

from .errors import InvalidArguments, SerializationFailure


@dataclass(frozen=True)
class FieldSpec:
    """One entry of the field table: external tag, declared type, attribute."""

    tag: str
    type: type
    attr: str

    def coerce(self, value: Any) -> Any:
        """
        Coerce a decoded JSON value to the declared type.

        Booleans must be JSON booleans, strings must be JSON strings, and
        integer fields take any JSON number truncated toward zero.
        """
        if self.type is bool:
            if isinstance(value, bool):
                return value
        elif self.type is int:
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return int(value)
        elif self.type is str:
            if isinstance(value, str):
                return value
        raise InvalidArguments(
            f"Field '{self.tag}' expects {self.type.__name__}, got {type(value).__name__}"
        )


# Ordered: this is also the on-wire key order of a serialized Document.
DOCUMENT_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("name", str, "name"),
    FieldSpec("issuerId", str, "issuer_id"),
    FieldSpec("issuedAt", str, "issued_at"),
    FieldSpec("description", str, "description"),
    FieldSpec("expiresAt", str, "expires_at"),
    FieldSpec("issuedTo", str, "issued_to"),
    FieldSpec("revoked", bool, "revoked"),
    FieldSpec("revokeReason", str, "revoke_reason"),
    FieldSpec("documentData", str, "document_data"),
    FieldSpec("registeredAt", str, "registered_at"),
)

FIELDS_BY_TAG: dict[str, FieldSpec] = {spec.tag: spec for spec in DOCUMENT_FIELDS}

# Positional contract of registerDocument after the key.
# Reordering these is a breaking wire change.
REGISTER_ARGUMENTS: tuple[str, ...] = tuple(spec.tag for spec in DOCUMENT_FIELDS)


@dataclass(frozen=True)
class Document:
    """A registered document. Every field is a scalar."""

    name: str = ""
    issuer_id: str = ""
    issued_at: str = ""
    description: str = ""
    expires_at: str = ""
    issued_to: str = ""
    revoked: bool = False
    revoke_reason: str = ""
    document_data: str = ""
    registered_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dict keyed by external tags."""
        return {spec.tag: getattr(self, spec.attr) for spec in DOCUMENT_FIELDS}

    def to_bytes(self) -> bytes:
        """Serialize to compact JSON bytes (the stored representation)."""
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False).encode("utf-8")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Document:
        """
        Reconstruct from a decoded JSON object.

        Missing tags keep their zero value and unknown keys are ignored.
        """
        values: dict[str, Any] = {}
        for tag, raw in data.items():
            spec = FIELDS_BY_TAG.get(tag)
            if spec is None:
                continue
            values[spec.attr] = spec.coerce(raw)
        return cls(**values)

    @classmethod
    def from_bytes(cls, raw: bytes) -> Document:
        """Parse stored bytes; raise SerializationFailure on corrupt data."""
        try:
            data = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SerializationFailure(f"Stored value is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise SerializationFailure("Stored value is not a JSON object")
        try:
            return cls.from_dict(data)
        except InvalidArguments as e:
            raise SerializationFailure(f"Stored value has a mistyped field: {e.message}") from e

    @classmethod
    def from_register_args(cls, values: Sequence[str]) -> Document:
        """
        Build a Document from the positional registerDocument values.

        ``revoked`` is true only for the literal string "true".
        """
        if len(values) != len(REGISTER_ARGUMENTS):
            raise InvalidArguments(
                f"Incorrect number of document fields. Expecting {len(REGISTER_ARGUMENTS)}"
            )
        parsed: dict[str, Any] = {}
        for spec, raw in zip(DOCUMENT_FIELDS, values):
            parsed[spec.attr] = (raw == "true") if spec.type is bool else raw
        return cls(**parsed)

    def apply_patch(self, patch: Mapping[str, Any]) -> Document:
        """
        Return a copy with every recognized tag in ``patch`` replaced.

        Unknown tags are ignored. A mistyped value raises InvalidArguments
        before any field changes.
        """
        changes: dict[str, Any] = {}
        for tag, raw in patch.items():
            spec = FIELDS_BY_TAG.get(tag)
            if spec is None:
                continue
            changes[spec.attr] = spec.coerce(raw)
        return replace(self, **changes)

    def revoke(self, reason: str) -> Document:
        """Return a revoked copy carrying ``reason``."""
        return replace(self, revoked=True, revoke_reason=reason)

