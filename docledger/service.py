"""
Document lifecycle service.

Implements register, get, update and revoke on top of the record store
adapter. Each operation takes the ordered string arguments of the
invocation contract (key first) and returns the response payload as bytes.

State per key::

    Absent --register--> Live --update/revoke--> Live

``revoked`` is an attribute of a live document, not a separate state:
update can still change a revoked document. There is no delete.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence

from .adapter import RecordStoreAdapter
from .document import REGISTER_ARGUMENTS, Document
from .errors import AlreadyExists, InvalidArguments, NotFound, SerializationFailure
from .store.interface import HistoryEntry
from .util import format_timestamp

logger = logging.getLogger(__name__)

FULL_MODE = "full"


def _dump(obj: Any) -> bytes:
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def _load_object(raw: bytes, what: str) -> dict[str, Any]:
    try:
        data = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SerializationFailure(f"{what} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise SerializationFailure(f"{what} is not a JSON object")
    return data


def _expect_args(args: Sequence[str], *counts: int) -> None:
    if len(args) not in counts:
        expected = " or ".join(str(c) for c in counts)
        raise InvalidArguments(f"Incorrect number of arguments. Expecting {expected}")


def history_item(entry: HistoryEntry) -> dict[str, Any]:
    """Render one history entry as it appears in a full get response."""
    if entry.is_delete or entry.value is None:
        value = None
    else:
        try:
            value = json.loads(entry.value)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SerializationFailure(f"History value in {entry.transaction_id} is not valid JSON: {e}") from e
    return {
        "TxId": entry.transaction_id,
        "Value": value,
        "Timestamp": format_timestamp(entry.timestamp_seconds, entry.timestamp_nanos),
        "IsDelete": "true" if entry.is_delete else "false",
    }


class DocumentLifecycleService:
    """
    Stateless lifecycle operations over a record store adapter.

    Every operation runs inside one adapter transaction so the existence
    check and the write share a consistency scope.
    """

    def __init__(self, adapter: RecordStoreAdapter):
        self.adapter = adapter

    def _load(self, key: str) -> bytes:
        raw = self.adapter.get(key)
        if raw is None:
            raise NotFound(f"No document at key '{key}'")
        return raw

    def register(self, args: Sequence[str]) -> bytes:
        """
        registerDocument: key followed by the ten document fields.

        Fails with AlreadyExists when the key already holds a value.
        """
        _expect_args(args, 1 + len(REGISTER_ARGUMENTS))
        key = args[0]
        document = Document.from_register_args(args[1:])

        with self.adapter.transaction() as tx_id:
            if self.adapter.exists(key):
                raise AlreadyExists(f"Document already registered at key '{key}'")
            self.adapter.put(key, document.to_bytes())

        logger.info("registered document %s (tx %s)", key, tx_id)
        return key.encode("utf-8")

    def get(self, args: Sequence[str]) -> bytes:
        """
        getDocument: key, optionally followed by "full".

        The response is the stored object plus ``id``; full mode also adds
        the ``History`` array in the store's order.
        """
        _expect_args(args, 1, 2)
        key = args[0]
        full = len(args) == 2 and args[1] == FULL_MODE

        with self.adapter.transaction():
            result = _load_object(self._load(key), f"Document at '{key}'")
            if full:
                with self.adapter.history(key) as entries:
                    result["History"] = [history_item(entry) for entry in entries]

        result.pop("id", None)
        result["id"] = key
        return _dump(result)

    def update(self, args: Sequence[str]) -> bytes:
        """
        updateDocument: key and a JSON object patch.

        Recognized field tags are replaced one by one with type coercion;
        unknown tags are ignored. Writing appends a new history version.
        """
        _expect_args(args, 2)
        key, patch_json = args[0], args[1]

        with self.adapter.transaction() as tx_id:
            document = Document.from_bytes(self._load(key))
            try:
                patch = json.loads(patch_json)
            except json.JSONDecodeError as e:
                raise InvalidArguments(f"Error converting patch to JSON: {e}") from e
            if not isinstance(patch, dict):
                raise InvalidArguments("Patch must be a JSON object")
            updated = document.apply_patch(patch)
            self.adapter.put(key, updated.to_bytes())

        if document.revoked and not updated.revoked:
            logger.warning("update cleared revocation of %s (tx %s)", key, tx_id)
        logger.info("updated document %s (tx %s)", key, tx_id)
        return key.encode("utf-8")

    def revoke(self, args: Sequence[str]) -> bytes:
        """revokeDocument: key and a free-text reason. Revoking again overwrites the reason."""
        _expect_args(args, 2)
        key, reason = args[0], args[1]

        with self.adapter.transaction() as tx_id:
            document = Document.from_bytes(self._load(key))
            self.adapter.put(key, document.revoke(reason).to_bytes())

        logger.info("revoked document %s (tx %s)", key, tx_id)
        return key.encode("utf-8")
