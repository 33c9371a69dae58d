"""
Tests for the document lifecycle service.

Validates the lifecycle contract against an in-memory store:
- register/get round trip, id injection, no History outside full mode
- existence invariants (AlreadyExists, NotFound)
- update patch semantics and revoke overwrite behavior
- full-mode history: one entry per write, store order, per-version values
"""

from __future__ import annotations

import json

import pytest

from docledger.adapter import RecordStoreAdapter
from docledger.errors import (
    ALREADY_EXIST_ERROR,
    NOT_FOUND_ERROR,
    AlreadyExists,
    InvalidArguments,
    NotFound,
    SerializationFailure,
)
from docledger.service import DocumentLifecycleService, history_item
from docledger.store import HistoryEntry, InMemoryLedgerStore


def _get(service: DocumentLifecycleService, *args: str) -> dict:
    return json.loads(service.get(list(args)))


# -----------------------------------------------------------------------------
# register / get
# -----------------------------------------------------------------------------


def test_register_returns_key(service: DocumentLifecycleService, passport_args: list[str]) -> None:
    assert service.register(passport_args) == b"doc1"


def test_register_then_get_round_trip(service: DocumentLifecycleService, passport_args: list[str]) -> None:
    service.register(passport_args)

    data = _get(service, "doc1")

    assert data == {
        "name": "Passport",
        "issuerId": "IssuerA",
        "issuedAt": "2024-01-01",
        "description": "desc",
        "expiresAt": "2030-01-01",
        "issuedTo": "Alice",
        "revoked": False,
        "revokeReason": "",
        "documentData": "payload",
        "registeredAt": "2024-01-01",
        "id": "doc1",
    }
    assert "History" not in data
    assert list(data)[-1] == "id"


def test_register_parses_revoked_literal(service: DocumentLifecycleService, passport_args: list[str]) -> None:
    passport_args[7] = "true"
    service.register(passport_args)

    assert _get(service, "doc1")["revoked"] is True


def test_register_existing_key_fails_and_keeps_value(
    service: DocumentLifecycleService, passport_args: list[str]
) -> None:
    service.register(passport_args)
    before = service.get(["doc1"])

    changed = list(passport_args)
    changed[1] = "Visa"
    with pytest.raises(AlreadyExists) as exc_info:
        service.register(changed)

    assert exc_info.value.code == ALREADY_EXIST_ERROR
    assert service.get(["doc1"]) == before


@pytest.mark.parametrize("count", [0, 1, 10, 12])
def test_register_wrong_arg_count(service: DocumentLifecycleService, count: int) -> None:
    with pytest.raises(InvalidArguments):
        service.register(["x"] * count)


@pytest.mark.parametrize("args", [[], ["doc1", "full", "extra"]])
def test_get_wrong_arg_count(service: DocumentLifecycleService, args: list[str]) -> None:
    with pytest.raises(InvalidArguments):
        service.get(args)


@pytest.mark.parametrize(
    "operation,args",
    [
        ("get", ["ghost"]),
        ("get", ["ghost", "full"]),
        ("update", ["ghost", "{}"]),
        ("revoke", ["ghost", "reason"]),
    ],
)
def test_missing_key_fails_not_found(service: DocumentLifecycleService, operation: str, args: list[str]) -> None:
    with pytest.raises(NotFound) as exc_info:
        getattr(service, operation)(args)
    assert exc_info.value.code == NOT_FOUND_ERROR


def test_get_non_full_mode_argument_is_ignored(service: DocumentLifecycleService, passport_args: list[str]) -> None:
    service.register(passport_args)

    assert "History" not in _get(service, "doc1", "brief")


def test_get_corrupt_stored_value(memory_store: InMemoryLedgerStore, service: DocumentLifecycleService) -> None:
    memory_store.put("bad", b"{not json")

    with pytest.raises(SerializationFailure):
        service.get(["bad"])


# -----------------------------------------------------------------------------
# update
# -----------------------------------------------------------------------------


def test_update_changes_only_patched_fields(service: DocumentLifecycleService, passport_args: list[str]) -> None:
    service.register(passport_args)
    before = _get(service, "doc1")

    assert service.update(["doc1", '{"description": "renewed", "expiresAt": "2035-01-01"}']) == b"doc1"

    after = _get(service, "doc1")
    assert after["description"] == "renewed"
    assert after["expiresAt"] == "2035-01-01"
    for tag in before:
        if tag not in {"description", "expiresAt"}:
            assert after[tag] == before[tag]


def test_update_ignores_unknown_keys(service: DocumentLifecycleService, passport_args: list[str]) -> None:
    service.register(passport_args)
    before = _get(service, "doc1")

    service.update(["doc1", '{"colour": "blue", "nested": {"a": 1}}'])

    assert _get(service, "doc1") == before


def test_update_can_unrevoke(service: DocumentLifecycleService, passport_args: list[str]) -> None:
    service.register(passport_args)
    service.revoke(["doc1", "forged"])

    service.update(["doc1", '{"revoked": false}'])

    data = _get(service, "doc1")
    assert data["revoked"] is False
    assert data["revokeReason"] == "forged"


@pytest.mark.parametrize("patch", ["not json", "[1, 2]", '"text"'])
def test_update_rejects_non_object_patch(
    service: DocumentLifecycleService, passport_args: list[str], patch: str
) -> None:
    service.register(passport_args)

    with pytest.raises(InvalidArguments):
        service.update(["doc1", patch])


def test_update_mistyped_value_writes_nothing(service: DocumentLifecycleService, passport_args: list[str]) -> None:
    service.register(passport_args)

    with pytest.raises(InvalidArguments):
        service.update(["doc1", '{"revoked": "yes"}'])

    assert len(_get(service, "doc1", "full")["History"]) == 1


@pytest.mark.parametrize("args", [["doc1"], ["doc1", "{}", "extra"]])
def test_update_wrong_arg_count(service: DocumentLifecycleService, args: list[str]) -> None:
    with pytest.raises(InvalidArguments):
        service.update(args)


# -----------------------------------------------------------------------------
# revoke
# -----------------------------------------------------------------------------


def test_revoke_twice_keeps_last_reason(service: DocumentLifecycleService, passport_args: list[str]) -> None:
    service.register(passport_args)

    assert service.revoke(["doc1", "r1"]) == b"doc1"
    service.revoke(["doc1", "r2"])

    data = _get(service, "doc1")
    assert data["revoked"] is True
    assert data["revokeReason"] == "r2"


@pytest.mark.parametrize("args", [["doc1"], ["doc1", "a", "b"]])
def test_revoke_wrong_arg_count(service: DocumentLifecycleService, args: list[str]) -> None:
    with pytest.raises(InvalidArguments):
        service.revoke(args)


def test_example_scenario(service: DocumentLifecycleService, passport_args: list[str]) -> None:
    assert service.register(passport_args) == b"doc1"
    assert _get(service, "doc1")["revoked"] is False

    service.revoke(["doc1", "forged"])

    data = _get(service, "doc1")
    assert data["revoked"] is True
    assert data["revokeReason"] == "forged"
    assert data["id"] == "doc1"


# -----------------------------------------------------------------------------
# full history
# -----------------------------------------------------------------------------


def test_full_history_grows_with_each_write(service: DocumentLifecycleService, passport_args: list[str]) -> None:
    service.register(passport_args)
    assert len(_get(service, "doc1", "full")["History"]) == 1

    service.update(["doc1", '{"description": "v2"}'])
    assert len(_get(service, "doc1", "full")["History"]) == 2

    service.revoke(["doc1", "forged"])
    data = _get(service, "doc1", "full")
    history = data["History"]

    assert len(history) == 3
    assert [item["IsDelete"] for item in history] == ["false", "false", "false"]
    assert history[0]["Value"]["description"] == "desc"
    assert history[1]["Value"]["description"] == "v2"
    assert history[2]["Value"]["revoked"] is True
    assert history[2]["Value"]["revokeReason"] == "forged"
    assert len({item["TxId"] for item in history}) == 3
    assert list(data)[-2:] == ["History", "id"]


def test_full_history_matches_store_order(memory_store: InMemoryLedgerStore, service: DocumentLifecycleService, passport_args: list[str]) -> None:
    service.register(passport_args)
    service.update(["doc1", '{"name": "Renamed"}'])

    tx_ids = [entry.transaction_id for entry in memory_store.history_of("doc1")]
    history = _get(service, "doc1", "full")["History"]

    assert [item["TxId"] for item in history] == tx_ids


def test_full_history_renders_deletions_as_null(
    memory_store: InMemoryLedgerStore, service: DocumentLifecycleService, passport_args: list[str]
) -> None:
    service.register(passport_args)
    memory_store.delete("doc1")
    service.register(passport_args)

    history = _get(service, "doc1", "full")["History"]

    assert [item["IsDelete"] for item in history] == ["false", "true", "false"]
    assert history[1]["Value"] is None


def test_history_item_timestamp_is_human_readable() -> None:
    entry = HistoryEntry(
        transaction_id="tx-1",
        value=b'{"name":"A"}',
        timestamp_seconds=1704067200,
        timestamp_nanos=500_000_000,
    )

    assert history_item(entry) == {
        "TxId": "tx-1",
        "Value": {"name": "A"},
        "Timestamp": "2024-01-01 00:00:00.5 +0000 UTC",
        "IsDelete": "false",
    }


def test_get_closes_history_cursor(passport_args: list[str]) -> None:
    closed: list[str] = []

    class TrackingStore(InMemoryLedgerStore):
        def history_of(self, key):
            try:
                yield from super().history_of(key)
            finally:
                closed.append(key)

    store = TrackingStore()
    service = DocumentLifecycleService(RecordStoreAdapter(store))
    service.register(passport_args)

    service.get(["doc1", "full"])

    assert closed == ["doc1"]
