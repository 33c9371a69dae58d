"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from docledger.adapter import RecordStoreAdapter
from docledger.contract import DocumentContract
from docledger.service import DocumentLifecycleService
from docledger.store import InMemoryLedgerStore, JsonlLedgerStore


PASSPORT_ARGS = [
    "doc1",
    "Passport",
    "IssuerA",
    "2024-01-01",
    "desc",
    "2030-01-01",
    "Alice",
    "false",
    "",
    "payload",
    "2024-01-01",
]


@pytest.fixture
def passport_args() -> list[str]:
    """Valid 11-argument registerDocument call for key doc1."""
    return list(PASSPORT_ARGS)


@pytest.fixture
def memory_store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def jsonl_store(tmp_path: Path) -> JsonlLedgerStore:
    return JsonlLedgerStore(tmp_path / ".docledger")


@pytest.fixture
def service(memory_store: InMemoryLedgerStore) -> DocumentLifecycleService:
    return DocumentLifecycleService(RecordStoreAdapter(memory_store))


@pytest.fixture
def contract(memory_store: InMemoryLedgerStore) -> DocumentContract:
    return DocumentContract.for_store(memory_store)
