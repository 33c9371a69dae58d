"""
Ledger store contract and implementations.

A store is the external collaborator of the lifecycle core: current values
by key plus an immutable, commit-ordered history per key.
"""

from .interface import HistoryEntry, LedgerStore, StoreError
from .memory import InMemoryLedgerStore
from .jsonl import JsonlLedgerStore

__all__ = [
    "HistoryEntry",
    "LedgerStore",
    "StoreError",
    "InMemoryLedgerStore",
    "JsonlLedgerStore",
]
