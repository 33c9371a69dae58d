"""
In-memory ledger store.

Used by tests and as the ephemeral backend. Data is lost when the process
exits.
"""

from __future__ import annotations

from typing import Iterator

from ..util import now_timestamp
from .interface import HistoryEntry, StoreError, TransactionScope


class InMemoryLedgerStore(TransactionScope):
    """Dict-backed store keeping every committed version per key."""

    def __init__(self) -> None:
        super().__init__()
        self._values: dict[str, bytes] = {}
        self._history: dict[str, list[HistoryEntry]] = {}

    def get(self, key: str) -> bytes | None:
        with self._lock:
            return self._values.get(key)

    def put(self, key: str, value: bytes) -> None:
        if not isinstance(value, (bytes, bytearray)):
            raise StoreError("value must be bytes")
        with self._lock:
            seconds, nanos = now_timestamp()
            entry = HistoryEntry(
                transaction_id=self._next_tx_id(),
                value=bytes(value),
                timestamp_seconds=seconds,
                timestamp_nanos=nanos,
            )
            self._history.setdefault(key, []).append(entry)
            self._values[key] = entry.value

    def delete(self, key: str) -> None:
        with self._lock:
            seconds, nanos = now_timestamp()
            entry = HistoryEntry(
                transaction_id=self._next_tx_id(),
                value=None,
                timestamp_seconds=seconds,
                timestamp_nanos=nanos,
                is_delete=True,
            )
            self._history.setdefault(key, []).append(entry)
            self._values.pop(key, None)

    def history_of(self, key: str) -> Iterator[HistoryEntry]:
        with self._lock:
            entries = list(self._history.get(key, ()))
        yield from entries

    def keys(self) -> list[str]:
        """Keys that currently hold a live value."""
        with self._lock:
            return sorted(self._values)
