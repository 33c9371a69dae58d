"""
Store contract consumed by the record store adapter.

The store owns durability, commit ordering and transaction identity. The
lifecycle core never reorders or rewrites what a store returns.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Protocol

from ..util import new_ulid


class StoreError(Exception):
    """Raised by a store when a read or write cannot be completed."""


@dataclass(frozen=True)
class HistoryEntry:
    """
    One committed version of a key (or a deletion marker).

    Produced only by a store's history query; never written directly.
    """

    transaction_id: str
    value: bytes | None  # None when the entry is a deletion
    timestamp_seconds: int
    timestamp_nanos: int
    is_delete: bool = False


class LedgerStore(Protocol):
    """Key-value ledger with an immutable per-key change history."""

    def get(self, key: str) -> bytes | None:
        """Current value at ``key``, or None if absent or deleted."""
        ...

    def put(self, key: str, value: bytes) -> None:
        """Write a new version of ``key``."""
        ...

    def delete(self, key: str) -> None:
        """Record a deletion marker for ``key``."""
        ...

    def history_of(self, key: str) -> Iterator[HistoryEntry]:
        """
        Lazily iterate every version of ``key`` in commit order.

        The returned iterator may hold an open cursor; callers close it
        (``close()``) when they stop early.
        """
        ...

    def transaction(self) -> Any:
        """Context manager scoping one unit of work; yields its transaction id."""
        ...

    def keys(self) -> list[str]:
        """Keys that currently hold a live value, sorted."""
        ...


class TransactionScope:
    """
    In-process transaction scope shared by the bundled stores.

    A re-entrant lock serializes units of work on one store instance, and
    every write inside a scope is recorded under the scope's transaction id.
    Writes outside any scope get a fresh id each.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._tx_id: str | None = None

    @contextmanager
    def transaction(self) -> Iterator[str]:
        with self._lock:
            if self._tx_id is not None:
                # Nested scope joins the outer unit of work.
                yield self._tx_id
                return
            self._tx_id = new_ulid()
            try:
                yield self._tx_id
            finally:
                self._tx_id = None

    def _next_tx_id(self) -> str:
        return self._tx_id if self._tx_id is not None else new_ulid()
