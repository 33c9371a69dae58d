"""
Record store adapter.

Translates lifecycle reads and writes into calls on a LedgerStore. Bytes
pass through uninterpreted; the serialization format belongs to the
lifecycle service. Store failures surface as StoreFailure.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from .errors import StoreFailure
from .store.interface import HistoryEntry, LedgerStore, StoreError


class RecordStoreAdapter:
    """Thin wrapper over a LedgerStore with a uniform failure type."""

    def __init__(self, store: LedgerStore):
        self.store = store

    @contextmanager
    def transaction(self) -> Iterator[str]:
        """Scope one unit of work against the store; yields the transaction id."""
        with self.store.transaction() as tx_id:
            yield tx_id

    def get(self, key: str) -> bytes | None:
        """Current stored bytes, or None when the key holds no value."""
        try:
            value = self.store.get(key)
        except StoreError as e:
            raise StoreFailure(f"get({key!r}) failed: {e}") from e
        # An empty value is treated the same as an absent one.
        return value or None

    def exists(self, key: str) -> bool:
        return self.get(key) is not None

    def keys(self) -> list[str]:
        try:
            return self.store.keys()
        except StoreError as e:
            raise StoreFailure(f"keys() failed: {e}") from e

    def put(self, key: str, value: bytes) -> None:
        try:
            self.store.put(key, value)
        except StoreError as e:
            raise StoreFailure(f"put({key!r}) failed: {e}") from e

    @contextmanager
    def history(self, key: str) -> Iterator[Iterator[HistoryEntry]]:
        """
        Open the history cursor for ``key``.

        The cursor is closed on every exit path, including early return
        and errors raised by the consumer.
        """
        try:
            cursor = self.store.history_of(key)
        except StoreError as e:
            raise StoreFailure(f"history_of({key!r}) failed: {e}") from e
        entries = _translate_errors(key, cursor)
        try:
            yield entries
        finally:
            entries.close()
            close = getattr(cursor, "close", None)
            if close is not None:
                close()


def _translate_errors(key: str, cursor: Iterator[HistoryEntry]) -> Iterator[HistoryEntry]:
    try:
        yield from cursor
    except StoreError as e:
        raise StoreFailure(f"history_of({key!r}) failed: {e}") from e
