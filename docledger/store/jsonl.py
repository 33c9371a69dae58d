"""
Append-only JSON Lines ledger store.

Every write appends one line to ``ledger.jsonl``; lines are never modified.
Current values are projected from the file into a lazily built index, and
history is streamed straight from the file.

Line format::

    {"tx_id": "...", "key": "...", "value": "<utf-8 text>" | null,
     "timestamp": {"seconds": 1700000000, "nanos": 0}, "is_delete": false}

Values that are not valid UTF-8 are written as ``value_b64`` instead.
"""

from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Any, Iterator

from ..util import now_timestamp
from .interface import HistoryEntry, StoreError, TransactionScope


LEDGER_FILENAME = "ledger.jsonl"


def _encode_record(key: str, entry: HistoryEntry) -> str:
    record: dict[str, Any] = {
        "tx_id": entry.transaction_id,
        "key": key,
        "timestamp": {"seconds": entry.timestamp_seconds, "nanos": entry.timestamp_nanos},
        "is_delete": entry.is_delete,
    }
    if entry.value is None:
        record["value"] = None
    else:
        try:
            record["value"] = entry.value.decode("utf-8")
        except UnicodeDecodeError:
            record["value_b64"] = base64.b64encode(entry.value).decode("ascii")
    return json.dumps(record, separators=(",", ":"), ensure_ascii=False)


def _decode_record(line: str) -> tuple[str, HistoryEntry]:
    data = json.loads(line)
    if not isinstance(data, dict):
        raise ValueError("record is not a JSON object")
    if not isinstance(data.get("key"), str) or not isinstance(data.get("tx_id"), str):
        raise ValueError("record needs string 'key' and 'tx_id'")
    if "value_b64" in data:
        value: bytes | None = base64.b64decode(data["value_b64"], validate=True)
    elif data.get("value") is None:
        value = None
    elif isinstance(data["value"], str):
        value = data["value"].encode("utf-8")
    else:
        raise ValueError("'value' must be a string or null")
    ts = data.get("timestamp", {})
    if not isinstance(ts, dict):
        raise ValueError("'timestamp' must be an object")
    entry = HistoryEntry(
        transaction_id=data["tx_id"],
        value=value,
        timestamp_seconds=int(ts.get("seconds", 0)),
        timestamp_nanos=int(ts.get("nanos", 0)),
        is_delete=bool(data.get("is_delete", False)),
    )
    return data["key"], entry


class JsonlLedgerStore(TransactionScope):
    """
    File-backed store.

    INVARIANT: This class NEVER modifies existing ledger lines.
    The only write path is _append().

    Assumes a single writer per ledger directory: the current-value index
    is built once per instance and only sees this instance's own appends.
    """

    def __init__(self, ledger_dir: Path):
        """
        Initialize the store.

        Args:
            ledger_dir: Directory holding ledger.jsonl (created on first write)
        """
        super().__init__()
        self.ledger_dir = ledger_dir
        self.ledger_path = ledger_dir / LEDGER_FILENAME

        # Current value per key (lazy-loaded)
        self._current: dict[str, bytes | None] = {}
        self._indexed: bool = False

    def _ensure_dir(self) -> None:
        self.ledger_dir.mkdir(parents=True, exist_ok=True)

    def _ensure_indexed(self) -> None:
        """Build the current-value index on first use. Idempotent."""
        if self._indexed:
            return
        for key, entry in self.iter_records():
            self._current[key] = entry.value
        self._indexed = True

    def _append(self, key: str, entry: HistoryEntry) -> None:
        line = _encode_record(key, entry)
        try:
            self._ensure_dir()
            with self.ledger_path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            raise StoreError(f"Cannot append to {self.ledger_path}: {e}") from e
        if self._indexed:
            self._current[key] = entry.value

    def iter_records(self) -> Iterator[tuple[str, HistoryEntry]]:
        """
        Iterate over every (key, entry) in the ledger.

        Records are returned in append order. The file handle is released
        when the generator is exhausted or closed.
        """
        if not self.ledger_path.exists():
            return
        try:
            with self.ledger_path.open("r", encoding="utf-8") as f:
                for lineno, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        yield _decode_record(line)
                    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                        raise StoreError(f"Corrupt ledger line {lineno} in {self.ledger_path}: {e}") from e
        except OSError as e:
            raise StoreError(f"Cannot read {self.ledger_path}: {e}") from e

    def get(self, key: str) -> bytes | None:
        with self._lock:
            self._ensure_indexed()
            return self._current.get(key)

    def put(self, key: str, value: bytes) -> None:
        if not isinstance(value, (bytes, bytearray)):
            raise StoreError("value must be bytes")
        with self._lock:
            self._ensure_indexed()
            seconds, nanos = now_timestamp()
            self._append(
                key,
                HistoryEntry(
                    transaction_id=self._next_tx_id(),
                    value=bytes(value),
                    timestamp_seconds=seconds,
                    timestamp_nanos=nanos,
                ),
            )

    def delete(self, key: str) -> None:
        with self._lock:
            self._ensure_indexed()
            seconds, nanos = now_timestamp()
            self._append(
                key,
                HistoryEntry(
                    transaction_id=self._next_tx_id(),
                    value=None,
                    timestamp_seconds=seconds,
                    timestamp_nanos=nanos,
                    is_delete=True,
                ),
            )

    def history_of(self, key: str) -> Iterator[HistoryEntry]:
        records = self.iter_records()
        try:
            for record_key, entry in records:
                if record_key == key:
                    yield entry
        finally:
            records.close()

    def keys(self) -> list[str]:
        """Keys that currently hold a live value."""
        with self._lock:
            self._ensure_indexed()
            return sorted(k for k, v in self._current.items() if v is not None)
