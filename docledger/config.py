"""
Runtime configuration.

Settings come from ``DOCLEDGER_*`` environment variables; the CLI options
fall back to the same variables, so either route produces one LedgerConfig.

- DOCLEDGER_HOME: ledger directory (default ``./.docledger``)
- DOCLEDGER_BACKEND: ``jsonl`` (default) or ``memory``
- DOCLEDGER_LOG_LEVEL: logging level name (default ``WARNING``)
- DOCLEDGER_AUDIT: ``0`` disables the invocation audit trail
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from rich.console import Console
from rich.logging import RichHandler

from .contract import DocumentContract
from .store import InMemoryLedgerStore, JsonlLedgerStore, LedgerStore

ENV_PREFIX = "DOCLEDGER_"
BACKENDS = ("jsonl", "memory")
DEFAULT_LEDGER_DIR = Path(".docledger")


@dataclass
class LedgerConfig:
    """Where the ledger lives and how the process reports on it."""

    ledger_dir: Path = field(default_factory=lambda: DEFAULT_LEDGER_DIR)
    backend: str = "jsonl"
    log_level: str = "WARNING"
    audit: bool = True

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown backend: {self.backend} (expected one of {', '.join(BACKENDS)})")
        self.log_level = self.log_level.upper()

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> LedgerConfig:
        """Build a config from ``DOCLEDGER_*`` variables (os.environ by default)."""
        env = os.environ if env is None else env
        return cls(
            ledger_dir=Path(env.get(ENV_PREFIX + "HOME", str(DEFAULT_LEDGER_DIR))),
            backend=env.get(ENV_PREFIX + "BACKEND", "jsonl"),
            log_level=env.get(ENV_PREFIX + "LOG_LEVEL", "WARNING"),
            audit=env.get(ENV_PREFIX + "AUDIT", "1") not in {"0", "false", "no"},
        )

    def open_store(self) -> LedgerStore:
        if self.backend == "memory":
            return InMemoryLedgerStore()
        return JsonlLedgerStore(self.ledger_dir)

    def build_contract(self, store: LedgerStore | None = None) -> DocumentContract:
        """Construct the dispatcher once for this process."""
        audit_dir = self.ledger_dir if (self.audit and self.backend == "jsonl") else None
        return DocumentContract.for_store(store or self.open_store(), audit_dir=audit_dir)


def configure_logging(level: str = "WARNING") -> None:
    """Route package logs to stderr through rich."""
    handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root = logging.getLogger("docledger")
    root.handlers[:] = [handler]
    root.setLevel(level.upper())
    root.propagate = False
