"""
Invocation audit trail.

One JSON line per dispatched invocation is appended to ``audit.log`` in the
ledger directory. The trail records what was asked and how it ended; it
never stores document payloads.
"""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


AUDIT_FILENAME = "audit.log"


@dataclass
class AuditEntry:
    """A single audit log entry."""
    timestamp: str
    function: str
    key: str | None
    status: int
    code: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "AuditEntry":
        """Create from dictionary."""
        return cls(
            timestamp=data["timestamp"],
            function=data["function"],
            key=data.get("key"),
            status=int(data["status"]),
            code=data.get("code", ""),
            metadata=data.get("metadata", {}),
        )


def get_audit_log_path(ledger_dir: Path) -> Path:
    """Get the path to the audit log file."""
    return ledger_dir / AUDIT_FILENAME


def log_invocation(
    ledger_dir: Path,
    function: str,
    key: str | None,
    status: int,
    code: str = "",
    metadata: dict[str, Any] | None = None,
) -> AuditEntry:
    """
    Append an invocation to the audit log.

    Args:
        ledger_dir: Directory holding the ledger files
        function: Dispatched operation name (e.g., "registerDocument")
        key: Document key the call addressed, if any
        status: Response status (200 or 500)
        code: Failure code, empty on success
        metadata: Additional context (e.g., argument count)

    Returns:
        The created audit entry
    """
    entry = AuditEntry(
        timestamp=datetime.now(timezone.utc).isoformat(),
        function=function,
        key=key,
        status=status,
        code=code,
        metadata=metadata or {},
    )

    log_path = get_audit_log_path(ledger_dir)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    with log_path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(entry.to_dict()) + "\n")

    return entry


def read_audit_log(ledger_dir: Path, last_n: int | None = None) -> list[AuditEntry]:
    """
    Read entries from the audit log.

    Args:
        ledger_dir: Directory holding the ledger files
        last_n: If specified, return only the last N entries

    Returns:
        List of audit entries (oldest first)
    """
    log_path = get_audit_log_path(ledger_dir)
    if not log_path.exists():
        return []

    entries = []
    with log_path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                try:
                    entries.append(AuditEntry.from_dict(json.loads(line)))
                except json.JSONDecodeError:
                    continue  # Skip malformed lines

    if last_n is not None:
        return entries[-last_n:]
    return entries
