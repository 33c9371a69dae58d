"""
Invocation dispatch for the document ledger.

An operation name plus an ordered list of string arguments is routed
through a table built once when the contract is constructed. Every call
returns a Response: a success payload, or a failure code with a message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Mapping, Sequence

from .adapter import RecordStoreAdapter
from .audit_log import log_invocation
from .errors import INVALID, LedgerError
from .service import DocumentLifecycleService
from .store.interface import LedgerStore

logger = logging.getLogger(__name__)

OK = 200
ERROR = 500

Operation = Callable[[Sequence[str]], bytes]


@dataclass(frozen=True)
class Response:
    """Outcome of one invocation."""

    status: int
    payload: bytes = b""
    code: str = ""
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == OK

    @classmethod
    def success(cls, payload: bytes | None = None) -> Response:
        return cls(status=OK, payload=payload or b"")

    @classmethod
    def error(cls, code: str, message: str = "") -> Response:
        return cls(status=ERROR, code=code, message=message or code)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        result: dict[str, Any] = {"status": self.status}
        if self.ok:
            result["payload"] = self.payload.decode("utf-8", errors="replace")
        else:
            result["code"] = self.code
            result["message"] = self.message
        return result


class DocumentContract:
    """
    Operation-name → handler table over a lifecycle service.

    The table is fixed at construction and read-only afterwards.
    """

    def __init__(
        self,
        service: DocumentLifecycleService,
        *,
        audit_dir: Path | None = None,
    ):
        """
        Initialize the contract.

        Args:
            service: Lifecycle service the operations route to
            audit_dir: If set, append one audit line per invocation there
        """
        self.service = service
        self.audit_dir = audit_dir
        self.operations: Mapping[str, Operation] = MappingProxyType(
            {
                "initLedger": self.init_ledger,
                "getDocument": service.get,
                "registerDocument": service.register,
                "updateDocument": service.update,
                "revokeDocument": service.revoke,
            }
        )

    @classmethod
    def for_store(cls, store: LedgerStore, *, audit_dir: Path | None = None) -> DocumentContract:
        """Wire adapter, service and contract over ``store``."""
        return cls(DocumentLifecycleService(RecordStoreAdapter(store)), audit_dir=audit_dir)

    def init_ledger(self, args: Sequence[str]) -> bytes:
        """initLedger: nothing to seed."""
        return b""

    def invoke(self, function: str, args: Sequence[str]) -> Response:
        """
        Dispatch ``function`` with ``args``.

        Lifecycle failures become error responses carrying their code.
        Anything else propagates.
        """
        operation = self.operations.get(function)
        if operation is None:
            response = Response.error(INVALID, f"Invalid function name: {function}")
        else:
            try:
                response = Response.success(operation(list(args)))
            except LedgerError as e:
                logger.warning("%s failed: %s %s", function, e.code, e.message)
                response = Response.error(e.code, e.message)

        if self.audit_dir is not None:
            # The ledger write is already committed; an audit failure must not mask it.
            try:
                log_invocation(
                    self.audit_dir,
                    function,
                    args[0] if args else None,
                    response.status,
                    response.code,
                    metadata={"argc": len(args)},
                )
            except OSError as e:
                logger.warning("audit append for %s failed: %s", function, e)
        return response

    def list_keys(self) -> list[str]:
        """Keys that currently hold a registered document."""
        return self.service.adapter.keys()
