"""Document ledger CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

from rich.console import Console
from rich.table import Table

from ..audit_log import read_audit_log
from ..contract import DocumentContract, Response
from ..document import REGISTER_ARGUMENTS


def _report_failure(response: Response) -> int:
    err = Console(stderr=True)
    err.print(f"{response.code}: {response.message}", style="bold red", markup=False)
    return 1


def _fetch(contract: DocumentContract, key: str, *, full: bool) -> tuple[Response, dict[str, Any] | None]:
    args = [key, "full"] if full else [key]
    response = contract.invoke("getDocument", args)
    if not response.ok:
        return response, None
    return response, json.loads(response.payload)


def run_invoke(contract: DocumentContract, function: str, args: Sequence[str], *, output_json: bool = False) -> int:
    response = contract.invoke(function, list(args))
    if output_json:
        print(json.dumps(response.to_dict(), indent=2))
        return 0 if response.ok else 1
    if not response.ok:
        return _report_failure(response)
    if response.payload:
        print(response.payload.decode("utf-8", errors="replace"))
    return 0


def run_register(contract: DocumentContract, key: str, values: Sequence[str]) -> int:
    response = contract.invoke("registerDocument", [key, *values])
    if not response.ok:
        return _report_failure(response)
    Console().print(f"Registered: {response.payload.decode('utf-8')}", style="green", markup=False)
    return 0


def run_update(contract: DocumentContract, key: str, patch_json: str) -> int:
    response = contract.invoke("updateDocument", [key, patch_json])
    if not response.ok:
        return _report_failure(response)
    Console().print(f"Updated: {response.payload.decode('utf-8')}", style="green", markup=False)
    return 0


def run_revoke(contract: DocumentContract, key: str, reason: str) -> int:
    response = contract.invoke("revokeDocument", [key, reason])
    if not response.ok:
        return _report_failure(response)
    Console().print(f"Revoked: {response.payload.decode('utf-8')}", style="yellow", markup=False)
    return 0


def run_list(contract: DocumentContract) -> int:
    keys = contract.list_keys()
    if not keys:
        Console().print("No documents registered.")
        return 0

    table = Table(title="Documents")
    table.add_column("key", style="cyan", no_wrap=True)
    for key in keys:
        table.add_row(key)
    console = Console()
    console.print(table)
    console.print(f"Documents: {len(keys)} total")
    return 0


def _history_table(key: str, history: list[dict[str, Any]]) -> Table:
    table = Table(title=f"History: {key}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("TxId", style="cyan", no_wrap=True)
    table.add_column("Timestamp")
    table.add_column("Deleted")
    table.add_column("revoked")
    table.add_column("revokeReason")

    for idx, item in enumerate(history, start=1):
        value = item.get("Value") or {}
        table.add_row(
            str(idx),
            item.get("TxId", ""),
            item.get("Timestamp", ""),
            item.get("IsDelete", ""),
            "" if item.get("Value") is None else str(value.get("revoked", "")).lower(),
            "" if item.get("Value") is None else str(value.get("revokeReason", "")),
        )
    return table


def run_show(contract: DocumentContract, key: str, *, full: bool = False, output_json: bool = False) -> int:
    response, data = _fetch(contract, key, full=full)
    if data is None:
        return _report_failure(response)

    if output_json:
        print(json.dumps(data, indent=2))
        return 0

    console = Console()
    table = Table(title=f"Document: {key}", show_header=False)
    table.add_column("field", style="cyan", no_wrap=True)
    table.add_column("value")
    for tag in REGISTER_ARGUMENTS:
        if tag in data:
            value = data[tag]
            table.add_row(tag, str(value).lower() if isinstance(value, bool) else str(value))
    table.add_row("id", str(data.get("id", key)))
    console.print(table)

    if data.get("revoked"):
        console.print(f"REVOKED: {data.get('revokeReason', '')}", style="bold red", markup=False)

    if full:
        console.print(_history_table(key, data.get("History", [])))
    return 0


def run_history(contract: DocumentContract, key: str, *, output_json: bool = False) -> int:
    response, data = _fetch(contract, key, full=True)
    if data is None:
        return _report_failure(response)

    history = data.get("History", [])
    if output_json:
        print(json.dumps(history, indent=2))
        return 0

    console = Console()
    console.print(_history_table(key, history))
    console.print(f"Versions: {len(history)} total")
    return 0


def run_audit(ledger_dir: Path, *, last_n: int | None = None, output_json: bool = False) -> int:
    entries = read_audit_log(ledger_dir, last_n=last_n)

    if output_json:
        print(json.dumps([e.to_dict() for e in entries], indent=2))
        return 0

    if not entries:
        Console().print("No invocations recorded.")
        return 0

    table = Table(title="Invocations")
    table.add_column("timestamp", style="dim", no_wrap=True)
    table.add_column("function", style="magenta")
    table.add_column("key", style="cyan")
    table.add_column("status")
    table.add_column("code")
    for e in entries:
        table.add_row(
            e.timestamp,
            e.function,
            e.key or "",
            str(e.status),
            e.code,
        )
    Console().print(table)
    return 0
