"""CLI entrypoint for docledger."""

import sys
from pathlib import Path

import click

from . import __version__
from .config import BACKENDS, LedgerConfig, configure_logging
from .document import REGISTER_ARGUMENTS


def _contract(ctx: click.Context):
    return ctx.obj["contract"]


@click.group()
@click.version_option(__version__, prog_name="docledger")
@click.option(
    "--ledger-dir",
    "-d",
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    envvar="DOCLEDGER_HOME",
    default=None,
    help="Ledger directory (defaults to ./.docledger)",
)
@click.option(
    "--backend",
    type=click.Choice(list(BACKENDS)),
    envvar="DOCLEDGER_BACKEND",
    default=None,
    help="Store backend (jsonl persists, memory is per-process)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    envvar="DOCLEDGER_LOG_LEVEL",
    default=None,
    help="Log level for diagnostics on stderr",
)
@click.option("--no-audit", is_flag=True, help="Do not append invocations to audit.log")
@click.pass_context
def cli(
    ctx: click.Context,
    ledger_dir: Path | None,
    backend: str | None,
    log_level: str | None,
    no_audit: bool,
) -> None:
    """docledger - Document lifecycle ledger.

    Register, update, revoke and inspect documents kept in an
    append-only ledger with full per-key history.
    """
    ctx.ensure_object(dict)
    try:
        config = LedgerConfig.from_env()
    except ValueError as e:
        raise click.ClickException(str(e))
    if ledger_dir is not None:
        config.ledger_dir = ledger_dir
    if backend is not None:
        config.backend = backend
    if log_level is not None:
        config.log_level = log_level.upper()
    if no_audit:
        config.audit = False

    configure_logging(config.log_level)
    ctx.obj["config"] = config
    ctx.obj["contract"] = config.build_contract()


@cli.command()
@click.argument("function", type=str)
@click.argument("args", nargs=-1, type=str)
@click.option("--json", "output_json", is_flag=True, help="Output the response envelope as JSON")
@click.pass_context
def invoke(ctx: click.Context, function: str, args: tuple[str, ...], output_json: bool) -> None:
    """Call a contract operation with raw string arguments.

    FUNCTION is one of initLedger, getDocument, registerDocument,
    updateDocument, revokeDocument.
    """
    from .commands.document_cmd import run_invoke

    sys.exit(run_invoke(_contract(ctx), function, args, output_json=output_json))


@cli.command()
@click.argument("key", type=str)
@click.argument("values", nargs=len(REGISTER_ARGUMENTS), type=str, metavar=" ".join(t.upper() for t in REGISTER_ARGUMENTS))
@click.pass_context
def register(ctx: click.Context, key: str, values: tuple[str, ...]) -> None:
    """Register a new document at KEY.

    Field values follow the fixed positional order; REVOKED is true only
    for the literal string "true".
    """
    from .commands.document_cmd import run_register

    sys.exit(run_register(_contract(ctx), key, values))


@cli.command()
@click.argument("key", type=str)
@click.option("--full", is_flag=True, help="Include the full version history")
@click.option("--json", "output_json", is_flag=True, help="Output the raw response as JSON")
@click.pass_context
def show(ctx: click.Context, key: str, full: bool, output_json: bool) -> None:
    """Show the current state of the document at KEY."""
    from .commands.document_cmd import run_show

    sys.exit(run_show(_contract(ctx), key, full=full, output_json=output_json))


@cli.command()
@click.argument("key", type=str)
@click.argument("patch_json", type=str)
@click.pass_context
def update(ctx: click.Context, key: str, patch_json: str) -> None:
    """Patch fields of the document at KEY with a JSON object.

    Example: docledger update doc1 '{"description": "renewed"}'
    """
    from .commands.document_cmd import run_update

    sys.exit(run_update(_contract(ctx), key, patch_json))


@cli.command()
@click.argument("key", type=str)
@click.argument("reason", type=str)
@click.pass_context
def revoke(ctx: click.Context, key: str, reason: str) -> None:
    """Revoke the document at KEY with REASON."""
    from .commands.document_cmd import run_revoke

    sys.exit(run_revoke(_contract(ctx), key, reason))


@cli.command(name="list")
@click.pass_context
def list_documents(ctx: click.Context) -> None:
    """List the keys of all registered documents."""
    from .commands.document_cmd import run_list

    sys.exit(run_list(_contract(ctx)))


@cli.command()
@click.argument("key", type=str)
@click.option("--json", "output_json", is_flag=True, help="Output history entries as JSON")
@click.pass_context
def history(ctx: click.Context, key: str, output_json: bool) -> None:
    """List every committed version of the document at KEY."""
    from .commands.document_cmd import run_history

    sys.exit(run_history(_contract(ctx), key, output_json=output_json))


@cli.command()
@click.option("--last", "last_n", type=int, default=None, help="Show only the last N invocations")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def audit(ctx: click.Context, last_n: int | None, output_json: bool) -> None:
    """Show the invocation audit trail."""
    from .commands.document_cmd import run_audit

    sys.exit(run_audit(ctx.obj["config"].ledger_dir, last_n=last_n, output_json=output_json))


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
