"""Transaction export command."""

from pathlib import Path

import click

from clientledger.cli.error_handling import handle_domain_error, require_accountant
from clientledger.domain.entities import SortMode
from clientledger.domain.errors import DomainError
from clientledger.domain.export import export_transactions_csv
from clientledger.domain.transaction import TransactionService


@click.command("export")
@click.argument("client_id", type=int)
@click.argument("file_id", type=int)
@click.option("--output", "-o", type=click.Path(dir_okay=False), required=True, help="CSV file to write")
@click.option(
    "--sort",
    type=click.Choice([mode.value for mode in SortMode]),
    default=SortMode.CREATED_DESC.value,
    help="Row order (default: created_desc)",
)
@click.pass_context
def export(ctx, client_id: int, file_id: int, output: str, sort: str):
    """Export a file's reviewed transactions to CSV."""
    accountant_id = require_accountant(ctx)
    service = TransactionService(ctx.obj["db"])

    try:
        service.clients.get_file(accountant_id, client_id, file_id)
        transactions = service.list_by_file(accountant_id, client_id, file_id, sort)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    path = export_transactions_csv(transactions, Path(output))
    click.echo(f"Exported {len(transactions)} transaction(s) to {path}")


def register_commands(cli):
    """Register export command with main CLI."""
    cli.add_command(export)
