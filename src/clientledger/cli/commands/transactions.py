"""Transaction review commands."""

import click

from clientledger.cli.error_handling import handle_domain_error, require_accountant
from clientledger.domain.entities import SortMode
from clientledger.domain.errors import DomainError
from clientledger.domain.transaction import TransactionService

SORT_CHOICES = [mode.value for mode in SortMode]


@click.group()
def transactions_group():
    """Review classified transactions."""
    pass


@transactions_group.command("list")
@click.argument("client_id", type=int)
@click.argument("file_id", type=int)
@click.option(
    "--sort",
    type=click.Choice(SORT_CHOICES),
    default=SortMode.CREATED_DESC.value,
    help="Sort order (default: created_desc)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show the classification reason and feedback")
@click.pass_context
def list_transactions(ctx, client_id: int, file_id: int, sort: str, verbose: bool):
    """List the transactions of a file."""
    accountant_id = require_accountant(ctx)
    service = TransactionService(ctx.obj["db"])

    try:
        transactions = service.list_by_file(accountant_id, client_id, file_id, sort)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo(f"{'ID':<6} {'Time':<20} {'Amount':>12}  {'Category':<25} Narration")
    click.echo("-" * 100)
    for view in transactions:
        txn = view.transaction
        when = txn.tx_timestamp.strftime("%Y-%m-%d %H:%M") if txn.tx_timestamp else ""
        amount = f"{txn.tx_amount:,.2f}" if txn.tx_amount is not None else ""
        category = view.effective_category_name or "Uncategorized"
        if txn.updated_category_id is not None:
            category += " *"
        click.echo(f"{txn.id:<6} {when:<20} {amount:>12}  {category:<25} {txn.tx_narration or ''}")
        if verbose:
            if txn.reason:
                click.echo(f"       Reason: {txn.reason}")
            if txn.feedback_for_update:
                click.echo(f"       Feedback: {txn.feedback_for_update}")


@transactions_group.command("set-category")
@click.argument("client_id", type=int)
@click.argument("file_id", type=int)
@click.argument("transaction_id", type=int)
@click.argument("category_id", type=int, required=False)
@click.option("--clear", is_flag=True, help="Remove the override so the AI category applies again")
@click.option("--feedback", help="Note explaining the correction")
@click.pass_context
def set_category(
    ctx,
    client_id: int,
    file_id: int,
    transaction_id: int,
    category_id: int | None,
    clear: bool,
    feedback: str | None,
):
    """Override the category of one transaction.

    Examples:
        clientledger transactions set-category 1 2 15 4 --feedback "Office rent"
        clientledger transactions set-category 1 2 15 --clear
    """
    accountant_id = require_accountant(ctx)
    if (category_id is None) != clear:
        click.echo("Error: Give either CATEGORY_ID or --clear.", err=True)
        ctx.exit(1)

    service = TransactionService(ctx.obj["db"])
    try:
        current = service.list_by_file(accountant_id, client_id, file_id)
        feedback_map = {transaction_id: feedback} if feedback else None
        patches = service.pending_patches(current, {transaction_id: category_id}, accountant_id, feedback_map)
        if not patches:
            click.echo(f"Transaction {transaction_id} already has that category")
            return
        service.apply_overrides(accountant_id, client_id, file_id, patches)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    action = "Cleared category override" if clear else "Updated category"
    click.echo(f"{action} of transaction {transaction_id}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transactions_group, name="transactions")
